from __future__ import annotations

from fastapi import HTTPException, status


class DispatchError(HTTPException):
    """Structural failure of a dispatch request (auth, parsing, lookup, encoding)."""

    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, *, headers: dict[str, str] | None = None) -> None:
        super().__init__(status_code=self.http_status, detail=detail, headers=headers)


class Unauthorized(DispatchError):
    """Raised when the bearer credential is missing or does not match."""

    http_status = status.HTTP_401_UNAUTHORIZED


class BadRequest(DispatchError):
    """Raised when the envelope or the function payload cannot be decoded."""

    http_status = status.HTTP_400_BAD_REQUEST


class FunctionNotFound(DispatchError):
    """Raised when no function is registered under the requested name."""

    http_status = status.HTTP_404_NOT_FOUND


class InternalError(DispatchError):
    """Raised when the function result cannot be encoded."""

    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR


class ConfigurationDefect(TypeError):
    """Raised at registration time for duplicate names or unsupported signatures."""


class RemoteFunctionError(RuntimeError):
    """Raised by the client when the remote function reported an error."""

    def __init__(self, fnname: str, message: str) -> None:
        super().__init__(message)
        self.fnname = fnname
        self.message = message
