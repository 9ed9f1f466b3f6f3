from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from callfn.core.errors import BadRequest, FunctionNotFound, Unauthorized
from callfn.functions.context import CallContext
from callfn.functions.registry import FunctionRegistry
from callfn.schemas.invoke import ErrorResponse, InvokeRequest

DEFAULT_DISPATCH_PATH = "/__dispatch"
JSON_MEDIA_TYPE = "application/json; charset=utf-8"
EMPTY_SUCCESS = "{}\n"

default_logger = logging.getLogger("callfn.dispatch")


def _check_authorization(request: Request, security_token: str | None) -> None:
    if not security_token:
        return
    provided = request.headers.get("Authorization", "")
    expected = f"Bearer {security_token}"
    if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        raise Unauthorized(
            "wrong authorization token", headers={"WWW-Authenticate": "Bearer"}
        )


def _json_response(content: bytes) -> Response:
    return Response(content=content + b"\n", media_type=JSON_MEDIA_TYPE)


def _application_error(
    logger: logging.Logger, fnname: str, exc: Exception
) -> Response:
    logger.error(
        "Function %s returned an error: %s",
        fnname,
        exc,
        extra={"fnname": fnname, "error": str(exc)},
    )
    body = ErrorResponse(error=str(exc)).model_dump_json().encode("utf-8")
    return _json_response(body)


def build_router(
    registry: FunctionRegistry,
    *,
    security_token: str | None = None,
    logger: logging.Logger | None = None,
    path: str = DEFAULT_DISPATCH_PATH,
) -> APIRouter:
    """
    Build the router holding the single dispatch endpoint.

    Structural failures (credentials, envelope, lookup, encoding) are raised
    as HTTP errors. Exceptions raised by the called function are reported
    with status 200 and an ``{"error": ...}`` body.
    """

    log = logger or default_logger
    router = APIRouter()

    @router.post(path, tags=["dispatch"])
    async def dispatch(request: Request) -> Response:
        _check_authorization(request, security_token)

        body = await request.body()
        try:
            invoke = InvokeRequest.model_validate_json(body)
        except ValidationError:
            raise BadRequest("invalid request") from None

        log.info("Function called: %s", invoke.fnname, extra={"fnname": invoke.fnname})

        descriptor = registry.resolve(invoke.fnname)
        if descriptor is None:
            raise FunctionNotFound(f'function "{invoke.fnname}" not found')

        ctx = CallContext(
            function_name=invoke.fnname,
            accountability=invoke.accountability,
            trigger=invoke.trigger,
        )

        try:
            payload = descriptor.decode_payload(invoke.payload)
        except BadRequest as exc:
            log.error(
                "Cannot decode request payload for %s: %s (payload=%r, target=%r)",
                invoke.fnname,
                exc.__cause__,
                invoke.payload,
                descriptor.payload_type,
            )
            raise

        try:
            result = await descriptor.invoke(ctx, payload)
        except Exception as exc:  # noqa: BLE001
            return _application_error(log, invoke.fnname, exc)

        if not descriptor.shape.returns_value:
            return PlainTextResponse(EMPTY_SUCCESS)
        return _json_response(descriptor.encode_result(result))

    return router
