from __future__ import annotations

from typing import Any, Mapping

import httpx

from callfn.api.dispatch import DEFAULT_DISPATCH_PATH
from callfn.core.errors import RemoteFunctionError


def _build_headers(token: str | None) -> dict[str, str]:
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def build_envelope(
    fnname: str,
    payload: Any = None,
    *,
    accountability: Mapping[str, Any] | None = None,
    trigger: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    envelope: dict[str, Any] = {"fnname": fnname}
    if accountability is not None:
        envelope["accountability"] = dict(accountability)
    if trigger is not None:
        envelope["trigger"] = dict(trigger)
    if payload is not None:
        envelope["payload"] = payload
    return envelope


class DispatchClient:
    """
    Call functions on a remote dispatch endpoint.

    Structural failures surface as :class:`httpx.HTTPStatusError`; errors
    reported by the function itself raise :class:`RemoteFunctionError`.
    Nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        path: str = DEFAULT_DISPATCH_PATH,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url
        self.token = token
        self.path = path
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def __enter__(self):
        if self._client is None:
            self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def _url(self) -> str:
        if self._owns_client:
            return self.path
        return f"{self.base_url.rstrip('/')}/{self.path.lstrip('/')}"

    def invoke(
        self,
        fnname: str,
        payload: Any = None,
        *,
        accountability: Mapping[str, Any] | None = None,
        trigger: Mapping[str, Any] | None = None,
    ) -> Any:
        if self._client is None:
            # quick usage without context manager
            with self as c:
                return c.invoke(
                    fnname, payload, accountability=accountability, trigger=trigger
                )

        envelope = build_envelope(
            fnname, payload, accountability=accountability, trigger=trigger
        )
        r = self._client.post(self._url(), json=envelope, headers=_build_headers(self.token))
        r.raise_for_status()

        data = r.json()
        if (
            r.headers.get("content-type", "").startswith("application/json")
            and isinstance(data, dict)
            and set(data) == {"error"}
        ):
            raise RemoteFunctionError(fnname, str(data["error"]))
        return data
