from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from callfn import RemoteFunctionError, mount
from callfn.client import DispatchClient, build_envelope
from callfn.demo import registry


@pytest.fixture
def http() -> TestClient:
    app = FastAPI()
    mount(app, registry, security_token="s3cr3t")
    return TestClient(app)


def make_client(http: TestClient, token: str | None = "s3cr3t") -> DispatchClient:
    return DispatchClient("http://testserver", token=token, client=http)


def test_build_envelope_omits_missing_fields() -> None:
    assert build_envelope("Noop") == {"fnname": "Noop"}
    assert build_envelope(
        "Echo", {"Bar": 1}, accountability={"user": "u"}, trigger={"event": "e"}
    ) == {
        "fnname": "Echo",
        "payload": {"Bar": 1},
        "accountability": {"user": "u"},
        "trigger": {"event": "e"},
    }


def test_invoke_returns_the_decoded_value(http: TestClient) -> None:
    client = make_client(http)
    assert client.invoke("Echo", {"Bar": 1}) == {"Bar": 2}
    assert client.invoke("NoParamsWithReturn") == "foo-value"


def test_invoke_empty_success(http: TestClient) -> None:
    assert make_client(http).invoke("NoParamsNoReturn") == {}


def test_invoke_raises_remote_errors(http: TestClient) -> None:
    with pytest.raises(RemoteFunctionError) as info:
        make_client(http).invoke("Error")
    assert info.value.fnname == "Error"
    assert info.value.message == "error message"


def test_invoke_forwards_accountability(http: TestClient) -> None:
    result = make_client(http).invoke(
        "Accountability", accountability={"user": "u-1", "userAgent": "flow"}
    )
    assert result == {"user": "u-1", "userAgent": "flow", "admin": False, "app": False}


@pytest.mark.parametrize(
    ("token", "fnname", "status"),
    [
        (None, "NoParamsNoReturn", 401),
        ("nope", "NoParamsNoReturn", 401),
        ("s3cr3t", "DoesNotExist", 404),
    ],
)
def test_structural_errors_raise_http_errors(
    http: TestClient, token: str | None, fnname: str, status: int
) -> None:
    with pytest.raises(httpx.HTTPStatusError) as info:
        make_client(http, token=token).invoke(fnname)
    assert info.value.response.status_code == status
