import pytest
from fastapi import HTTPException
from starlette.requests import Request

from ghosthuman.utils.request_body import read_json_object


def _make_request(messages: list[dict], content_type: str = "application/json") -> Request:
    queue = list(messages)

    async def receive() -> dict:
        if queue:
            return queue.pop(0)
        return {"type": "http.disconnect"}

    scope = {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/v1/humanize",
        "raw_path": b"/v1/humanize",
        "query_string": b"",
        "root_path": "",
        "headers": [(b"content-type", content_type.encode("ascii"))],
        "client": ("127.0.0.1", 12345),
        "server": ("testserver", 80),
    }
    return Request(scope, receive)


def _body(raw: bytes) -> list[dict]:
    return [{"type": "http.request", "body": raw, "more_body": False}]


@pytest.mark.asyncio
async def test_read_json_object_valid_object():
    request = _make_request(_body(b'{"text":"hello","tone":"friendly"}'))

    payload = await read_json_object(request)

    assert payload == {"text": "hello", "tone": "friendly"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("raw", "detail"),
    [
        (b"{", "Invalid JSON body"),
        (b"\xc3\x28", "Invalid JSON body"),
        (b'"just a string"', "JSON body must be an object"),
        (b"  ", "Request body is required"),
    ],
)
async def test_read_json_object_rejects(raw, detail):
    request = _make_request(_body(raw))

    with pytest.raises(HTTPException) as exc:
        await read_json_object(request)

    assert exc.value.status_code == 400
    assert exc.value.detail == detail


@pytest.mark.asyncio
async def test_read_json_object_client_disconnect():
    request = _make_request([{"type": "http.disconnect"}])

    with pytest.raises(HTTPException) as exc:
        await read_json_object(request)

    assert exc.value.status_code == 499
