"""Integration tests: FastAPI endpoints answering through ResponsePayload."""

import pytest
from httpx import AsyncClient
from starlette.responses import Response

from payloadguard.routers.starlette import StarletteRouter


@pytest.mark.asyncio
async def test_valid_payload_is_sent(client: AsyncClient) -> None:
    resp = await client.get("/users/1")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    assert resp.json() == {"id": 1, "name": "ann"}


@pytest.mark.asyncio
async def test_configured_headers_and_status_are_sent(client: AsyncClient) -> None:
    resp = await client.post("/users")

    assert resp.status_code == 201
    assert resp.headers["content-type"] == "application/vnd.user+json"
    assert resp.headers["location"] == "/users/42"
    assert resp.json() == {"id": 42, "name": "ann"}


@pytest.mark.asyncio
async def test_schema_violation_returns_error_envelope(client: AsyncClient) -> None:
    resp = await client.get("/users/0")

    assert resp.status_code == 500
    assert resp.json() == {
        "errors": [
            {
                "message": ": 'id' is a required property",
                "code": "required",
                "context": {
                    "jsonPointer": "",
                    "value": {"name": "ghost"},
                    "constraints": {"required": ["id"]},
                },
            }
        ]
    }


@pytest.mark.asyncio
async def test_xml_payload_is_sent(client: AsyncClient) -> None:
    resp = await client.get("/xml/users/3")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/xml"
    assert resp.text == '<?xml version="1.0"?>\n<response><id>3</id><name>ann</name></response>\n'


@pytest.mark.asyncio
async def test_configuration_error_returns_error_envelope(client: AsyncClient) -> None:
    resp = await client.get("/broken")

    assert resp.status_code == 500
    [error] = resp.json()["errors"]
    assert error["code"] == "unresolvable-reference"
    assert error["context"] is None


def test_starlette_router_builds_response() -> None:
    response = StarletteRouter("xml").build_response("<a/>", "202", {"Location": "/a/1"})

    assert isinstance(response, Response)
    assert response.status_code == 202
    assert response.body == b"<a/>"
    assert response.headers["location"] == "/a/1"
    assert response.headers["content-type"] == "application/xml"
