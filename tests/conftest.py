from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.responses import Response

from payloadguard.handlers import register_exception_handlers
from payloadguard.payload import ResponsePayload
from payloadguard.routers.starlette import StarletteRouter
from tests.factories import RESPONSE_XSD, USER_SCHEMA, RecordingRouter


@pytest.fixture
def router() -> RecordingRouter:
    return RecordingRouter()


@pytest.fixture
def app() -> FastAPI:
    """Small API whose handlers build every response through ResponsePayload."""
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/users/{user_id}")
    async def get_user(user_id: int) -> Response:
        payload = ResponsePayload(StarletteRouter("json"), "json", 200)
        payload.schema = USER_SCHEMA
        # Non-positive ids simulate a handler that forgot a required field
        payload.content = {"id": user_id, "name": "ann"} if user_id > 0 else {"name": "ghost"}
        return payload.finalize()

    @app.post("/users")
    async def create_user() -> Response:
        payload = ResponsePayload(StarletteRouter("json"), "json", "201")
        payload.schema = USER_SCHEMA
        payload.content_type = "application/vnd.user+json"
        payload.location = "/users/42"
        payload.content = {"id": 42, "name": "ann"}
        return payload.finalize()

    @app.get("/xml/users/{user_id}")
    async def get_user_xml(user_id: int) -> Response:
        payload = ResponsePayload(StarletteRouter("xml"), "xml", 200)
        payload.schema = RESPONSE_XSD
        payload.content = {"id": user_id, "name": "ann"}
        return payload.finalize()

    @app.get("/broken")
    async def broken() -> Response:
        payload = ResponsePayload(StarletteRouter("json"), "json", 200)
        payload.schema = '{"type": "object", "properties": {"id": {"$ref": "#/definitions/missing"}}}'
        payload.content = {"id": 1}
        return payload.finalize()

    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """HTTP client talking to the test app in-process."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
