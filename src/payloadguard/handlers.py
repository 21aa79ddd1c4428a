"""FastAPI exception handlers for payload failures.

A payload that fails validation means the server built a bad response, so
every PayloadError becomes a 500 carrying the standard error envelope:
{"errors": [{"code": "...", "message": "..."}]}.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from payloadguard.exceptions import ContentSchemaViolationError, PayloadError
from payloadguard.logging import get_logger

logger = get_logger(__name__)


def _error_json(exc: PayloadError) -> dict[str, object]:
    """Build the standard error envelope as a dict for JSONResponse."""
    return exc.to_response().model_dump(by_alias=True)


async def content_violation_handler(request: Request, exc: ContentSchemaViolationError) -> JSONResponse:
    """Return 500 with every violation the response content produced."""
    logger.error(
        "response_content_rejected",
        path=request.url.path,
        codes=[error.code for error in exc.errors],
    )
    return JSONResponse(status_code=500, content=_error_json(exc))


async def payload_error_handler(request: Request, exc: PayloadError) -> JSONResponse:
    """Return 500 for configuration problems: bad format, broken schema, unset content."""
    logger.error("payload_error", error=exc.message, path=request.url.path)
    return JSONResponse(status_code=500, content=_error_json(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ContentSchemaViolationError, content_violation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PayloadError, payload_error_handler)  # type: ignore[arg-type]
