"""Router that builds Starlette (and therefore FastAPI) responses."""

from starlette.responses import Response

from payloadguard.formats import Format


class StarletteRouter:
    """Build a ``starlette.responses.Response`` from a finalized payload.

    ``media_type`` is used only when the payload has no Content-Type header
    of its own.
    """

    def __init__(self, format: Format | str = Format.JSON) -> None:
        self.media_type = Format.detect(format).media_type

    def build_response(self, body: str | bytes, status_code: int | str, headers: dict[str, str]) -> Response:
        media_type = None if "Content-Type" in headers else self.media_type
        return Response(
            content=body,
            status_code=int(status_code),
            headers=headers,
            media_type=media_type,
        )
