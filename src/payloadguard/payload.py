"""Response payload: content, format, schema and transport metadata in one place.

Typical use from a request handler::

    payload = ResponsePayload(StarletteRouter(), "json", 201)
    payload.schema = schema_text
    payload.location = f"/users/{user.id}"
    payload.content = user          # validated right here
    return payload.finalize()       # router response
"""

from typing import Any

from payloadguard.exceptions import PayloadError, PayloadNotReadyError
from payloadguard.formats import Format
from payloadguard.logging import get_logger
from payloadguard.routers.base import Router
from payloadguard.services.serializer import serialize
from payloadguard.services.validation import SchemaValidator, assert_response_schema, validator_for
from payloadguard.services.xml_encoder import XmlEncoder

logger = get_logger(__name__)

_UNSET: Any = object()


class ResponsePayload:
    """A response waiting to be handed to a router.

    Assigning ``content`` validates it against the configured format and
    schema before the assignment completes. If validation fails the payload
    is left without content, so ``finalize()`` can never release a body that
    broke its schema.
    """

    def __init__(
        self,
        router: Router,
        format: Format | str,
        status_code: int | str,
        encoder: XmlEncoder | None = None,
        validators: dict[Format, SchemaValidator] | None = None,
    ) -> None:
        self.format = format
        self.router = router
        self.status_code = status_code
        self.schema: str | bytes | None = None
        self.content_type: str | None = None
        # URL of a resource, useful when a new one was created
        self.location: str | None = None
        self.encoder = encoder or XmlEncoder()
        self.validators = validators or {}
        self._content: Any = _UNSET

    @property
    def format(self) -> Format:
        return self._format

    @format.setter
    def format(self, value: Format | str) -> None:
        self._format = Format.parse(value)

    @property
    def content(self) -> Any:
        return None if self._content is _UNSET else self._content

    @content.setter
    def content(self, value: Any) -> None:
        self.set_content(value)

    @property
    def has_content(self) -> bool:
        return self._content is not _UNSET

    def set_content(self, content: Any) -> None:
        self._content = content
        try:
            self.assert_response_schema(self.format, self.schema, self._validation_body(content))
        except PayloadError:
            self._content = _UNSET
            raise

    def assert_response_schema(self, format: Format | str, schema: str | bytes | None, value: Any) -> None:
        validator = None
        if schema:
            validator = self.validators.get(Format.detect(format)) or validator_for(format)
        assert_response_schema(format, schema, value, validator=validator)

    def get_configured_headers(self) -> dict[str, str]:
        """All configured headers, indexed by header name."""
        headers = {}
        if self.content_type:
            headers["Content-Type"] = self.content_type
        if self.location:
            headers["Location"] = self.location
        return headers

    def serialize(self, content: Any, format: Format | str) -> str:
        return serialize(content, format, encoder=self.encoder)

    def finalize(self, auto_serialize: bool = True) -> Any:
        """Build the router response from the serialized content, status code and headers.

        Pre-rendered XML text is sent as-is, the same body that was validated.
        """
        if not self.has_content:
            raise PayloadNotReadyError()

        body = self._content
        if auto_serialize and not self._is_prerendered(body):
            body = self.serialize(body, self.format)

        logger.debug("response_finalized", format=self.format.value, status_code=self.status_code)
        return self.router.build_response(body, self.status_code, self.get_configured_headers())

    def _validation_body(self, content: Any) -> Any:
        if not self.schema:
            return content
        # XML text is validated as-is; everything else as the body that would be sent
        if self._is_prerendered(content):
            return content
        return self.serialize(content, self.format)

    def _is_prerendered(self, content: Any) -> bool:
        return self.format is Format.XML and isinstance(content, (str, bytes))
