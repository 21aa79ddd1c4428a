"""Payload exceptions raised by the serializer, the validators and ResponsePayload.

Each exception carries the full ordered list of Error values that caused it.
Exception handlers in handlers.py translate them into the standard
error envelope: {"errors": [{"code": "...", "message": "..."}]}.
"""

from payloadguard.schemas.error import Error, ErrorResponse


class PayloadError(Exception):
    """Base class for all payload exceptions."""

    def __init__(self, errors: list[Error], message: str | None = None) -> None:
        self.errors = list(errors)
        self.message = message or "; ".join(error.message for error in self.errors)
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(errors=self.errors)


class UnsupportedFormatError(PayloadError):
    """Raised when a format outside the supported set is requested."""

    def __init__(self, format: object, supported: tuple[str, ...]) -> None:
        self.format = format
        message = f"format not supported, only {', '.join(supported)} are available"
        super().__init__([Error(message=message, code="unsupported-format")], message)


class InvalidSchemaDocumentError(PayloadError):
    """Raised when the schema document itself cannot be parsed."""


class UnresolvableReferenceError(InvalidSchemaDocumentError):
    """Raised when a $ref in a JSON schema points nowhere."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        message = f"unresolvable reference {ref!r} in response schema"
        super().__init__([Error(message=message, code="unresolvable-reference")], message)


class InvalidXMLDocumentError(PayloadError):
    """Raised when XML content does not parse."""


class ContentSchemaViolationError(PayloadError):
    """Raised when content is well-formed but breaks the response schema."""


class SerializationError(PayloadError):
    """Raised when content cannot be encoded to the target format."""

    def __init__(self, reason: str) -> None:
        super().__init__([Error(message=reason, code="serialization-failed")])


class PayloadNotReadyError(PayloadError):
    """Raised when a payload without validated content is finalized."""

    def __init__(self) -> None:
        message = "response content is not set or failed validation"
        super().__init__([Error(message=message, code="payload-not-ready")], message)


InvalidJSONError = InvalidSchemaDocumentError
InvalidXMLError = InvalidXMLDocumentError
InvalidResponsePayloadBodyError = ContentSchemaViolationError
