"""Content serialization.

Turns a domain value into the wire string for a format. Pure: no I/O, no state.
"""

import json
from typing import Any

from pydantic_core import PydanticSerializationError, to_jsonable_python

from payloadguard.exceptions import SerializationError
from payloadguard.formats import Format
from payloadguard.services.xml_encoder import XmlEncoder


def serialize(content: Any, format: Format | str, encoder: XmlEncoder | None = None) -> str:
    """Encode content as JSON or XML.

    JSON output keeps "/" and non-ASCII characters literal. XML content goes
    through a JSON round trip first so models, dataclasses and other objects
    reach the XML encoder as plain dicts and lists.

    Raises:
        UnsupportedFormatError: format is not json or xml
        SerializationError: content cannot be encoded
    """
    match Format.parse(format):
        case Format.JSON:
            return to_json(content)
        case Format.XML:
            encoder = encoder or XmlEncoder()
            plain = json.loads(to_json(content))
            try:
                return encoder.encode(plain)
            except ValueError as exc:
                raise SerializationError(f"content cannot be encoded as xml: {exc}") from exc


def to_json(content: Any) -> str:
    try:
        return json.dumps(
            content,
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
            default=to_jsonable_python,
        )
    except (TypeError, ValueError, PydanticSerializationError) as exc:
        raise SerializationError(f"content cannot be encoded as json: {exc}") from exc
