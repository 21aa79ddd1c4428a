"""Response schema validation.

Two strategies share one contract: JSON content is checked against a JSON
Schema (Draft 7) and XML content against an XML Schema. Whatever the
underlying library reports is normalized into Error values and raised as
one of the payload exceptions, so callers only ever deal with:

- InvalidSchemaDocumentError: the schema text is broken (configuration error)
- InvalidXMLDocumentError: XML content does not parse
- ContentSchemaViolationError: content parsed but breaks the schema
"""

import json
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, ClassVar
from urllib.parse import urldefrag, urljoin

from jsonschema import Draft7Validator, ValidationError
from jsonschema.exceptions import SchemaError
from referencing import Registry
from referencing._core import Resolver
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT7

from payloadguard.config import settings
from payloadguard.exceptions import (
    ContentSchemaViolationError,
    InvalidSchemaDocumentError,
    InvalidXMLDocumentError,
    PayloadError,
    UnresolvableReferenceError,
)
from payloadguard.formats import Format
from payloadguard.logging import get_logger
from payloadguard.schemas.error import Error, ErrorContext
from payloadguard.services.serializer import serialize, to_json
from payloadguard.services.xml_engine import XMLEngine, XMLIssue, default_engine

logger = get_logger(__name__)

INVALID_JSON_CODE = "invalid-response-payloadbody-json"
INVALID_XML_CODE = "invalid-response-xml"

# Keywords whose values are instance data, never subschemas
_DATA_KEYWORDS = frozenset({"enum", "const", "default", "examples"})


class SchemaValidator(ABC):
    """Checks a serialized value against a schema document."""

    format: ClassVar[Format]

    @abstractmethod
    def validate(self, value: Any, schema: str | bytes) -> None:
        """Raise a PayloadError subclass when value does not satisfy schema."""

    def collect_errors(self, value: Any, schema: str | bytes) -> list[Error]:
        """Return the content violations of value, empty when it is valid.

        Broken schemas and unparseable documents still raise.
        """
        try:
            self.validate(value, schema)
        except ContentSchemaViolationError as exc:
            return exc.errors
        return []


class JSONValidator(SchemaValidator):
    """JSON Schema Draft 7 validation with $ref dereferencing.

    Same-document references always resolve. References to other documents
    resolve when those documents are added to ``registry``; anything else is
    an UnresolvableReferenceError. Dereferenced schemas are cached per
    distinct schema text.
    """

    format = Format.JSON

    def __init__(self, registry: Registry | None = None, cache_size: int | None = None) -> None:
        self.registry = registry if registry is not None else Registry()
        size = settings.json_schema_cache_size if cache_size is None else cache_size
        self._load_schema = lru_cache(maxsize=size)(self._dereference_text)

    def validate(self, value: Any, schema: str | bytes) -> None:
        dereferenced = self._load_schema(schema)
        document = self._decode_value(value)

        validator = Draft7Validator(
            dereferenced,
            registry=self.registry,
            format_checker=Draft7Validator.FORMAT_CHECKER,
        )
        try:
            violations = list(validator.iter_errors(document))
        except Unresolvable as exc:
            raise UnresolvableReferenceError(str(getattr(exc, "ref", exc))) from exc

        errors = [_violation_error(violation, document) for violation in violations]
        if errors:
            raise ContentSchemaViolationError(errors)

    def dereference(self, schema: Any) -> Any:
        """Inline every resolvable $ref of a parsed schema.

        Recursive references cannot be inlined and are left for the validator
        to follow lazily, rewritten to absolute URIs when they point into a
        document other than the root.
        """
        resource = DRAFT7.create_resource(schema)
        resolver = self.registry.resolver_with_root(resource)
        base, _ = urldefrag(resource.id() or "")
        return _inline(schema, resolver, base, frozenset({id(schema)}))

    def _dereference_text(self, schema: str | bytes) -> Any:
        try:
            parsed = json.loads(schema)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidSchemaDocumentError(
                [Error(message=_decode_message(exc), code=INVALID_JSON_CODE)]
            ) from exc

        try:
            Draft7Validator.check_schema(parsed)
        except SchemaError as exc:
            raise InvalidSchemaDocumentError(
                [Error(message=_capitalize(exc.message), code=INVALID_JSON_CODE)]
            ) from exc

        dereferenced = self.dereference(parsed)
        logger.debug("json_schema_dereferenced", schema_length=len(schema))
        return dereferenced

    @staticmethod
    def _decode_value(value: Any) -> Any:
        if isinstance(value, (str, bytes, bytearray)):
            try:
                return json.loads(value)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise ContentSchemaViolationError(
                    [Error(message=_decode_message(exc), code=INVALID_JSON_CODE)]
                ) from exc
        # Normalize models, dataclasses and the like into plain JSON structures
        return json.loads(to_json(value))


class XMLValidator(SchemaValidator):
    """XML Schema validation through lxml.

    Parse errors stop the run before the schema is consulted. Errors carry
    the libxml2 message and line; there is no pointer context for XML.
    """

    format = Format.XML

    def __init__(self, engine: XMLEngine | None = None) -> None:
        self.engine = engine or default_engine

    def validate(self, value: Any, schema: str | bytes) -> None:
        if not isinstance(value, (str, bytes)):
            value = serialize(value, Format.XML)

        with self.engine.collecting() as engine:
            document, issues = engine.parse(value)
            if issues:
                logger.info("xml_parse_failed", error_count=len(issues))
                raise _failure(issues, InvalidXMLDocumentError)

            xsd, issues = engine.load_schema(schema)
            if issues:
                raise _failure(issues, InvalidSchemaDocumentError)

            issues = engine.validate(xsd, document)
            if issues:
                raise _failure(issues, ContentSchemaViolationError)


_VALIDATORS: dict[Format, SchemaValidator] = {
    Format.JSON: JSONValidator(),
    Format.XML: XMLValidator(),
}


def validator_for(format: Format | str) -> SchemaValidator:
    """Return the validator registered for format ("application/json" works too)."""
    return _VALIDATORS[Format.detect(format)]


def assert_response_schema(
    format: Format | str,
    schema: str | bytes | None,
    value: Any,
    validator: SchemaValidator | None = None,
) -> None:
    """Validate value against schema, doing nothing when no schema is given.

    Raises:
        UnsupportedFormatError: format is neither json nor xml
        InvalidSchemaDocumentError: schema does not parse or has a dangling $ref
        InvalidXMLDocumentError: XML value does not parse
        ContentSchemaViolationError: value breaks the schema
    """
    if not schema:
        logger.debug("schema_validation_skipped", format=str(format))
        return

    validator = validator or validator_for(format)
    try:
        validator.validate(value, schema)
    except PayloadError as exc:
        logger.warning(
            "response_schema_violation",
            format=validator.format.value,
            error_type=type(exc).__name__,
            error_count=len(exc.errors),
        )
        raise


def _inline(node: Any, resolver: Resolver, base: str, seen: frozenset[int]) -> Any:
    if isinstance(node, list):
        return [_inline(item, resolver, base, seen) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str):
        try:
            resolved = resolver.lookup(ref)
        except Unresolvable as exc:
            raise UnresolvableReferenceError(ref) from exc
        target = id(resolved.contents)
        if target in seen:
            # Made absolute so the validator does not resolve it against the main root
            return {**node, "$ref": urljoin(base, ref)} if base else node
        document_uri, _ = urldefrag(urljoin(base, ref))
        # Draft 7 ignores keywords next to $ref
        return _inline(resolved.contents, resolved.resolver, document_uri, seen | {target})

    node_id = node.get("$id")
    if isinstance(node_id, str):
        resolver = resolver.in_subresource(DRAFT7.create_resource(node))
        base, _ = urldefrag(urljoin(base, node_id))
    return {
        key: value if key in _DATA_KEYWORDS else _inline(value, resolver, base, seen)
        for key, value in node.items()
    }


def _violation_error(violation: ValidationError, document: Any) -> Error:
    pointer = _to_pointer(violation.absolute_path)
    try:
        value = resolve_pointer(document, pointer)
    except LookupError:
        # The offending value is context only
        value = None

    keyword = str(violation.validator)
    return Error(
        message=f"{pointer}: {violation.message}".lower(),
        code=keyword.lower(),
        context=ErrorContext(
            json_pointer=pointer,
            value=value,
            constraints={keyword: violation.validator_value},
        ),
    )


def resolve_pointer(document: Any, pointer: str) -> Any:
    """Return the value a JSON Pointer addresses, raising LookupError if it is absent."""
    node = document
    if pointer == "":
        return node
    for token in pointer.split("/")[1:]:
        token = token.replace("~1", "/").replace("~0", "~")
        if isinstance(node, dict):
            node = node[token]
        elif isinstance(node, list) and token.isdigit():
            node = node[int(token)]
        else:
            raise KeyError(token)
    return node


def _to_pointer(path: Any) -> str:
    return "".join(
        "/" + str(part).replace("~", "~0").replace("/", "~1") for part in path
    )


def _failure(issues: list[XMLIssue], kind: type[PayloadError]) -> PayloadError:
    return kind([Error(message=issue.describe(), code=INVALID_XML_CODE) for issue in issues])


def _capitalize(message: str) -> str:
    return message[:1].upper() + message[1:]


def _decode_message(exc: json.JSONDecodeError | UnicodeDecodeError) -> str:
    if isinstance(exc, UnicodeDecodeError):
        return _capitalize(f"malformed utf-8: {exc.reason}")
    return _capitalize(exc.msg)
