"""lxml access with a scoped "collect errors instead of raising" mode.

Out of collect mode, lxml exceptions propagate to the caller as-is. Inside
``XMLEngine.collecting()`` the same calls return the errors they hit so a
validator can report all of them at once. The mode is saved on entry and
restored on exit, and the whole sequence holds the engine lock, so threads
sharing one engine never see each other's mode.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from lxml import etree


@dataclass(frozen=True)
class XMLIssue:
    """One error reported by libxml2."""

    message: str
    line: int

    def describe(self) -> str:
        return f"{self.message} (line: {self.line})"


class XMLEngine:
    def __init__(self) -> None:
        self.collect_errors = False
        self._lock = threading.RLock()

    @contextmanager
    def collecting(self) -> Iterator["XMLEngine"]:
        with self._lock:
            previous = self.collect_errors
            self.collect_errors = True
            etree.clear_error_log()
            try:
                yield self
            finally:
                etree.clear_error_log()
                self.collect_errors = previous

    def parse(self, text: str | bytes) -> tuple[etree._Element | None, list[XMLIssue]]:
        """Parse a document. Entities are not resolved and the network is never used."""
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            return etree.fromstring(_as_bytes(text), parser), []
        except (etree.XMLSyntaxError, ValueError) as exc:
            if not self.collect_errors:
                raise
            return None, _drain(exc)

    def load_schema(self, source: str | bytes) -> tuple[etree.XMLSchema | None, list[XMLIssue]]:
        """Compile an XSD given as document text, or as a path or URI to one."""
        try:
            raw = _as_bytes(source)
            if raw.lstrip().startswith(b"<"):
                tree = etree.fromstring(raw.lstrip())
            else:
                tree = etree.parse(raw.decode("utf-8").strip())
            return etree.XMLSchema(tree), []
        except (etree.XMLSyntaxError, etree.XMLSchemaParseError, OSError, ValueError) as exc:
            if not self.collect_errors:
                raise
            return None, _drain(exc)

    def validate(self, schema: etree.XMLSchema, document: etree._Element) -> list[XMLIssue]:
        if not self.collect_errors:
            schema.assertValid(document)
            return []
        if schema.validate(document):
            return []
        return [XMLIssue(entry.message, entry.line) for entry in schema.error_log]


def _as_bytes(text: str | bytes) -> bytes:
    # lxml refuses str input that carries an encoding declaration
    return text.encode("utf-8") if isinstance(text, str) else text


def _drain(exc: Exception) -> list[XMLIssue]:
    log = getattr(exc, "error_log", None) or []
    issues = [XMLIssue(entry.message, entry.line) for entry in log]
    if not issues:
        issues.append(XMLIssue(str(exc), getattr(exc, "lineno", None) or 0))
    return issues


default_engine = XMLEngine()
