"""Generic element-per-field XML encoder.

Encodes the plain structures produced by json.loads (dicts, lists, scalars)
into an XML document:

    {"user": {"@id": 7, "name": "ann", "tags": ["a", "b"]}}

becomes::

    <?xml version="1.0"?>
    <response><user id="7"><name>ann</name><tags>a</tags><tags>b</tags></user></response>

Keys that are not valid element names (numbers included) are written as
``<item key="...">``. A ``#`` key sets the node text. Strings containing
markup characters are wrapped in CDATA.
"""

import re
from typing import Any

from lxml import etree

from payloadguard.config import Settings, settings

_ELEMENT_NAME = re.compile(r"^[^\W\d][\w.-]*$")
_MARKUP = re.compile(r"[<>&]")


class XmlEncoder:
    def __init__(self, root_node_name: str | None = None, version: str | None = None) -> None:
        self.root_node_name = root_node_name or settings.xml_root_node_name
        self.version = version or settings.xml_version

    @classmethod
    def from_settings(cls, config: Settings) -> "XmlEncoder":
        return cls(root_node_name=config.xml_root_node_name, version=config.xml_version)

    def encode(self, data: Any) -> str:
        root = etree.Element(self.root_node_name)
        self._build(root, data)
        body = etree.tostring(root, encoding="unicode")
        return f'<?xml version="{self.version}"?>\n{body}\n'

    def _build(self, parent: etree._Element, data: Any) -> None:
        if isinstance(data, dict):
            for key, value in data.items():
                self._build_entry(parent, str(key), value)
        elif isinstance(data, list):
            for index, value in enumerate(data):
                self._append(parent, value, "item", key=index)
        else:
            self._set_text(parent, data)

    def _build_entry(self, parent: etree._Element, key: str, value: Any) -> None:
        if key.startswith("@") and _is_scalar(value) and _is_valid_name(key[1:]):
            parent.set(key[1:], _to_text(value))
        elif key == "#":
            self._set_text(parent, value)
        elif isinstance(value, list) and value and _is_valid_name(key):
            for item in value:
                self._append(parent, item, key)
        elif _is_valid_name(key):
            self._append(parent, value, key)
        else:
            self._append(parent, value, "item", key=key)

    def _append(self, parent: etree._Element, value: Any, name: str, key: object = None) -> None:
        child = etree.SubElement(parent, name)
        if key is not None:
            child.set("key", str(key))
        self._build(child, value)

    @staticmethod
    def _set_text(node: etree._Element, value: Any) -> None:
        if value is None:
            return
        text = _to_text(value)
        if _MARKUP.search(text) and "]]>" not in text:
            node.text = etree.CDATA(text)
        else:
            node.text = text


def _is_valid_name(name: str) -> bool:
    return bool(_ELEMENT_NAME.match(name))


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if value is None:
        return ""
    return str(value)
