"""Tests for JSON and XML content serialization."""

import json
from dataclasses import dataclass
from datetime import date

import pytest
from pydantic import BaseModel

from payloadguard.exceptions import SerializationError, UnsupportedFormatError
from payloadguard.services.serializer import serialize
from payloadguard.services.xml_encoder import XmlEncoder

XML_DECLARATION = '<?xml version="1.0"?>\n'


class User(BaseModel):
    id: int
    name: str


@dataclass
class Booking:
    code: str
    checkin: date


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------
def test_json_leaves_slashes_and_unicode_unescaped() -> None:
    content = {"url": "http://example.com/a/b", "city": "São Paulo", "emoji": "☕"}

    body = serialize(content, "json")

    assert body == '{"url":"http://example.com/a/b","city":"São Paulo","emoji":"☕"}'
    assert "\\/" not in body
    assert json.loads(body) == content


@pytest.mark.parametrize(
    "content",
    [
        {"nested": {"list": [1, 2.5, None, True], "empty": {}}},
        ["a/b", "ü", 3],
        "plain/string",
        42,
        None,
    ],
)
def test_json_round_trips(content: object) -> None:
    assert json.loads(serialize(content, "json")) == content


def test_json_normalizes_models_and_dataclasses() -> None:
    content = {"user": User(id=1, name="ann"), "booking": Booking("B-1", date(2025, 11, 22))}

    body = serialize(content, "json")

    assert json.loads(body) == {
        "user": {"id": 1, "name": "ann"},
        "booking": {"code": "B-1", "checkin": "2025-11-22"},
    }


def test_json_rejects_unknown_objects() -> None:
    with pytest.raises(SerializationError) as exc_info:
        serialize({"handle": object()}, "json")

    assert exc_info.value.errors[0].code == "serialization-failed"


def test_json_rejects_nan() -> None:
    with pytest.raises(SerializationError):
        serialize({"ratio": float("nan")}, "json")


@pytest.mark.parametrize("format", ["yaml", "JSON", "", None])
def test_unsupported_format_raises(format: object) -> None:
    with pytest.raises(UnsupportedFormatError) as exc_info:
        serialize({"id": 1}, format)  # type: ignore[arg-type]

    assert exc_info.value.message == "format not supported, only json, xml are available"
    assert exc_info.value.errors[0].code == "unsupported-format"


# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------
def test_xml_writes_one_element_per_field() -> None:
    body = serialize({"id": 1, "name": "ann"}, "xml")

    assert body == XML_DECLARATION + "<response><id>1</id><name>ann</name></response>\n"


def test_xml_repeats_element_for_list_values() -> None:
    body = serialize({"tags": ["a", "b"]}, "xml")

    assert body == XML_DECLARATION + "<response><tags>a</tags><tags>b</tags></response>\n"


def test_xml_top_level_list_uses_item_nodes() -> None:
    body = serialize([1, 2], "xml")

    assert body == XML_DECLARATION + '<response><item key="0">1</item><item key="1">2</item></response>\n'


def test_xml_invalid_element_names_become_item_nodes() -> None:
    body = serialize({"1": "x", "two words": "y"}, "xml")

    assert body == (
        XML_DECLARATION
        + '<response><item key="1">x</item><item key="two words">y</item></response>\n'
    )


def test_xml_attributes_and_text_keys() -> None:
    body = serialize({"user": {"@id": 7, "#": "ann"}}, "xml")

    assert body == XML_DECLARATION + '<response><user id="7">ann</user></response>\n'


def test_xml_scalars() -> None:
    body = serialize({"active": True, "deleted": False, "note": None, "price": 1.5, "tags": []}, "xml")

    assert body == (
        XML_DECLARATION
        + "<response><active>1</active><deleted>0</deleted><note/><price>1.5</price><tags/></response>\n"
    )


def test_xml_wraps_markup_in_cdata() -> None:
    body = serialize({"html": "<b>hi</b> & bye"}, "xml")

    assert "<html><![CDATA[<b>hi</b> & bye]]></html>" in body


def test_xml_normalizes_objects_through_json() -> None:
    body = serialize({"user": User(id=1, name="ann")}, "xml")

    assert body == XML_DECLARATION + "<response><user><id>1</id><name>ann</name></user></response>\n"


def test_xml_scalar_content_is_root_text() -> None:
    assert serialize("hello", "xml") == XML_DECLARATION + "<response>hello</response>\n"


def test_xml_custom_root_node() -> None:
    encoder = XmlEncoder(root_node_name="data")

    assert serialize({"id": 1}, "xml", encoder=encoder) == XML_DECLARATION + "<data><id>1</id></data>\n"


def test_xml_rejects_control_characters() -> None:
    with pytest.raises(SerializationError):
        serialize({"bad": "\x00"}, "xml")
