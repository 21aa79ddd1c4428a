"""Wire formats a response payload can be rendered to."""

from enum import StrEnum

from payloadguard.exceptions import UnsupportedFormatError


class Format(StrEnum):
    JSON = "json"
    XML = "xml"

    @classmethod
    def parse(cls, value: object) -> "Format":
        """Exact, case-sensitive lookup used when a payload format is configured."""
        if isinstance(value, Format):
            return value
        for member in cls:
            if value == member.value:
                return member
        raise UnsupportedFormatError(value, supported_formats())

    @classmethod
    def detect(cls, value: object) -> "Format":
        """Resolve format strings such as "application/json" by substring.

        JSON wins over XML when both appear.
        """
        if isinstance(value, Format):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value in value:
                    return member
        raise UnsupportedFormatError(value, supported_formats())

    @property
    def media_type(self) -> str:
        return f"application/{self.value}"


def supported_formats() -> tuple[str, ...]:
    return tuple(member.value for member in Format)
