"""Seam to the transport layer.

ResponsePayload hands its final body, status code and headers to a Router
and returns whatever the router builds, untouched.
"""

from typing import Any, Protocol


class Router(Protocol):
    def build_response(self, body: Any, status_code: int | str, headers: dict[str, str]) -> Any: ...
