"""Responses as returned by transports and by the dispatcher."""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass
class RawResponse:
    """What a transport hands back: status, headers and undecoded body."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return ""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def is_json(self) -> bool:
        return "json" in self.content_type.lower()


@dataclass
class TypedResponse(Generic[T]):
    """Decoded result of an operation."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    data: T | None = None
    raw_content: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str, default: Any = None) -> Any:
        """Case-insensitive header lookup."""
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return default
