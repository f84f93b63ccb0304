from dataclasses import dataclass, field
from typing import Any


@dataclass
class RequestParameters:
    """Everything needed to send one request.

    Built fresh for every call by the dispatcher and handed to the transport.
    Query parameters are (key, value) pairs so keys may repeat.
    """

    method: str
    path: str
    query: list[tuple[str, str]] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    body: Any | None = None
    required_scope: str = ""
    timeout: Any | None = None
