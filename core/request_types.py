"""Shared request data types."""

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class InboundRequest:
    """Normalized request handed over by a hosting adapter."""

    method: str
    query_params: Mapping[str, str] = field(default_factory=dict)
    parsed_body: Any = None


@dataclass(frozen=True)
class OutboundRequestSpec:
    """Prepared data for an upstream request."""

    target_url: str
    method: str
    headers: dict[str, str]
    body: bytes | None = None

    @property
    def host(self) -> str:
        """Upstream host, used as the route name in logs."""
        return self.target_url.split("/", 3)[2]


@dataclass(frozen=True)
class OutboundResponse:
    """Normalized response returned to a hosting adapter."""

    status_code: int
    headers: dict[str, str]
    body: bytes | None = None
