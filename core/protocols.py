"""Shared protocol definitions."""

from typing import Protocol

from core.request_types import OutboundRequestSpec


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard, ConsoleLogger)."""

    def log_forward(self, spec: OutboundRequestSpec) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
