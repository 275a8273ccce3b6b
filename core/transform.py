"""Inbound-to-outbound request translation."""

import json
from typing import Any
from urllib.parse import unquote

from core.allowlist import is_allowed
from core.exceptions import InvalidBodyError, InvalidTargetError, MissingTargetError
from core.headers import HeaderBuilder
from core.request_types import InboundRequest, OutboundRequestSpec


class RequestTranslator:
    """Derive the outbound request from a normalized inbound request."""

    def __init__(self, header_builder: HeaderBuilder | None = None) -> None:
        self._headers = header_builder or HeaderBuilder()

    def translate(self, inbound: InboundRequest) -> OutboundRequestSpec:
        """Validate the inbound request and build its OutboundRequestSpec.

        Raises:
            MissingTargetError: no target could be found
            InvalidTargetError: target is outside the allow-list
            InvalidBodyError: forwarded body is not a string
        """
        target_url, body, api_key = self._extract(inbound)

        if not is_allowed(target_url):
            raise InvalidTargetError(detail=f"rejected target {target_url!r}")

        method = "POST" if body else "GET"
        return OutboundRequestSpec(
            target_url=target_url,
            method=method,
            headers=self._headers.build_upstream_headers(method, api_key),
            body=body.encode("utf-8") if body else None,
        )

    def _extract(self, inbound: InboundRequest) -> tuple[Any, str | None, str | None]:
        """Return (target_url, body, api_key) according to the inbound method."""
        if inbound.method == "POST" and inbound.parsed_body is not None:
            data = inbound.parsed_body
            if not isinstance(data, dict):
                # Only a JSON object carries fields; anything else has no target
                return None, None, None
            body = data.get("body") or None
            if body is not None and not isinstance(body, str):
                raise InvalidBodyError(detail=f"body of type {type(body).__name__}")
            api_key = data.get("apiKey") or None
            if not isinstance(api_key, str):
                api_key = None
            return data.get("url"), body, api_key

        url = inbound.query_params.get("url") if inbound.method == "GET" else None
        if url:
            return unquote(url), None, None

        raise MissingTargetError(detail=f"{inbound.method} without url")


def parse_json_body(raw_body: bytes | str | None) -> dict[str, Any] | None:
    """Parse a raw POST body; only a JSON object counts as a parsed body."""
    if not raw_body:
        return None
    if isinstance(raw_body, bytes):
        raw_body = raw_body.decode("utf-8", errors="replace")
    try:
        data = json.loads(raw_body)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
