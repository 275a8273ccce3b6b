"""Header construction for upstream requests and CORS responses."""

CORS_ORIGIN = {"Access-Control-Allow-Origin": "*"}

PREFLIGHT_HEADERS = {
    **CORS_ORIGIN,
    "Access-Control-Allow-Methods": "GET, POST",
    "Access-Control-Allow-Headers": "Content-Type",
}

JSON_CONTENT_TYPE = "application/json"


class HeaderBuilder:
    """Build upstream and caller-facing headers."""

    def build_upstream_headers(self, method: str, api_key: str | None) -> dict[str, str]:
        """Build outbound headers; nothing from the inbound request is passed through."""
        upstream: dict[str, str] = {}
        if method == "POST":
            upstream["Content-Type"] = JSON_CONTENT_TYPE
        if api_key:
            upstream["X-Goog-Api-Key"] = api_key
        return upstream

    def build_response_headers(self) -> dict[str, str]:
        """Headers for every JSON response sent back to the caller."""
        return {**CORS_ORIGIN, "Content-Type": JSON_CONTENT_TYPE}

    def build_preflight_headers(self) -> dict[str, str]:
        return dict(PREFLIGHT_HEADERS)
