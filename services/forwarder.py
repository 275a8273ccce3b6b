"""Platform-agnostic request forwarding pipeline."""

import json

from rich.console import Console
from rich.markup import escape

from core.exceptions import ProxyError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import InboundRequest, OutboundResponse
from core.transform import RequestTranslator
from services.upstream import UpstreamClient

LOCAL_ROUTE = "relay"

console = Console(stderr=True)


class Forwarder:
    """Validate, forward and translate a single request.

    Holds only collaborators; every call to handle() is independent, so one
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        upstream: UpstreamClient,
        logger: RequestLogger,
        translator: RequestTranslator | None = None,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._upstream = upstream
        self._logger = logger
        self._headers = header_builder or HeaderBuilder()
        self._translator = translator or RequestTranslator(self._headers)

    async def handle(self, inbound: InboundRequest) -> OutboundResponse:
        """Produce exactly one response for the inbound request."""
        if inbound.method == "OPTIONS":
            return OutboundResponse(
                status_code=204,
                headers=self._headers.build_preflight_headers(),
            )

        route = LOCAL_ROUTE
        try:
            spec = self._translator.translate(inbound)
            route = spec.host
            self._log(self._logger.log_forward, spec)
            payload = await self._upstream.fetch(spec)
        except ProxyError as e:
            return self.render_error(e, route)

        return OutboundResponse(
            status_code=200,
            headers=self._headers.build_response_headers(),
            body=payload,
        )

    def render_error(self, error: ProxyError, route: str = LOCAL_ROUTE) -> OutboundResponse:
        """Log the error and turn it into a JSON error response."""
        message = error.public_message
        if error.detail:
            message = f"{message} ({error.detail})"
        self._log(self._logger.log_error, route, error.status_code, message)

        body = json.dumps({"error": error.public_message}, separators=(",", ":"))
        return OutboundResponse(
            status_code=error.status_code,
            headers=self._headers.build_response_headers(),
            body=body.encode("utf-8"),
        )

    @staticmethod
    def _log(log_call, *args) -> None:
        """Run a logger call; a logging I/O failure never changes the response."""
        try:
            log_call(*args)
        except OSError as e:
            console.print(f"[yellow]Warning:[/yellow] request logging failed: {escape(str(e))}", highlight=False)
