"""Google Cloud Functions (Flask request) adapter."""

import asyncio

import httpx
from flask import Request, Response

from core.exceptions import RequestTooLargeError
from core.protocols import RequestLogger
from core.request_types import InboundRequest, OutboundResponse
from core.transform import parse_json_body
from services.forwarder import Forwarder
from services.upstream import UPSTREAM_TIMEOUT, UpstreamClient
from ui.console_logger import ConsoleLogger

MAX_BODY_SIZE = 1024 * 1024  # 1MB


def maps_proxy(request: Request) -> Response:
    """HTTP function entry point; blocks until the forwarded call completes."""
    return asyncio.run(handle_request(request, ConsoleLogger(log_file=None)))


async def handle_request(
    request: Request,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Response:
    """Forward one Flask request using a client scoped to this call."""
    async with httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT, transport=transport) as client:
        forwarder = Forwarder(UpstreamClient(client), logger)
        try:
            inbound = _read_inbound(request)
        except RequestTooLargeError as e:
            return _to_response(forwarder.render_error(e))
        return _to_response(await forwarder.handle(inbound))


def _read_inbound(request: Request) -> InboundRequest:
    parsed_body = None
    if request.method == "POST":
        raw_body = request.get_data(cache=True)
        if len(raw_body) > MAX_BODY_SIZE:
            raise RequestTooLargeError(detail=f"{len(raw_body)} bytes")
        parsed_body = parse_json_body(raw_body)

    return InboundRequest(
        method=request.method,
        query_params=request.args.to_dict(),
        parsed_body=parsed_body,
    )


def _to_response(outbound: OutboundResponse) -> Response:
    return Response(
        response=outbound.body or b"",
        status=outbound.status_code,
        headers=outbound.headers,
    )
