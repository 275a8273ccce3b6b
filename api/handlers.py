"""FastAPI route handlers."""

from fastapi import Request, Response

from core.exceptions import RequestTooLargeError
from core.request_types import InboundRequest, OutboundResponse
from core.transform import parse_json_body
from services.forwarder import Forwarder

MAX_BODY_SIZE = 1024 * 1024  # 1MB


async def _read_inbound(request: Request) -> InboundRequest:
    """Normalize a Starlette request; raise if the body is too large."""
    parsed_body = None
    if request.method == "POST":
        raw_body = await request.body()
        if len(raw_body) > MAX_BODY_SIZE:
            raise RequestTooLargeError(detail=f"{len(raw_body)} bytes")
        parsed_body = parse_json_body(raw_body)

    return InboundRequest(
        method=request.method,
        query_params=dict(request.query_params),
        parsed_body=parsed_body,
    )


def _to_response(outbound: OutboundResponse) -> Response:
    return Response(
        content=outbound.body or b"",
        status_code=outbound.status_code,
        headers=outbound.headers,
    )


async def handle_proxy(request: Request) -> Response:
    """Handle any request on the relay endpoint."""
    forwarder: Forwarder = request.app.state.forwarder
    try:
        inbound = await _read_inbound(request)
    except RequestTooLargeError as e:
        return _to_response(forwarder.render_error(e))

    return _to_response(await forwarder.handle(inbound))
