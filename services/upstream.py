"""HTTP client for the allow-listed upstream APIs."""

import asyncio

import httpx

from core.exceptions import UpstreamConnectionError, UpstreamError, UpstreamTimeoutError
from core.request_types import OutboundRequestSpec

UPSTREAM_TIMEOUT = 25.0  # seconds, wall clock from request start
MAX_ERROR_DETAIL = 500


class UpstreamClient:
    """Execute outbound requests and collect the full upstream body."""

    def __init__(self, client: httpx.AsyncClient, timeout: float = UPSTREAM_TIMEOUT) -> None:
        self._client = client
        self._timeout = timeout

    async def fetch(self, spec: OutboundRequestSpec) -> bytes:
        """Send the request and return the raw body of a 2xx response.

        The deadline covers connect, send and the whole body read. When it
        expires the pending send is cancelled, which closes the connection.
        """
        try:
            return await asyncio.wait_for(self._send(spec), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamTimeoutError(detail=f"{spec.target_url}: {e!r}") from e
        except httpx.RequestError as e:
            message = str(e) or type(e).__name__
            raise UpstreamConnectionError(message, detail=f"{spec.target_url}: {e!r}") from e
        except (httpx.InvalidURL, ValueError) as e:
            # Raised while building the request, e.g. a non-ASCII header value
            raise UpstreamConnectionError(
                "Invalid request to upstream", detail=f"{spec.target_url}: {e!r}"
            ) from e

    async def _send(self, spec: OutboundRequestSpec) -> bytes:
        req = self._client.build_request(
            spec.method,
            spec.target_url,
            headers=spec.headers,
            content=spec.body,
            timeout=self._timeout,
        )
        response = await self._client.send(req, stream=True)
        try:
            body = await response.aread()
        finally:
            await response.aclose()

        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                response.status_code,
                detail=body.decode("utf-8", errors="replace")[:MAX_ERROR_DETAIL],
            )
        return body
