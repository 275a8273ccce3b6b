"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_proxy
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.transform import RequestTranslator
from services.forwarder import Forwarder
from services.upstream import UPSTREAM_TIMEOUT, UpstreamClient

PROXY_METHODS = ["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE"]


def create_app(config: Config, logger: RequestLogger) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        client = httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT, limits=limits)
        header_builder = HeaderBuilder()
        app.state.forwarder = Forwarder(
            upstream=UpstreamClient(client),
            logger=logger,
            translator=RequestTranslator(header_builder),
            header_builder=header_builder,
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title="Maps Relay",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.api_route("/{path:path}", methods=PROXY_METHODS)
    async def proxy(request: Request):
        return await handle_proxy(request)

    return app
