"""FastAPI app serving the registry as exposition text."""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from .exposition import CONTENT_TYPE, render
from .registry import MetricsRegistry

SCRAPE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(registry: MetricsRegistry) -> FastAPI:
    app = FastAPI(title="Metrics Relay", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.registry = registry

    @app.api_route("/{path:path}", methods=SCRAPE_METHODS, include_in_schema=False)
    async def scrape(request: Request) -> PlainTextResponse:
        registry: MetricsRegistry = request.app.state.registry
        return PlainTextResponse(render(registry.snapshot()), media_type=CONTENT_TYPE)

    return app
