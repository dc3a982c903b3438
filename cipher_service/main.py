"""FastAPI application entrypoint."""
from __future__ import annotations

from contextlib import asynccontextmanager
import time
from uuid import uuid4

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import MutableHeaders
from starlette.requests import Request

from cipher_service.api.error_handlers import register_exception_handlers
from cipher_service.api.router import api_router
from cipher_service.core.config import Settings, get_settings
from cipher_service.core.logging import configure_logging
from cipher_service.core.metrics import MetricsRegistry
from cipher_service.core.request_context import request_context
from cipher_service.services.registry import ServiceRegistry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of background services."""

    registry: ServiceRegistry = app.state.services
    await registry.startup()
    try:
        yield
    finally:
        await registry.shutdown()


class RequestIdMiddleware:
    def __init__(self, app, *, metrics: MetricsRegistry):
        self.app = app
        self.metrics = metrics

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        path = scope.get("path") or ""
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
            await send(message)

        try:
            with request_context(request_id):
                await self.app(scope, receive, send_wrapper)
        finally:
            self.metrics.observe_request(
                endpoint=path if status_code != 404 else "unmatched",
                method=scope.get("method", ""),
                status=status_code,
                duration_s=time.perf_counter() - start,
            )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; invalid key material aborts here."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Cipher Service API",
        description="Deterministic AES-CBC encryption with Prometheus metrics",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    registry = ServiceRegistry(settings)
    app.state.services = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware, metrics=registry.metrics)

    app.include_router(api_router)
    register_exception_handlers(app)
    return app


app = create_app()
