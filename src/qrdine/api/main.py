from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from qrdine.api.container import ContainerFactory, ServiceContainer, build_container
from qrdine.api.error_handling import register_exception_handlers
from qrdine.api.middleware.request_id import RequestIDMiddleware
from qrdine.api.routes.analytics import router as analytics_router
from qrdine.api.routes.cashier import router as cashier_router
from qrdine.api.routes.health import router as health_router
from qrdine.api.routes.menu import router as menu_router
from qrdine.api.routes.metrics import router as metrics_router
from qrdine.api.routes.orders import router as orders_router
from qrdine.api.routes.quick_actions import router as quick_actions_router
from qrdine.api.ws.manager import ConnectionManager
from qrdine.api.ws.routes import router as ws_router
from qrdine.infrastructure.config.settings import load_settings
from qrdine.infrastructure.observability.logging_config import configure_logging
from qrdine.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("qrdine.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()

    # Dev/test: any origin, no credentials
    if env in {"dev", "test"}:
        return ["*"]

    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            path = _route_path(request)
            REQUEST_COUNT.labels(method=method, path=path, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        path = _route_path(request)
        REQUEST_COUNT.labels(method=method, path=path, status_code=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


def _default_container_factory(manager: ConnectionManager) -> ServiceContainer:
    return build_container(load_settings(), manager)


def create_app(container_factory: ContainerFactory | None = None) -> FastAPI:
    configure_logging()
    factory = container_factory or _default_container_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.ws_manager = ConnectionManager()
        container = factory(app.state.ws_manager)
        app.state.container = container
        await container.start()
        logger.info("app_started")
        try:
            yield
        finally:
            await container.stop()
            logger.info("app_stopped")

    app = FastAPI(title="QR Dine", version="0.1.0", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(menu_router)
    app.include_router(orders_router)
    app.include_router(quick_actions_router)
    app.include_router(cashier_router)
    app.include_router(analytics_router)
    app.include_router(ws_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-Id", "Content-Disposition"],
    )

    configure_otel(app)
    return app


app = create_app()
