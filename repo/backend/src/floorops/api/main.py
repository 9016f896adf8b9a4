from __future__ import annotations

import os

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from floorops.api.error_handling import register_exception_handlers
from floorops.api.middleware.access_log import AccessLogMiddleware
from floorops.api.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from floorops.api.routes import health, kitchen, menu, metrics, orders, reservations, tables
from floorops.infrastructure.observability.logging_config import configure_logging
from floorops.infrastructure.observability.otel import configure_otel

OPEN_CORS_ENVIRONMENTS = frozenset({"dev", "test"})

ROUTERS: tuple[APIRouter, ...] = (
    health.router,
    metrics.router,
    menu.router,
    tables.router,
    orders.router,
    kitchen.router,
    reservations.router,
)


def _cors_allow_origins() -> list[str]:
    if os.getenv("APP_ENV", "dev").lower() in OPEN_CORS_ENVIRONMENTS:
        return ["*"]
    return [
        origin.strip()
        for origin in os.getenv("CORS_ALLOW_ORIGINS", "").split(",")
        if origin.strip()
    ]


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="FloorOps Backend",
        version="0.1.0",
        description="Tables, orders and reservations for the restaurant floor.",
    )
    register_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    # Later middleware wraps earlier middleware, so the request id is set before access logging.
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    configure_otel(app)
    return app


app = create_app()
