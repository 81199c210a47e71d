"""FastAPI application entry point for the farm shop backend."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from slowapi.errors import RateLimitExceeded

from .api import (
    routes_auth,
    routes_bird_nests,
    routes_categories,
    routes_orders,
    routes_posts,
    routes_products,
    routes_users,
)
from .core.config import settings
from .core.db import init_db
from .core.errors import register_error_handlers
from .core.middleware import RequestLoggingMiddleware
from .core.rate_limiter import limiter, rate_limit_handler


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()
    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    register_error_handlers(app)

    origins = ["*"] if settings.CORS_ALLOW_ALL else [settings.FRONTEND_URL.rstrip("/")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=not settings.CORS_ALLOW_ALL,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(routes_auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(routes_users.router, prefix="/api/users", tags=["users"])
    app.include_router(routes_categories.router, prefix="/api/post-categories", tags=["categories"])
    app.include_router(routes_posts.router, prefix="/api/posts", tags=["posts"])
    app.include_router(routes_products.router, prefix="/api/products", tags=["products"])
    app.include_router(routes_orders.router, prefix="/api/orders", tags=["orders"])
    app.include_router(routes_bird_nests.router, prefix="/api/bird-nests", tags=["bird-nests"])

    @app.get("/api/health", tags=["admin"], summary="Service health check")
    async def health() -> dict[str, str]:
        """Return a simple health payload for load balancer checks."""
        return {"status": "ok"}

    @app.get("/api/metrics", tags=["admin"], summary="Prometheus metrics feed")
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
