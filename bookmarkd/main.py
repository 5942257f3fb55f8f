"""
FastAPI application: the entrypoint for the bookmarkd API service.

Features:
- GraphQL endpoint at /graphql
- CORS restrictions
- Prometheus metrics endpoint
- Structured JSON logging
- Health, readiness and liveness checks
- Graceful shutdown
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from sqlalchemy import text
from starlette.responses import Response

from bookmarkd.api.schema import create_graphql_router
from bookmarkd.config import get_settings
from bookmarkd.database import Base, dispose_engine, init_engine
from bookmarkd.logging_config import setup_logging
from bookmarkd.models import registry  # noqa: F401
from bookmarkd.services.book_metadata import close_client
from bookmarkd.services.cache import close_redis, get_redis

settings = get_settings()
setup_logging(settings.log_level, settings.log_format)
logger = structlog.get_logger()

# ── Prometheus metrics ──
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and graceful shutdown."""
    logger.info("bookmarkd_starting", environment=settings.environment)
    engine = init_engine()

    # Create tables on first start (dev convenience); migrations own the schema elsewhere
    if settings.environment == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created")

    yield

    logger.info("bookmarkd_shutting_down")
    await close_client()
    await close_redis()
    await dispose_engine()


app = FastAPI(
    title="bookmarkd",
    description="Social book cataloguing API: reading lists, reviews, clubs and discussions",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS ──
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request metrics middleware ──
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    if not settings.enable_metrics:
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration = time.time() - start

    endpoint = request.url.path
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code,
    ).inc()
    REQUEST_LATENCY.labels(
        method=request.method,
        endpoint=endpoint,
    ).observe(duration)

    return response


# ── GraphQL ──
app.include_router(
    create_graphql_router(graphiql=settings.environment != "production"),
    prefix="/graphql",
)


# ── Health / Readiness / Liveness ──
@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy", "service": "bookmarkd"}


@app.get("/ready", tags=["Health"])
async def readiness():
    """Readiness check: verifies DB and Redis connectivity."""
    checks = {}
    try:
        async with init_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception:
        logger.warning("readiness_database_failed", exc_info=True)
        checks["database"] = "error"

    try:
        r = await get_redis()
        await r.ping()
        checks["redis"] = "ok"
    except Exception:
        logger.warning("readiness_redis_failed", exc_info=True)
        checks["redis"] = "error"

    all_ok = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ready" if all_ok else "not_ready", "checks": checks},
    )


@app.get("/live", tags=["Health"])
async def liveness():
    return {"status": "alive"}


# ── Prometheus metrics endpoint ──
@app.get("/metrics", tags=["Monitoring"])
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
