"""FastAPI server for the booking pattern service.

Run with:
    uv run uvicorn booking_patterns.server:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from booking_patterns.analysis import available_strategies
from booking_patterns.api.routes import router
from booking_patterns.config import ANALYZER_STRATEGY, CORS_ORIGINS, SERVER_HOST, SERVER_PORT
from booking_patterns.services.metrics import metrics
from booking_patterns.services.template_store import TemplateStore

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: initialise / tear-down shared resources ────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Start-up: create the template store once and keep it in app state."""
    application.state.store = TemplateStore()
    logger.info("Template store ready.")
    yield
    metrics.flush()


# ── FastAPI application ──────────────────────────────────────────────
app = FastAPI(
    title="Booking Pattern Templates",
    description=(
        "Learns each customer's usual equipment, surgeon and sales rep "
        "from booking history and drafts new booking requests from it."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request tagging ─────────────────────────────────────────────────
@app.middleware("http")
async def tag_with_store_version(request: Request, call_next) -> Response:
    """Tag each response with its request ID and the store version it saw.

    ``X-Request-ID`` is echoed when the caller sends one.  ``X-Store-Version``
    lets a client tell whether templates it fetched still belong to the
    bookings it uploaded; it is omitted while the store is not ready.
    """
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()
    response = await call_next(request)

    store = getattr(request.app.state, "store", None)
    version = store.version if store is not None else None
    response.headers["X-Request-ID"] = request_id
    if version is not None:
        response.headers["X-Store-Version"] = str(version)
    logger.info(
        "[%s] %s %s -> %d (store v%s, %.1f ms)",
        request_id, request.method, request.url.path, response.status_code,
        "-" if version is None else version, (time.perf_counter() - started) * 1000,
    )
    return response


# ── Register routes ──────────────────────────────────────────────────
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Service info plus the analysis strategies a caller can pick."""
    return {
        "service": "Booking Pattern Templates",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
        "strategies": available_strategies(),
        "defaultStrategy": ANALYZER_STRATEGY,
    }


# ── CLI entry point ──────────────────────────────────────────────────

if __name__ == "__main__":
    logger.info("Starting booking pattern API server on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(
        "booking_patterns.server:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
    )
