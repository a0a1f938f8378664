"""Marketplace FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the marketplace domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay (e.g. "production" → PostgreSQL).
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from marketplace.domain import marketplace  # noqa: E402
from marketplace.utils.logging import bind_actor, clear_context  # noqa: E402

marketplace.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Marketplace API",
    description="Pickup ordering between food-cart vendors and ingredient suppliers",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the marketplace domain context and tag logs with the caller."""
    bind_actor(request.headers.get("x-actor-id"), request.headers.get("x-actor-role"))
    try:
        with marketplace.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from marketplace.api import (  # noqa: E402
    order_router,
    product_router,
    register_exception_handlers,
    supplier_router,
    vendor_router,
)

app.include_router(vendor_router)
app.include_router(supplier_router)
app.include_router(product_router)
app.include_router(order_router)
register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": marketplace.name})
