"""Storefront FastAPI application.

Serves the Ordering domain (cart, coupons, checkout and orders) over HTTP and
processes commands synchronously within each request.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the configuration overlay from ordering/domain.toml.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from ordering.domain import ordering
from ordering.utils.logging import bind_request_context, clear_request_context

ordering.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Shopping cart, coupons and order placement",
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
    """Push the Ordering domain context and bind request details for logging."""
    clear_request_context()
    bind_request_context(
        path=request.url.path,
        method=request.method,
        user_id=request.headers.get("x-user-id"),
    )
    with ordering.domain_context():
        response = await call_next(request)
    return response


@app.get("/health")
async def health():
    return {"status": "ok", "domain": ordering.name}


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from ordering.api.errors import register_error_handlers  # noqa: E402
from ordering.api.routes import cart_router, coupon_router, order_router  # noqa: E402

app.include_router(cart_router)
app.include_router(order_router)
app.include_router(coupon_router)

register_error_handlers(app)
