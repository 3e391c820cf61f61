"""PaddyMart Storefront FastAPI application.

Web server that processes cart and order commands synchronously via HTTP.
Each request under a storefront prefix runs inside the storefront domain
context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from storefront/domain.toml.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context

storefront.init()

_DOMAIN_PREFIXES = ("/carts", "/orders", "/products")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="PaddyMart Storefront API",
    description="Rice marketplace: shopping cart and order lifecycle",
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
    """Push the storefront domain context for domain routes."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        add_context(path=request.url.path, user_id=request.headers.get("x-user-id"))
        try:
            with storefront.domain_context():
                response = await call_next(request)
        finally:
            clear_context()
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import cart_router, order_router, product_router, register_error_handlers  # noqa: E402

register_error_handlers(app)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(product_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "storefront": {"name": storefront.name},
            },
        }
    )
