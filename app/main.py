import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.database import create_db_and_tables
from app.config import settings
from app.errors import BookstoreError
from app.routes import (
    admin_discounts,
    admin_orders,
    cart,
    checkout,
    health,
    recommendations,
    returns,
    review,
    user_orders,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Bookstore Orders API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookstoreError)
async def bookstore_error_handler(request: Request, exc: BookstoreError) -> JSONResponse:
    """Map domain errors to 400/403/404 with a readable message."""
    logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.status_code, "message": exc.message}},
    )


app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(user_orders.router, prefix="/orders", tags=["Orders"])
app.include_router(returns.router, prefix="/returns", tags=["Returns"])
app.include_router(review.router, prefix="/reviews", tags=["Reviews"])
app.include_router(recommendations.router, prefix="/recommendations", tags=["Recommendations"])
app.include_router(admin_discounts.router, prefix="/admin/discounts", tags=["Admin Discounts"])
app.include_router(admin_orders.router, prefix="/admin", tags=["Admin Orders"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "cart": [
            "/cart/add", "/cart/items/{item_id}", "/cart/clear",
            "/cart/summary", "/cart/purchase"
        ],
        "checkout": [
            "/checkout/purchase", "/checkout/calculate-total",
            "/checkout/validate-discount"
        ],
        "orders": ["/orders", "/orders/{order_id}"],
        "returns": ["/returns", "/returns/request"],
        "reviews": ["/reviews", "/reviews/can-review/{book_id}"],
        "recommendations": ["/recommendations"],
        "admin": [
            "/admin/discounts", "/admin/discounts/{discount_id}",
            "/admin/orders/{order_id}/status", "/admin/returns/{return_id}/status"
        ],
    }
