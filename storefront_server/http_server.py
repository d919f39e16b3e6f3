"""HTTP server exposing the storefront as a REST API."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from . import __version__
from .config import Settings, build_storefront
from .errors import APIError, CheckoutValidationError, NotFoundError
from .models import CustomerInfo, ReconcileMode
from .storefront import Storefront

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("storefront-http-server")

# Global state
storefront: Optional[Storefront] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global storefront

    # Startup
    logger.info("Starting Storefront HTTP Server...")
    settings = Settings.from_env()
    storefront = build_storefront(settings)
    await storefront.start(reconcile_delay=settings.reconcile_delay)

    yield

    # Shutdown
    logger.info("Shutting down Storefront HTTP Server...")
    await storefront.close()


app = FastAPI(
    title="Storefront MCP Server",
    description="HTTP API for browsing a WooCommerce store, managing a cart and placing orders",
    version=__version__,
    lifespan=lifespan,
)


# Request/Response Models
class AddToCartRequest(BaseModel):
    product_id: int
    quantity: int = 1


class RemoveFromCartRequest(BaseModel):
    product_id: int


class UpdateCartRequest(BaseModel):
    product_id: int
    quantity: int


class RefreshOrdersRequest(BaseModel):
    mode: ReconcileMode = ReconcileMode.INTERACTIVE


def _storefront() -> Storefront:
    if storefront is None:
        raise HTTPException(status_code=503, detail="Storefront not initialized")
    return storefront


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Storefront MCP Server",
        "version": __version__,
        "description": "HTTP API for browsing a WooCommerce store, managing a cart and placing orders",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "catalog": {
                "categories": "GET /categories",
                "products": "GET /products",
                "product": "GET /products/{product_id}",
            },
            "cart": {
                "get": "GET /cart",
                "add": "POST /cart/add",
                "remove": "POST /cart/remove",
                "update": "POST /cart/update",
                "clear": "POST /cart/clear",
            },
            "checkout": "POST /checkout",
            "orders": {
                "list": "GET /orders",
                "details": "GET /orders/{order_id}",
                "refresh": "POST /orders/refresh",
            },
        },
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "initialized": storefront is not None}


# Catalog endpoints
@app.get("/categories")
async def list_categories(page: int = 1, per_page: int = 100):
    """List categories that contain products."""
    try:
        categories = await _storefront().list_categories(per_page=per_page, page=page)
        return {
            "count": len(categories),
            "categories": [category.model_dump() for category in categories],
        }
    except APIError as e:
        logger.error(f"List categories error: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.get("/products")
async def list_products(
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 1,
    per_page: int = 20,
):
    """List products by category or search term."""
    try:
        products = await _storefront().list_products(
            category_id=category_id, search=search, per_page=per_page, page=page
        )
        return {
            "count": len(products),
            "products": [product.model_dump() for product in products],
        }
    except APIError as e:
        logger.error(f"List products error: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.get("/products/{product_id}")
async def get_product(product_id: int):
    """Get a single product."""
    try:
        product = await _storefront().get_product(product_id)
        return product.model_dump()
    except NotFoundError:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    except APIError as e:
        logger.error(f"Get product error: {e}")
        raise HTTPException(status_code=502, detail=str(e))


# Cart endpoints
@app.get("/cart")
async def get_cart():
    """Get current shopping cart."""
    return _storefront().cart.state.model_dump(mode="json")


@app.post("/cart/add")
async def add_to_cart(request: AddToCartRequest):
    """Add a product to the cart."""
    if request.quantity < 1:
        raise HTTPException(status_code=422, detail="Quantity must be at least 1")
    try:
        cart = await _storefront().add_product_to_cart(request.product_id, request.quantity)
        return {
            "success": True,
            "message": f"Added product {request.product_id} to cart (quantity: {request.quantity})",
            "cart": cart.model_dump(mode="json"),
        }
    except NotFoundError:
        raise HTTPException(status_code=404, detail=f"Product {request.product_id} not found")
    except APIError as e:
        logger.error(f"Add to cart error: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.post("/cart/remove")
async def remove_from_cart(request: RemoveFromCartRequest):
    """Remove a product from the cart."""
    cart = await _storefront().cart.remove_from_cart(request.product_id)
    return {"success": True, "cart": cart.model_dump(mode="json")}


@app.post("/cart/update")
async def update_cart(request: UpdateCartRequest):
    """Set a product's quantity; zero or less removes it."""
    cart = await _storefront().cart.update_quantity(request.product_id, request.quantity)
    return {"success": True, "cart": cart.model_dump(mode="json")}


@app.post("/cart/clear")
async def clear_cart():
    """Empty the cart."""
    cart = await _storefront().cart.clear_cart()
    return {"success": True, "cart": cart.model_dump(mode="json")}


# Checkout
@app.post("/checkout")
async def checkout(customer_info: CustomerInfo):
    """Place an order for the cart contents."""
    try:
        order = await _storefront().place_order(customer_info)
        return {
            "success": True,
            "message": f"Your order #{order.number} has been placed. Total: ${order.total}",
            "order": order.model_dump(),
        }
    except CheckoutValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except APIError as e:
        logger.error(f"Checkout error: {e}")
        raise HTTPException(status_code=502, detail="Failed to place order. Please try again.")


# Order endpoints
@app.get("/orders")
async def get_orders():
    """Locally recorded orders, newest first."""
    orders = _storefront().orders.orders
    return {
        "count": len(orders),
        "orders": [order.model_dump(by_alias=True) for order in orders],
    }


@app.get("/orders/{order_id}")
async def get_order_details(order_id: int):
    """Get an order with its line items."""
    try:
        detail = await _storefront().get_order_detail(order_id)
        return detail.model_dump()
    except NotFoundError:
        raise HTTPException(
            status_code=404,
            detail=f"Order {order_id} has been deleted from the server and was removed from your list",
        )
    except APIError as e:
        logger.error(f"Get order details error: {e}")
        raise HTTPException(status_code=502, detail="Failed to load order details. Please try again.")


@app.post("/orders/refresh")
async def refresh_orders(request: Optional[RefreshOrdersRequest] = None):
    """Check recorded orders against the store."""
    mode = request.mode if request else ReconcileMode.INTERACTIVE
    result = await _storefront().refresh_orders(mode)
    return {
        "checked": result.checked,
        "removed": result.removed,
        "updated": result.updated,
        "failed": result.failed,
        "message": result.message,
    }


def run_http_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """
    Run the HTTP server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
        reload: Enable hot reloading (default: False)
    """
    import uvicorn

    logger.info(f"Starting server on {host}:{port} (reload={'enabled' if reload else 'disabled'})")

    if reload:
        uvicorn.run(
            "storefront_server.http_server:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["storefront_server"],
            log_level="info",
        )
    else:
        uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_http_server(reload=True)
