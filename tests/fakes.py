"""Test doubles for the storefront collaborators."""

from typing import Any, Optional

from storefront_server.errors import APIError, NotFoundError
from storefront_server.models import CreateOrderData, Order, Product
from storefront_server.store import MemoryStore


def make_product(product_id: int, price: str = "10.00", **extra: Any) -> Product:
    data = {"id": product_id, "name": f"Product {product_id}", "price": price}
    data.update(extra)
    return Product.model_validate(data)


def make_order(order_id: int, status: str = "processing", total: str = "39.98", **extra: Any) -> Order:
    data = {
        "id": order_id,
        "number": str(order_id),
        "status": status,
        "total": total,
        "date_created": "2026-10-01T12:00:00",
    }
    data.update(extra)
    return Order.model_validate(data)


class FailingStore(MemoryStore):
    """Store whose writes always fail."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        super().__init__(initial)
        self.write_attempts = 0

    async def set(self, key: str, value: str) -> None:
        self.write_attempts += 1
        raise OSError("disk full")


class FakeClient:
    """In-memory stand-in for WooCommerceClient.

    ``orders`` maps ids to server orders; ids listed in ``broken_orders``
    fail with a transient error. ``products`` maps ids to products; missing
    ids raise NotFoundError.
    """

    def __init__(self) -> None:
        self.orders: dict[int, Order] = {}
        self.broken_orders: set[int] = set()
        self.products: dict[int, Product] = {}
        self.categories: list = []
        self.created: list[CreateOrderData] = []
        self.create_error: Optional[Exception] = None
        self.order_fetches: list[int] = []
        self.next_order_id = 500
        self.closed = False

    async def get_order(self, order_id: int) -> Order:
        self.order_fetches.append(order_id)
        if order_id in self.broken_orders:
            raise APIError("connection reset")
        if order_id not in self.orders:
            raise NotFoundError(f"/orders/{order_id} not found")
        return self.orders[order_id]

    async def get_product(self, product_id: int) -> Product:
        if product_id not in self.products:
            raise NotFoundError(f"/products/{product_id} not found")
        return self.products[product_id]

    async def get_products(self, per_page: int = 20, page: int = 1, search: str = "") -> list[Product]:
        return [p for p in self.products.values() if search.lower() in p.name.lower()]

    async def get_products_by_category(self, category_id: int, per_page: int = 20, page: int = 1) -> list[Product]:
        return [
            p for p in self.products.values() if any(c.id == category_id for c in p.categories)
        ]

    async def get_categories(self, per_page: int = 100, page: int = 1) -> list:
        return list(self.categories)

    async def create_order(self, order_data: CreateOrderData) -> Order:
        if self.create_error is not None:
            raise self.create_error
        self.created.append(order_data)
        order = make_order(
            self.next_order_id,
            status="pending",
            total="39.98",
            number=f"WC-{self.next_order_id}",
        )
        self.orders[order.id] = order
        self.next_order_id += 1
        return order

    async def close(self) -> None:
        self.closed = True
