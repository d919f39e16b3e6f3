"""Storefront operations combining the catalog client, cart and order history."""

import asyncio
import logging
from typing import Optional

from .cart import CartManager
from .checkout import build_order_data, validate_customer_info
from .errors import CheckoutValidationError, NotFoundError
from .models import (
    Cart,
    Category,
    CustomerInfo,
    EnrichedLineItem,
    Order,
    OrderDetail,
    OrderLineItem,
    Product,
    ReconcileMode,
    ReconcileResult,
)
from .orders import OrderHistory
from .woocommerce_client import WooCommerceClient

logger = logging.getLogger(__name__)


class Storefront:
    """Entry point used by the MCP and HTTP servers."""

    def __init__(
        self, client: WooCommerceClient, cart: CartManager, orders: OrderHistory
    ) -> None:
        self.client = client
        self.cart = cart
        self.orders = orders

    async def start(self, reconcile_delay: Optional[float] = 2.0) -> None:
        """Restore cart and orders; optionally schedule the background check."""
        await self.cart.load()
        await self.orders.load_from_storage()
        if reconcile_delay is not None:
            self.orders.schedule_quiet_reconcile(reconcile_delay)

    async def list_categories(self, per_page: int = 100, page: int = 1) -> list[Category]:
        """Categories that contain at least one product."""
        categories = await self.client.get_categories(per_page=per_page, page=page)
        return [c for c in categories if c.count > 0]

    async def list_products(
        self,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
        per_page: int = 20,
        page: int = 1,
    ) -> list[Product]:
        if category_id is not None:
            return await self.client.get_products_by_category(
                category_id, per_page=per_page, page=page
            )
        return await self.client.get_products(per_page=per_page, page=page, search=search or "")

    async def get_product(self, product_id: int) -> Product:
        return await self.client.get_product(product_id)

    async def add_product_to_cart(self, product_id: int, quantity: int = 1) -> Cart:
        """Fetch the current product record and add it to the cart."""
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")
        product = await self.client.get_product(product_id)
        return await self.cart.add_to_cart(product, quantity)

    async def place_order(self, customer_info: CustomerInfo) -> Order:
        """
        Validate the form, create the order and record it locally.

        The cart is cleared only once the backend has accepted the order.

        Raises:
            CheckoutValidationError: Invalid form or empty cart
            APIError: The backend rejected or did not answer the request
        """
        validate_customer_info(customer_info)
        if not self.cart.items:
            raise CheckoutValidationError("Your cart is empty")

        order_data = build_order_data(customer_info, self.cart.state)
        order = await self.client.create_order(order_data)

        await self.orders.record_order(order)
        await self.cart.clear_cart()
        logger.info(f"Order #{order.number} placed, total {order.total}")
        return order

    async def _enrich_line_item(self, item: OrderLineItem) -> tuple[EnrichedLineItem, bool]:
        enriched = EnrichedLineItem(
            id=item.id,
            name=item.name,
            product_id=item.product_id,
            quantity=item.quantity,
            price=str(item.price),
            total=item.total,
        )
        try:
            product = await self.client.get_product(item.product_id)
        except Exception as e:
            logger.warning(f"Could not fetch product details for product {item.product_id}: {e}")
            return enriched, False
        enriched.image_src = product.image_url
        return enriched, True

    async def get_order_detail(self, order_id: int) -> OrderDetail:
        """
        Fetch an order with product images for its line items.

        Image lookups that fail leave the line item without an image and are
        listed in ``missing_images``. The cached summary is refreshed with
        the server's status and total.

        Raises:
            NotFoundError: The order was deleted; it is dropped from history
            APIError: The order could not be fetched
        """
        try:
            order = await self.client.get_order(order_id)
        except NotFoundError:
            logger.info(f"Order {order_id} not found on server, removing from history")
            await self.orders.remove_order(order_id)
            raise

        results = await asyncio.gather(
            *(self._enrich_line_item(item) for item in order.line_items)
        )
        detail = OrderDetail(
            order=order,
            line_items=[enriched for enriched, _ in results],
            missing_images=[enriched.product_id for enriched, ok in results if not ok],
        )

        await self.orders.update_order_fields(order_id, order.status, order.total)
        return detail

    async def refresh_orders(
        self, mode: ReconcileMode = ReconcileMode.INTERACTIVE
    ) -> ReconcileResult:
        """Reconcile the in-memory order history with the backend."""
        return await self.orders.reconcile(mode)

    async def close(self) -> None:
        await self.orders.close()
        await self.client.close()
