"""Data models for WooCommerce storefront entities."""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryImage(BaseModel):
    """Image attached to a product category."""

    id: int = 0
    src: str = ""
    name: str = ""
    alt: str = ""


class Category(BaseModel):
    """Represents a product category."""

    model_config = ConfigDict(extra="allow")

    id: int = Field(description="Category ID")
    name: str = Field(description="Category name")
    slug: str = ""
    description: str = ""
    display: str = "default"
    image: Optional[CategoryImage] = None
    menu_order: int = 0
    count: int = Field(default=0, description="Number of published products")


class ProductImage(BaseModel):
    """Image attached to a product."""

    id: int = 0
    src: str = ""
    name: str = ""
    alt: str = ""
    position: int = 0


class CategoryRef(BaseModel):
    """Category reference embedded in a product."""

    id: int
    name: str = ""
    slug: str = ""


class Product(BaseModel):
    """Represents a product from the store catalog.

    Prices are kept exactly as the backend sends them (decimal strings) and
    unknown fields are preserved so a stored snapshot round-trips.
    """

    model_config = ConfigDict(extra="allow")

    id: int = Field(description="Product ID")
    name: str = Field(description="Product name")
    slug: str = ""
    permalink: str = ""
    sku: str = ""
    price: str = Field(default="", description="Current price as a decimal string")
    regular_price: str = ""
    sale_price: str = ""
    on_sale: bool = False
    purchasable: bool = True
    stock_status: str = "instock"
    short_description: str = ""
    images: list[ProductImage] = Field(default_factory=list)
    categories: list[CategoryRef] = Field(default_factory=list)

    @property
    def image_url(self) -> Optional[str]:
        """Source of the first product image, if any."""
        return self.images[0].src if self.images else None


class CartItem(BaseModel):
    """A line item: product snapshot and quantity."""

    product: Product
    quantity: int = Field(ge=1, description="Quantity of the product")


class Cart(BaseModel):
    """Cart state. ``total`` and ``item_count`` are derived from ``items``."""

    items: list[CartItem] = Field(default_factory=list, description="Cart items")
    total: Decimal = Field(default=Decimal("0"), description="Total cart value")
    item_count: int = Field(default=0, description="Total number of units")


class StoredOrderSummary(BaseModel):
    """Locally cached summary of a placed order."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    order_number: str = Field(alias="orderNumber")
    total: str
    status: str
    date_created: str = Field(alias="dateCreated")


class Address(BaseModel):
    """Billing or shipping address."""

    first_name: str
    last_name: str
    address_1: str
    address_2: Optional[str] = None
    city: str
    state: str
    postcode: str
    country: str
    email: Optional[str] = None
    phone: Optional[str] = None


class OrderLineItemInput(BaseModel):
    """Line item sent when creating an order."""

    product_id: int
    quantity: int
    name: Optional[str] = None
    price: Optional[str] = None


class CreateOrderData(BaseModel):
    """Payload for creating an order."""

    payment_method: str
    payment_method_title: str
    set_paid: bool = False
    billing: Address
    shipping: Address
    line_items: list[OrderLineItemInput]


class OrderLineItem(BaseModel):
    """Line item of a server-side order."""

    model_config = ConfigDict(extra="allow")

    id: int = 0
    name: str = ""
    product_id: int = 0
    quantity: int = 0
    price: Any = ""
    total: str = ""


class Order(BaseModel):
    """Represents an order record returned by the backend."""

    model_config = ConfigDict(extra="allow")

    id: int = Field(description="Order ID")
    number: str = Field(description="Human-readable order number")
    status: str = Field(description="Order status (pending, processing, completed, ...)")
    currency: str = ""
    date_created: str = ""
    total: str = "0"
    billing: dict[str, Any] = Field(default_factory=dict)
    shipping: dict[str, Any] = Field(default_factory=dict)
    payment_method: str = ""
    payment_method_title: str = ""
    line_items: list[OrderLineItem] = Field(default_factory=list)


class EnrichedLineItem(BaseModel):
    """Order line item with the product image looked up separately."""

    id: int
    name: str
    product_id: int
    quantity: int
    price: str
    total: str
    image_src: Optional[str] = None


class OrderDetail(BaseModel):
    """Order with enriched line items.

    ``missing_images`` lists the product ids whose image lookup failed; the
    corresponding line items carry no image.
    """

    order: Order
    line_items: list[EnrichedLineItem] = Field(default_factory=list)
    missing_images: list[int] = Field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.missing_images)


class CustomerInfo(BaseModel):
    """Checkout form contents."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = "BD"


class ReconcileMode(str, Enum):
    """How a reconciliation pass reports its outcome."""

    QUIET = "quiet"
    INTERACTIVE = "interactive"


class ReconcileResult(BaseModel):
    """Outcome of a reconciliation pass."""

    checked: int = 0
    removed: int = 0
    updated: int = 0
    failed: int = 0

    @property
    def changed(self) -> bool:
        return self.removed > 0 or self.updated > 0

    @property
    def message(self) -> str:
        """Summary suitable for showing to the user."""
        if self.removed and self.updated:
            return (
                f"Removed {self.removed} deleted order(s) and updated "
                f"{self.updated} order status(es)."
            )
        if self.removed:
            return f"Removed {self.removed} deleted order(s) from your local list."
        if self.updated:
            return f"Updated {self.updated} order status(es) from the server."
        return "All your orders are up to date with the server."
