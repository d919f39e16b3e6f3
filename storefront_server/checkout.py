"""Checkout form validation and order payload construction."""

import re

from .errors import CheckoutValidationError
from .models import Address, Cart, CreateOrderData, CustomerInfo, OrderLineItemInput

REQUIRED_FIELDS = [
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "postcode",
]

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_customer_info(info: CustomerInfo) -> None:
    """
    Check the checkout form before anything is sent.

    Raises:
        CheckoutValidationError: With the message to show the user
    """
    for field in REQUIRED_FIELDS:
        if not getattr(info, field).strip():
            raise CheckoutValidationError(f"Please fill in the {field.replace('_', ' ')}")

    if not EMAIL_RE.match(info.email):
        raise CheckoutValidationError("Please enter a valid email address")


def build_order_data(info: CustomerInfo, cart: Cart) -> CreateOrderData:
    """Cash-on-delivery order for the cart, shipped to the billing address."""
    billing = Address(
        first_name=info.first_name,
        last_name=info.last_name,
        address_1=info.address,
        city=info.city,
        state=info.state,
        postcode=info.postcode,
        country=info.country,
        email=info.email,
        phone=info.phone,
    )
    shipping = billing.model_copy(update={"email": None, "phone": None})

    return CreateOrderData(
        payment_method="cod",
        payment_method_title="Cash on Delivery",
        set_paid=False,
        billing=billing,
        shipping=shipping,
        line_items=[
            OrderLineItemInput(
                product_id=item.product.id,
                quantity=item.quantity,
                name=item.product.name,
                price=item.product.price,
            )
            for item in cart.items
        ],
    )
