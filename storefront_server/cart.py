"""Shopping cart state and persistence."""

import json
import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import ValidationError

from .models import Cart, CartItem, Product
from .store import CART_KEY, KeyValueStore

logger = logging.getLogger(__name__)

PRICE_RE = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class AddToCart:
    product: Product
    quantity: int = 1


@dataclass(frozen=True)
class RemoveFromCart:
    product_id: int


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class LoadCart:
    items: list[CartItem]


CartAction = Union[AddToCart, RemoveFromCart, UpdateQuantity, ClearCart, LoadCart]


def parse_price(value: Optional[str]) -> Decimal:
    """Parse the leading number of a price string, e.g. "19.99 BDT" -> 19.99.

    Strings without a leading number count as zero.
    """
    if value is None:
        return Decimal("0")
    match = PRICE_RE.match(str(value))
    if not match:
        return Decimal("0")
    try:
        return Decimal(match.group(0).strip())
    except InvalidOperation:
        return Decimal("0")


def calculate_total(items: list[CartItem]) -> Decimal:
    return sum(
        (parse_price(item.product.price) * item.quantity for item in items),
        Decimal("0"),
    )


def calculate_item_count(items: list[CartItem]) -> int:
    return sum(item.quantity for item in items)


def _with_items(items: list[CartItem]) -> Cart:
    """Build a cart whose derived fields are computed from ``items``."""
    return Cart(
        items=items,
        total=calculate_total(items),
        item_count=calculate_item_count(items),
    )


def cart_reducer(state: Cart, action: CartAction) -> Cart:
    """Return the cart that results from applying ``action`` to ``state``.

    ``state`` is never modified.
    """
    if isinstance(action, AddToCart):
        product_id = action.product.id
        if any(item.product.id == product_id for item in state.items):
            items = [
                item.model_copy(update={"quantity": item.quantity + action.quantity})
                if item.product.id == product_id
                else item
                for item in state.items
            ]
        else:
            items = [*state.items, CartItem(product=action.product, quantity=action.quantity)]
        return _with_items(items)

    if isinstance(action, RemoveFromCart):
        return _with_items([i for i in state.items if i.product.id != action.product_id])

    if isinstance(action, UpdateQuantity):
        if action.quantity <= 0:
            return _with_items([i for i in state.items if i.product.id != action.product_id])
        return _with_items(
            [
                item.model_copy(update={"quantity": action.quantity})
                if item.product.id == action.product_id
                else item
                for item in state.items
            ]
        )

    if isinstance(action, ClearCart):
        return Cart()

    if isinstance(action, LoadCart):
        return _with_items(list(action.items))

    raise TypeError(f"Unknown cart action: {action!r}")


class CartManager:
    """Holds the cart and mirrors its items to the key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self.state = Cart()

    @property
    def items(self) -> list[CartItem]:
        return self.state.items

    @property
    def total(self) -> Decimal:
        return self.state.total

    @property
    def item_count(self) -> int:
        return self.state.item_count

    async def load(self) -> Cart:
        """Restore the cart from storage.

        Only the item list is read back; totals are recomputed.
        """
        try:
            raw = await self.store.get(CART_KEY)
        except Exception as e:
            logger.error(f"Error loading cart from storage: {e}")
            return self.state

        if not raw:
            logger.info("No stored cart found, starting empty")
            return self.state

        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Ignoring malformed stored cart: {e}")
            return self.state
        if not isinstance(entries, list):
            logger.error("Ignoring stored cart that is not a list of items")
            return self.state

        items: list[CartItem] = []
        for index, entry in enumerate(entries):
            try:
                items.append(CartItem.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping invalid stored cart item {index}: {e}")

        self.state = cart_reducer(self.state, LoadCart(items))
        logger.info(f"Restored cart: {len(items)} line item(s), {self.state.item_count} unit(s)")
        return self.state

    async def dispatch(self, action: CartAction) -> Cart:
        """Apply an action and persist the resulting item list."""
        self.state = cart_reducer(self.state, action)
        await self._persist()
        return self.state

    async def _persist(self) -> None:
        payload = json.dumps(
            [item.model_dump(mode="json") for item in self.state.items]
        )
        try:
            await self.store.set(CART_KEY, payload)
        except Exception as e:
            # The in-memory cart stays authoritative for this session.
            logger.error(f"Error saving cart to storage: {e}")

    async def add_to_cart(self, product: Product, quantity: int = 1) -> Cart:
        logger.info(f"Adding product {product.id} to cart (qty: {quantity})")
        return await self.dispatch(AddToCart(product, quantity))

    async def remove_from_cart(self, product_id: int) -> Cart:
        logger.info(f"Removing product {product_id} from cart")
        return await self.dispatch(RemoveFromCart(product_id))

    async def update_quantity(self, product_id: int, quantity: int) -> Cart:
        logger.info(f"Setting product {product_id} quantity to {quantity}")
        return await self.dispatch(UpdateQuantity(product_id, quantity))

    async def clear_cart(self) -> Cart:
        logger.info("Clearing cart")
        return await self.dispatch(ClearCart())

    def get_cart_item(self, product_id: int) -> Optional[CartItem]:
        for item in self.state.items:
            if item.product.id == product_id:
                return item
        return None
