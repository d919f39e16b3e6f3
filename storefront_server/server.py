"""MCP Server for a WooCommerce storefront."""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl

from .config import Settings, build_storefront
from .errors import APIError, CheckoutValidationError, NotFoundError
from .models import Cart, CustomerInfo, OrderDetail, Product, ReconcileMode
from .storefront import Storefront

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("storefront-mcp-server")

# Initialize server
app = Server("storefront-mcp-server")

# Global state
storefront: Storefront


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def format_product(index: int, product: Product) -> list[str]:
    lines = [f"\n{index}. {product.name}", f"   Product ID: {product.id}"]
    if product.on_sale and product.regular_price:
        lines.append(f"   Price: ${product.price} (was ${product.regular_price})")
    else:
        lines.append(f"   Price: ${product.price or 'N/A'}")
    if product.stock_status != "instock":
        lines.append(f"   Stock: {product.stock_status}")
    if product.categories:
        lines.append(f"   Categories: {', '.join(c.name for c in product.categories)}")
    return lines


def format_cart(cart: Cart) -> str:
    if not cart.items:
        return "Your cart is empty"

    lines = [f"Shopping Cart ({cart.item_count} items):\n"]
    for i, item in enumerate(cart.items, 1):
        lines.append(f"\n{i}. {item.product.name}")
        lines.append(f"   Product ID: {item.product.id}")
        lines.append(f"   Price: ${item.product.price}")
        lines.append(f"   Quantity: {item.quantity}")

    lines.append(f"\n{'='*50}")
    lines.append(f"Total: ${cart.total:.2f}")
    return "\n".join(lines)


def format_order_detail(detail: OrderDetail) -> str:
    order = detail.order
    lines = ["Order Details:\n"]
    lines.append(f"Order #{order.number}")
    lines.append(f"Status: {order.status}")
    lines.append(f"Date: {order.date_created}")
    lines.append(f"Total: ${order.total}")
    if order.payment_method_title:
        lines.append(f"Payment: {order.payment_method_title}")
    if order.billing.get("email"):
        lines.append(f"Email: {order.billing['email']}")

    if detail.line_items:
        lines.append(f"\nItems ({len(detail.line_items)}):")
        for i, item in enumerate(detail.line_items, 1):
            lines.append(f"\n{i}. {item.name}")
            lines.append(f"   Quantity: {item.quantity}")
            lines.append(f"   Price: ${item.price}")
            lines.append(f"   Subtotal: ${item.total}")
            if item.image_src:
                lines.append(f"   Image: {item.image_src}")
    else:
        lines.append("\nNo items found for this order")

    if detail.is_partial:
        lines.append(f"\n(Images unavailable for {len(detail.missing_images)} item(s))")
    return "\n".join(lines)


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl("storefront://cart"),
            name="Shopping Cart",
            mimeType="application/json",
            description="Current shopping cart contents",
        ),
        Resource(
            uri=AnyUrl("storefront://orders"),
            name="Orders",
            mimeType="application/json",
            description="Locally recorded orders, newest first",
        ),
    ]


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    uri_str = str(uri)

    if uri_str == "storefront://cart":
        return storefront.cart.state.model_dump_json(indent=2)

    elif uri_str == "storefront://orders":
        result = [order.model_dump(by_alias=True) for order in storefront.orders.orders]
        return json.dumps(result, indent=2)

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="storefront_list_categories",
            description="List product categories that contain products",
            inputSchema={
                "type": "object",
                "properties": {
                    "page": {"type": "integer", "description": "Page number (default: 1)", "default": 1},
                },
            },
        ),
        Tool(
            name="storefront_list_products",
            description="List products, optionally filtered by category or search term",
            inputSchema={
                "type": "object",
                "properties": {
                    "category_id": {
                        "type": "integer",
                        "description": "Only products in this category (optional)",
                    },
                    "search": {
                        "type": "string",
                        "description": "Free-text search term (optional)",
                    },
                    "page": {"type": "integer", "description": "Page number (default: 1)", "default": 1},
                },
            },
        ),
        Tool(
            name="storefront_get_product",
            description="Get full details of a product",
            inputSchema={
                "type": "object",
                "properties": {
                    "product_id": {"type": "integer", "description": "Product ID"},
                },
                "required": ["product_id"],
            },
        ),
        Tool(
            name="storefront_add_to_cart",
            description="Add a product to the cart (merges with an existing line)",
            inputSchema={
                "type": "object",
                "properties": {
                    "product_id": {"type": "integer", "description": "Product ID"},
                    "quantity": {
                        "type": "integer",
                        "description": "Quantity to add (default: 1)",
                        "default": 1,
                    },
                },
                "required": ["product_id"],
            },
        ),
        Tool(
            name="storefront_remove_from_cart",
            description="Remove a product from the cart",
            inputSchema={
                "type": "object",
                "properties": {
                    "product_id": {"type": "integer", "description": "Product ID to remove"},
                },
                "required": ["product_id"],
            },
        ),
        Tool(
            name="storefront_update_cart",
            description="Set the quantity of a product in the cart (0 removes it)",
            inputSchema={
                "type": "object",
                "properties": {
                    "product_id": {"type": "integer", "description": "Product ID"},
                    "quantity": {"type": "integer", "description": "New quantity"},
                },
                "required": ["product_id", "quantity"],
            },
        ),
        Tool(
            name="storefront_get_cart",
            description="Get current shopping cart contents",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_clear_cart",
            description="Remove everything from the cart",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_checkout",
            description="Place a cash-on-delivery order for the cart contents",
            inputSchema={
                "type": "object",
                "properties": {
                    "first_name": {"type": "string"},
                    "last_name": {"type": "string"},
                    "email": {"type": "string"},
                    "phone": {"type": "string"},
                    "address": {"type": "string"},
                    "city": {"type": "string"},
                    "state": {"type": "string"},
                    "postcode": {"type": "string"},
                    "country": {
                        "type": "string",
                        "description": "ISO country code (default: BD)",
                        "default": "BD",
                    },
                },
                "required": [
                    "first_name",
                    "last_name",
                    "email",
                    "phone",
                    "address",
                    "city",
                    "state",
                    "postcode",
                ],
            },
        ),
        Tool(
            name="storefront_get_orders",
            description="List locally recorded orders, newest first",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_get_order_details",
            description="Get full details of an order, including line items",
            inputSchema={
                "type": "object",
                "properties": {
                    "order_id": {"type": "integer", "description": "Order ID"},
                },
                "required": ["order_id"],
            },
        ),
        Tool(
            name="storefront_refresh_orders",
            description="Check recorded orders against the store, dropping deleted ones and updating statuses",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    try:
        if name == "storefront_list_categories":
            categories = await storefront.list_categories(page=arguments.get("page", 1))

            if not categories:
                return _text("No categories found")

            result_lines = [f"Found {len(categories)} category(ies):\n"]
            for i, category in enumerate(categories, 1):
                result_lines.append(f"\n{i}. {category.name}")
                result_lines.append(f"   Category ID: {category.id}")
                result_lines.append(f"   Products: {category.count}")

            return _text("\n".join(result_lines))

        elif name == "storefront_list_products":
            products = await storefront.list_products(
                category_id=arguments.get("category_id"),
                search=arguments.get("search"),
                page=arguments.get("page", 1),
            )

            if not products:
                return _text("No products found")

            result_lines = [f"Found {len(products)} product(s):\n"]
            for i, product in enumerate(products, 1):
                result_lines.extend(format_product(i, product))

            return _text("\n".join(result_lines))

        elif name == "storefront_get_product":
            product = await storefront.get_product(arguments["product_id"])
            result_lines = format_product(1, product)[1:]
            if product.short_description:
                result_lines.append(f"   Description: {product.short_description}")
            if product.image_url:
                result_lines.append(f"   Image: {product.image_url}")
            return _text(f"{product.name}\n" + "\n".join(result_lines))

        elif name == "storefront_add_to_cart":
            product_id = arguments["product_id"]
            quantity = arguments.get("quantity", 1)

            cart = await storefront.add_product_to_cart(product_id, quantity)
            return _text(
                f"Added product {product_id} (quantity: {quantity}) to cart\n"
                f"Cart: {cart.item_count} item(s), total ${cart.total:.2f}"
            )

        elif name == "storefront_remove_from_cart":
            product_id = arguments["product_id"]

            if storefront.cart.get_cart_item(product_id) is None:
                return _text(f"Product {product_id} is not in the cart")

            await storefront.cart.remove_from_cart(product_id)
            return _text(f"Removed product {product_id} from cart")

        elif name == "storefront_update_cart":
            product_id = arguments["product_id"]
            quantity = arguments["quantity"]

            if storefront.cart.get_cart_item(product_id) is None:
                return _text(f"Product {product_id} is not in the cart")

            await storefront.cart.update_quantity(product_id, quantity)
            if quantity <= 0:
                return _text(f"Removed product {product_id} from cart")
            return _text(f"Updated product {product_id} to quantity {quantity}")

        elif name == "storefront_get_cart":
            return _text(format_cart(storefront.cart.state))

        elif name == "storefront_clear_cart":
            await storefront.cart.clear_cart()
            return _text("Cart cleared")

        elif name == "storefront_checkout":
            customer_info = CustomerInfo(**arguments)
            order = await storefront.place_order(customer_info)
            return _text(
                f"Order Placed Successfully!\n"
                f"Your order #{order.number} has been placed. Total: ${order.total}\n"
                f"Status: {order.status}"
            )

        elif name == "storefront_get_orders":
            orders = storefront.orders.orders
            if not orders:
                return _text("No orders found")

            result_lines = [f"Found {len(orders)} order(s):\n"]
            for i, order in enumerate(orders, 1):
                result_lines.append(f"\n{i}. Order #{order.order_number}")
                result_lines.append(f"   Order ID: {order.id}")
                result_lines.append(f"   Status: {order.status}")
                result_lines.append(f"   Date: {order.date_created}")
                result_lines.append(f"   Total: ${order.total}")

            return _text("\n".join(result_lines))

        elif name == "storefront_get_order_details":
            order_id = arguments["order_id"]
            try:
                detail = await storefront.get_order_detail(order_id)
            except NotFoundError:
                return _text(
                    f"Order {order_id} not found. It has been deleted from the server "
                    "and was removed from your local list."
                )
            return _text(format_order_detail(detail))

        elif name == "storefront_refresh_orders":
            result = await storefront.refresh_orders(ReconcileMode.INTERACTIVE)
            if result.changed:
                return _text(f"Cleanup Complete\n{result.message}")
            return _text(f"All Orders Valid\n{result.message}")

        else:
            return _text(f"Unknown tool: {name}")

    except CheckoutValidationError as e:
        return _text(f"Error: {e}")
    except APIError as e:
        logger.error(f"Store request failed in tool {name}: {e}")
        return _text(f"Error: {e}. Please try again.")
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return _text(f"Error: {str(e)}")


async def main() -> None:
    """Main entry point for the MCP server."""
    global storefront

    settings = Settings.from_env()
    storefront = build_storefront(settings)
    await storefront.start(reconcile_delay=settings.reconcile_delay)

    logger.info(f"Starting Storefront MCP Server for {settings.woocommerce_url}...")

    # Import and run the server
    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        await storefront.close()


if __name__ == "__main__":
    asyncio.run(main())
