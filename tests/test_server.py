import unittest

from fakes import FakeClient, make_product
from storefront_server import server
from storefront_server.cart import CartManager
from storefront_server.errors import APIError
from storefront_server.models import StoredOrderSummary
from storefront_server.orders import OrderHistory
from storefront_server.store import MemoryStore
from storefront_server.storefront import Storefront


class McpToolsTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryStore()
        self.fake = FakeClient()
        self.fake.products = {10: make_product(10, "19.99")}
        self.storefront = Storefront(
            self.fake, CartManager(self.store), OrderHistory(self.store, self.fake)
        )
        server.storefront = self.storefront

    async def call(self, name, **arguments):
        result = await server.call_tool(name, arguments)
        return result[0].text

    async def test_tools_are_listed(self):
        tools = await server.list_tools()

        names = {tool.name for tool in tools}
        self.assertIn("storefront_checkout", names)
        self.assertIn("storefront_refresh_orders", names)

    async def test_add_and_show_cart(self):
        text = await self.call("storefront_add_to_cart", product_id=10, quantity=2)
        self.assertIn("Added product 10", text)

        text = await self.call("storefront_get_cart")
        self.assertIn("Shopping Cart (2 items)", text)
        self.assertIn("Total: $39.98", text)

    async def test_empty_cart(self):
        self.assertEqual(await self.call("storefront_get_cart"), "Your cart is empty")

    async def test_update_missing_item(self):
        text = await self.call("storefront_update_cart", product_id=10, quantity=3)

        self.assertEqual(text, "Product 10 is not in the cart")

    async def test_checkout_validation_message(self):
        await self.call("storefront_add_to_cart", product_id=10)

        text = await self.call(
            "storefront_checkout",
            first_name="",
            last_name="L",
            email="a@b.co",
            phone="1",
            address="x",
            city="y",
            state="z",
            postcode="1",
        )

        self.assertEqual(text, "Error: Please fill in the first name")

    async def test_checkout_remote_failure_asks_to_retry(self):
        await self.call("storefront_add_to_cart", product_id=10)
        self.fake.create_error = APIError("server error", status_code=500)

        text = await self.call(
            "storefront_checkout",
            first_name="A",
            last_name="L",
            email="a@b.co",
            phone="1",
            address="x",
            city="y",
            state="z",
            postcode="1",
        )

        self.assertIn("Please try again", text)
        self.assertEqual(self.storefront.cart.item_count, 1)

    async def test_order_details_not_found(self):
        self.storefront.orders.orders = [
            StoredOrderSummary(id=3, order_number="3", total="1", status="pending", date_created="x")
        ]

        text = await self.call("storefront_get_order_details", order_id=3)

        self.assertIn("removed from your local list", text)
        self.assertEqual(self.storefront.orders.orders, [])

    async def test_refresh_orders_all_valid(self):
        text = await self.call("storefront_refresh_orders")

        self.assertEqual(text, "All Orders Valid\nAll your orders are up to date with the server.")


if __name__ == "__main__":
    unittest.main()
