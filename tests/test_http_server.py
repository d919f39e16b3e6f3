import unittest

from fastapi.testclient import TestClient

from fakes import FakeClient, make_order, make_product
from storefront_server import http_server
from storefront_server.cart import CartManager
from storefront_server.models import Category, StoredOrderSummary
from storefront_server.orders import OrderHistory
from storefront_server.store import MemoryStore
from storefront_server.storefront import Storefront

CUSTOMER = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "phone": "01700000000",
    "address": "12 Analytical Row",
    "city": "Dhaka",
    "state": "Dhaka",
    "postcode": "1207",
}


class HttpServerTestCase(unittest.TestCase):
    def setUp(self):
        self.store = MemoryStore()
        self.fake = FakeClient()
        self.fake.products = {10: make_product(10, "19.99")}
        http_server.storefront = Storefront(
            self.fake, CartManager(self.store), OrderHistory(self.store, self.fake)
        )
        # Lifespan is not entered, so no real backend or store file is touched.
        self.http = TestClient(http_server.app)

    def tearDown(self):
        http_server.storefront = None

    def test_health(self):
        response = self.http.get("/health")

        self.assertEqual(response.json(), {"status": "healthy", "initialized": True})

    def test_categories_hide_empty(self):
        self.fake.categories = [Category(id=1, name="Tea", count=2), Category(id=2, name="X", count=0)]

        response = self.http.get("/categories")

        self.assertEqual(response.json()["count"], 1)

    def test_cart_flow(self):
        response = self.http.post("/cart/add", json={"product_id": 10, "quantity": 2})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["cart"]["item_count"], 2)

        self.http.post("/cart/add", json={"product_id": 10, "quantity": 3})
        cart = self.http.get("/cart").json()
        self.assertEqual(len(cart["items"]), 1)
        self.assertEqual(cart["items"][0]["quantity"], 5)

        cart = self.http.post("/cart/update", json={"product_id": 10, "quantity": 0}).json()["cart"]
        self.assertEqual(cart["items"], [])
        self.assertEqual(cart["item_count"], 0)

    def test_add_unknown_product(self):
        response = self.http.post("/cart/add", json={"product_id": 99})

        self.assertEqual(response.status_code, 404)

    def test_checkout_validation_error(self):
        self.http.post("/cart/add", json={"product_id": 10})

        response = self.http.post("/checkout", json={**CUSTOMER, "email": "bad"})

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"], "Please enter a valid email address")

    def test_checkout_records_order(self):
        self.http.post("/cart/add", json={"product_id": 10, "quantity": 2})

        response = self.http.post("/checkout", json=CUSTOMER)

        self.assertEqual(response.status_code, 200)
        orders = self.http.get("/orders").json()["orders"]
        self.assertEqual(orders[0]["orderNumber"], "WC-500")
        self.assertEqual(self.http.get("/cart").json()["items"], [])

    def test_order_detail_deleted_remotely(self):
        http_server.storefront.orders.orders = [
            StoredOrderSummary(id=3, order_number="3", total="1", status="pending", date_created="x")
        ]

        response = self.http.get("/orders/3")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.http.get("/orders").json()["count"], 0)

    def test_refresh_orders(self):
        http_server.storefront.orders.orders = [
            StoredOrderSummary(id=3, order_number="3", total="1", status="pending", date_created="x")
        ]
        self.fake.orders[3] = make_order(3, status="completed", total="1")

        response = self.http.post("/orders/refresh")

        body = response.json()
        self.assertEqual(body["updated"], 1)
        self.assertEqual(body["message"], "Updated 1 order status(es) from the server.")


if __name__ == "__main__":
    unittest.main()
