"""WooCommerce REST API client."""

import logging
from typing import Any, Optional

import httpx

from .errors import APIError, NotFoundError
from .models import Category, CreateOrderData, Order, Product

logger = logging.getLogger(__name__)


class WooCommerceClient:
    """Client for the WooCommerce v3 REST API."""

    DEFAULT_BASE_URL = "https://ec.extramilebd.com/wp-json/wc/v3"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        consumer_key: str = "",
        consumer_secret: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the WooCommerce client.

        Args:
            base_url: REST API root, e.g. https://shop.example/wp-json/wc/v3
            consumer_key: API consumer key (basic auth username)
            consumer_secret: API consumer secret (basic auth password)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the backend
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(consumer_key, consumer_secret),
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            NotFoundError: The backend answered 404
            APIError: Any other HTTP error, timeout or transport failure
        """
        try:
            response = await self.client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            logger.error(f"{method} {path} timed out: {e}")
            raise APIError(f"Request to {path} timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise APIError(f"Request to {path} failed: {e}") from e

        logger.debug(f"{method} {path}: status={response.status_code}")

        if response.status_code == 404:
            logger.warning(f"{method} {path}: not found")
            raise NotFoundError(f"{path} not found")
        if response.status_code >= 400:
            logger.error(f"{method} {path}: HTTP {response.status_code}")
            raise APIError(
                f"Request to {path} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} {path}: invalid JSON response")
            raise APIError(f"Invalid JSON from {path}", status_code=response.status_code) from e

    async def get_categories(self, per_page: int = 100, page: int = 1) -> list[Category]:
        """
        Get product categories.

        Args:
            per_page: Page size
            page: Page number (1-based)

        Returns:
            Categories as returned by the backend (empty ones hidden server-side)
        """
        data = await self._request(
            "GET",
            "/products/categories",
            params={"per_page": per_page, "page": page, "hide_empty": "true"},
        )
        return [Category.model_validate(item) for item in data]

    async def get_products_by_category(
        self, category_id: int, per_page: int = 20, page: int = 1
    ) -> list[Product]:
        """Get published products of a category."""
        data = await self._request(
            "GET",
            "/products",
            params={
                "category": category_id,
                "per_page": per_page,
                "page": page,
                "status": "publish",
            },
        )
        return [Product.model_validate(item) for item in data]

    async def get_products(
        self, per_page: int = 20, page: int = 1, search: str = ""
    ) -> list[Product]:
        """Get published products, optionally filtered by a search term."""
        data = await self._request(
            "GET",
            "/products",
            params={
                "per_page": per_page,
                "page": page,
                "status": "publish",
                "search": search,
            },
        )
        return [Product.model_validate(item) for item in data]

    async def get_product(self, product_id: int) -> Product:
        """Get a single product by ID."""
        data = await self._request("GET", f"/products/{product_id}")
        return Product.model_validate(data)

    async def create_order(self, order_data: CreateOrderData) -> Order:
        """
        Create an order.

        Returns:
            The created order with server-assigned id, number, status and total
        """
        logger.info(f"Creating order with {len(order_data.line_items)} line item(s)")
        data = await self._request(
            "POST", "/orders", json=order_data.model_dump(exclude_none=True)
        )
        order = Order.model_validate(data)
        logger.info(f"Created order {order.id} (#{order.number}), status={order.status}")
        return order

    async def get_order(self, order_id: int) -> Order:
        """
        Get a single order by ID.

        Raises:
            NotFoundError: The order was deleted or never existed
        """
        data = await self._request("GET", f"/orders/{order_id}")
        return Order.model_validate(data)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
