"""Configuration loaded from environment variables."""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

from .cart import CartManager
from .orders import OrderHistory
from .store import JsonFileStore
from .storefront import Storefront
from .woocommerce_client import WooCommerceClient

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Runtime settings."""

    woocommerce_url: str = Field(default=WooCommerceClient.DEFAULT_BASE_URL)
    consumer_key: str = ""
    consumer_secret: str = ""
    store_file: Optional[str] = Field(None, description="Local store path (default ~/.storefront_store.json)")
    reconcile_delay: float = Field(default=2.0, description="Seconds before the background order check")
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Read settings from the environment.

        Environment variables:
        - WOOCOMMERCE_URL: REST API root
        - WOOCOMMERCE_CONSUMER_KEY / WOOCOMMERCE_CONSUMER_SECRET: API credentials
        - STOREFRONT_STORE_FILE: local store path
        - STOREFRONT_RECONCILE_DELAY: delay before the background order check
        - STOREFRONT_TIMEOUT: HTTP timeout in seconds
        """
        settings = cls(
            woocommerce_url=os.environ.get("WOOCOMMERCE_URL", WooCommerceClient.DEFAULT_BASE_URL),
            consumer_key=os.environ.get("WOOCOMMERCE_CONSUMER_KEY", ""),
            consumer_secret=os.environ.get("WOOCOMMERCE_CONSUMER_SECRET", ""),
            store_file=os.environ.get("STOREFRONT_STORE_FILE"),
            reconcile_delay=float(os.environ.get("STOREFRONT_RECONCILE_DELAY", "2.0")),
            timeout=float(os.environ.get("STOREFRONT_TIMEOUT", "10.0")),
        )

        if not settings.consumer_key or not settings.consumer_secret:
            logger.warning(
                "WooCommerce API credentials not found in environment variables "
                "(WOOCOMMERCE_CONSUMER_KEY, WOOCOMMERCE_CONSUMER_SECRET)"
            )

        return settings


def build_storefront(settings: Settings) -> Storefront:
    """Wire the client, local store, cart and order history together."""
    client = WooCommerceClient(
        base_url=settings.woocommerce_url,
        consumer_key=settings.consumer_key,
        consumer_secret=settings.consumer_secret,
        timeout=settings.timeout,
    )
    store = JsonFileStore(settings.store_file)
    return Storefront(client, CartManager(store), OrderHistory(store, client))
