"""MCP server for browsing a WooCommerce store, managing a cart and placing orders."""

__version__ = "0.1.0"
