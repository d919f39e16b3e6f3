"""CLI entry point for Storefront MCP server."""

import argparse
import asyncio
import sys


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Storefront MCP Server - Browse a WooCommerce store, manage a cart and place orders"
    )
    parser.add_argument(
        "--mode",
        choices=["stdio", "http"],
        default="stdio",
        help="Server mode: stdio (for MCP clients) or http (REST API)",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (HTTP mode only, default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (HTTP mode only, default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable hot reloading (HTTP mode only, watches for file changes)",
    )

    args = parser.parse_args()

    if args.mode == "http":
        from .http_server import run_http_server

        print(f"Starting Storefront HTTP Server on {args.host}:{args.port}", file=sys.stderr)
        print(f"API documentation available at http://{args.host}:{args.port}/docs", file=sys.stderr)
        run_http_server(host=args.host, port=args.port, reload=args.reload)
    else:
        from .server import main as server_main

        try:
            asyncio.run(server_main())
        except KeyboardInterrupt:
            print("\nShutting down...", file=sys.stderr)
            sys.exit(0)


if __name__ == "__main__":
    main()
