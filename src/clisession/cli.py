"""Command-line interface for clisession.

Provides the entry points for serving command sessions over plain TCP
connections and for running the HTTP bridge.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="clisession",
        description="Interactive command sessions over a network connection",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/clisession.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Accept line-oriented TCP sessions")
    serve_parser.add_argument("--host", type=str, default=None, help="Override server.host")
    serve_parser.add_argument("--port", type=int, default=None, help="Override server.port")

    http_parser = subparsers.add_parser("http", help="Run the HTTP bridge")
    http_parser.add_argument("--host", type=str, default=None, help="Override http.host")
    http_parser.add_argument("--port", type=int, default=None, help="Override http.port")

    return parser.parse_args(argv)


async def _serve(settings) -> None:
    """Run the TCP session server until interrupted."""
    from clisession.application import CliApplication

    application = CliApplication(settings)
    await application.serve()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the clisession CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from clisession.config.settings import load_settings
    from clisession.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        if args.host:
            settings.server.host = args.host
        if args.port:
            settings.server.port = args.port
        logger.info("Starting session server")
        try:
            asyncio.run(_serve(settings))
        except KeyboardInterrupt:
            logger.info("Interrupted")

    elif args.command == "http":
        if args.host:
            settings.http.host = args.host
        if args.port:
            settings.http.port = args.port
        logger.info("Starting HTTP bridge")
        from clisession.application import CliApplication
        from clisession.http_bridge import create_app
        import uvicorn

        app = create_app(CliApplication(settings))
        uvicorn.run(
            app,
            host=settings.http.host,
            port=settings.http.port,
        )


if __name__ == "__main__":
    main()
