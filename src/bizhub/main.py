"""
BizHub entry point.

This file handles startup concerns (arg-parsing, logging) and launches the requested
service: the directory API, the completion proxy, or the CLI chat client.
"""

import argparse
import logging
import sys

from bizhub.config import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stdout,
    )
    # Outbound request lines from httpx drown out our own logs
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the BizHub application.

    This function sets up the command-line interface, initializes logging, and starts the
    directory API, the completion proxy, or the CLI chat client (which also starts the API).
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(description="Run the BizHub assistant services")
    parser.add_argument(
        "--mode",
        choices=["api", "proxy", "cli"],
        type=str.lower,
        default="api",
        help="Launch the directory API, the completion proxy, or a CLI chat (default: api)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        type=str.lower,
        default=settings.LOG_LEVEL,
        help="Logging level (default from env: %(default)s)",
    )
    args = parser.parse_args(argv)

    # Override log level setting with command-line argument
    settings.LOG_LEVEL = args.log_level

    _init_logging(settings.LOG_LEVEL)

    logger.info("Starting BizHub [%s mode]", args.mode)
    logger.debug("Settings: %s", settings.model_dump(exclude={"GEMINI_API_KEY"}))

    if args.mode == "api":
        # Lazy import to avoid loading the API when only the proxy is needed
        from bizhub.api.app import run_api  # pylint: disable=import-outside-toplevel

        run_api(host="0.0.0.0", port=settings.API_PORT, reload=settings.DEBUG)

    elif args.mode == "proxy":
        from bizhub.proxy.app import run_proxy  # pylint: disable=import-outside-toplevel

        run_proxy(host="0.0.0.0", port=settings.PROXY_PORT, reload=settings.DEBUG)

    else:
        import threading  # pylint: disable=import-outside-toplevel

        from bizhub.api.app import run_api  # pylint: disable=import-outside-toplevel
        from bizhub.client.cli import run_cli  # pylint: disable=import-outside-toplevel

        # Start API server in a separate thread
        api_thread = threading.Thread(
            target=run_api,
            kwargs={
                "host": "0.0.0.0",
                "port": settings.API_PORT,
                "reload": False,  # Reload doesn't work well with threading
                "log_level": "warning",
            },
            daemon=True,
        )
        api_thread.start()

        # Run CLI in main thread
        run_cli()


if __name__ == "__main__":
    main()
