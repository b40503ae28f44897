"""Entry point for the ETSI MEC Life Cycle Management Proxy."""

import logging
import os

from lcmp.server import build_server
from lcmp.settings import Settings


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main() -> None:
    """Bootstrap and run the Dev App API server."""
    _configure_logging()
    logger = logging.getLogger("lcmp")
    settings = Settings.load()
    logger.info(
        "Application list: %s, application contexts: %s, MCP tools: %s",
        settings.app_list_type,
        settings.app_context_type,
        "enabled" if settings.mcp_enabled else "disabled",
    )
    server = build_server(settings)

    try:
        server.startup()
        logger.info(
            "LCMP ready at http://%s:%s/dev_app/v1",
            settings.host,
            settings.port,
        )
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutdown requested (Ctrl+C).")
    except Exception:
        logger.exception("Server stopped due to an unexpected error.")
        raise
    finally:
        server.shutdown()
        logger.info("Server shutdown complete.")


if __name__ == "__main__":
    main()
