"""
Core server bootstrap for the LCMP.

Builds the shared LcmpServer from Settings, exposes it through the Dev App
HTTP API and, optionally, through MCP tools mounted under /mcp.
"""

import logging
from typing import Any

import uvicorn
from fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.routing import BaseRoute, Mount

from lcmp.lcmp_server import LcmpServer
from lcmp.routes import create_http_app
from lcmp.settings import Settings
from lcmp.tools import LcmpTools, register_lcmp_tools


class ServerApp:
    """Owns the LCMP state and the transports serving it."""

    def __init__(self, settings: Settings) -> None:
        self._logger = logging.getLogger(__name__)
        self._settings = settings
        self._state: dict[str, Any] = {"settings": settings}
        self._lcmp = LcmpServer.build(settings.app_list_type, settings.app_context_type)
        self._mcp_app = FastMCP(
            name="ETSI MEC Life Cycle Management Proxy",
            instructions=(
                "Discover the edge applications available to a device application and "
                "manage the application contexts that instantiate them."
            ),
        )
        register_lcmp_tools(self._mcp_app, LcmpTools(self._lcmp))
        extra_routes: list[BaseRoute] = []
        if settings.mcp_enabled:
            extra_routes.append(Mount("/mcp", app=self._mcp_app.http_app(transport="sse")))
        self._http_app = create_http_app(self._lcmp, extra_routes)
        self._state["lcmp"] = self._lcmp

    def startup(self) -> None:
        """Check the components before accepting requests."""
        self._logger.info("Starting server bootstrap")
        for component, status in self._lcmp.status().items():
            if status != "ok":
                self._logger.warning(
                    "Component not healthy at startup",
                    extra={"component": component, "status": status},
                )
        self._state["initialized"] = True

    def shutdown(self) -> None:
        """Release acquired resources."""
        self._logger.info("Shutting down server bootstrap")
        self._state.clear()

    def serve_forever(self) -> None:
        """Run the HTTP server until interrupted."""
        host = self._settings.host
        port = self._settings.port
        self._logger.info(
            "Starting HTTP transport",
            extra={"host": host, "port": port, "mcp_enabled": self._settings.mcp_enabled},
        )
        uvicorn.run(self._http_app, host=host, port=port)

    async def serve_async(self, host: str | None = None) -> None:
        """Async helper for running the HTTP server (used by smoke tests)."""
        config = uvicorn.Config(
            self._http_app,
            host=host or self._settings.host,
            port=self._settings.port,
            log_level="warning",
        )
        await uvicorn.Server(config).serve()

    @property
    def lcmp(self) -> LcmpServer:
        return self._lcmp

    @property
    def http_app(self) -> Starlette:
        return self._http_app

    @property
    def mcp(self) -> FastMCP:
        """Expose the configured FastMCP instance."""
        return self._mcp_app


def build_server(settings: Settings) -> ServerApp:
    """Factory used by main.py to create the configured server instance."""
    return ServerApp(settings)
