"""Environment-driven configuration utilities for the LCMP server."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_bool(name: str, default: str) -> bool:
    raw = (os.getenv(name, "").strip() or default).lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean value (true/false).")


@dataclass(frozen=True, slots=True)
class Settings:
    """Container for runtime configuration."""

    host: str = "0.0.0.0"
    port: int = 8080
    app_list_type: str = "static;file=application_list.json"
    app_context_type: str = "single;10,URI"
    mcp_enabled: bool = False
    api_timeout: float = 30.0

    @classmethod
    def load(cls) -> "Settings":
        """
        Load configuration from environment variables.

        Python-dotenv is used so developers can rely on a local .env file without
        exporting variables globally. The application list and application
        context types use the same configuration strings as the factories in
        lcmp.applist and lcmp.contexts.
        """
        load_dotenv()

        host = os.getenv("LCMP_HOST", "").strip() or "0.0.0.0"

        port_raw = os.getenv("LCMP_PORT", "").strip() or "8080"
        try:
            port = int(port_raw)
        except ValueError as exc:
            raise ValueError("LCMP_PORT must be an integer.") from exc
        if port <= 0:
            raise ValueError("LCMP_PORT must be greater than zero.")

        app_list_type = (
            os.getenv("LCMP_APP_LIST_TYPE", "").strip() or "static;file=application_list.json"
        )
        app_context_type = os.getenv("LCMP_APP_CONTEXT_TYPE", "").strip() or "single;10,URI"

        mcp_enabled = _parse_bool("LCMP_MCP_ENABLED", "false")

        api_timeout_raw = os.getenv("API_TIMEOUT", "").strip() or "30"
        try:
            api_timeout = float(api_timeout_raw)
        except ValueError as exc:
            raise ValueError("API_TIMEOUT must be a numeric value.") from exc
        if api_timeout <= 0:
            raise ValueError("API_TIMEOUT must be greater than zero.")

        return cls(
            host=host,
            port=port,
            app_list_type=app_list_type,
            app_context_type=app_context_type,
            mcp_enabled=mcp_enabled,
            api_timeout=api_timeout,
        )
