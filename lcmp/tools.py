"""MCP tool registrations exposing the LCMP to agent-driven device applications."""

import logging
from dataclasses import dataclass
from typing import Annotated, Any, Callable

from fastmcp import FastMCP
from pydantic import Field, ValidationError

from lcmp.errors import LcmpError
from lcmp.lcmp_server import LcmpServer
from lcmp.messages import AppContext, ApplicationListFilter

logger = logging.getLogger(__name__)


def _validate_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string.")
    return value.strip()


def _log_tool_event(tool_name: str, event: str, **fields: object) -> None:
    logger.info(
        "lcmp_tool_event",
        extra={"tool": tool_name, "event": event, **fields},
    )


def _with_error_handling(tool_name: str, action: Callable[[], dict[str, Any]]) -> dict[str, Any]:
    try:
        result = action()
    except LcmpError as exc:
        logger.warning("%s rejected by the LCMP", tool_name)
        _log_tool_event(tool_name, "rejected", kind=exc.kind.value, error=exc.message)
        return {"error": exc.message, "kind": exc.kind.value}
    except (ValueError, ValidationError) as exc:
        _log_tool_event(tool_name, "invalid_input", error=str(exc))
        return {"error": str(exc), "kind": "validation"}
    _log_tool_event(tool_name, "success")
    return result


@dataclass
class LcmpTools:
    """Tool implementations bound to the shared LCMP server."""

    lcmp: LcmpServer

    def list_applications(
        self,
        app_name: Annotated[str, Field(description="Comma-separated application names to accept; empty matches all.")] = "",
        app_provider: Annotated[str, Field(description="Comma-separated application providers to accept; empty matches all.")] = "",
        app_soft_version: Annotated[str, Field(description="Comma-separated software versions to accept; empty matches all.")] = "",
        vendor_id: Annotated[str, Field(description="Comma-separated vendor identifiers to accept; empty matches all.")] = "",
        service_cont: Annotated[int | None, Field(description="Required service continuity: 0 (not required) or 1 (required).")] = None,
    ) -> dict[str, Any]:
        """Return the catalog entries matching the given criteria."""

        def _call() -> dict[str, Any]:
            criteria = ApplicationListFilter(
                app_name=app_name,
                app_provider=app_provider,
                app_soft_version=app_soft_version,
                vendor_id=vendor_id,
                service_cont=service_cont,
            )
            return self.lcmp.application_list.query(criteria).to_wire()

        return _with_error_handling("list_applications", _call)

    def create_app_context(
        self,
        app_context: Annotated[dict[str, Any], Field(description="AppContext creation request in its JSON form, without contextId and userAppInstanceInfo.")],
    ) -> dict[str, Any]:
        """Create an application context and return it with the assigned identifiers."""

        def _call() -> dict[str, Any]:
            request = AppContext.model_validate(app_context)
            return self.lcmp.app_context.new_context(request).to_wire()

        return _with_error_handling("create_app_context", _call)

    def get_app_context(
        self,
        context_id: Annotated[str, Field(description="Identifier returned by create_app_context.")],
    ) -> dict[str, Any]:
        """Return an active application context."""

        def _call() -> dict[str, Any]:
            context_id_value = _validate_non_empty(context_id, "context_id")
            return self.lcmp.app_context.get_context(context_id_value).to_wire()

        return _with_error_handling("get_app_context", _call)

    def update_app_context_callback(
        self,
        context_id: Annotated[str, Field(description="Identifier returned by create_app_context.")],
        callback_reference: Annotated[str, Field(description="New callback URI for notifications about the context.")],
    ) -> dict[str, Any]:
        """Replace the callbackReference of an active context, the only mutable field."""

        def _call() -> dict[str, Any]:
            context_id_value = _validate_non_empty(context_id, "context_id")
            stored = self.lcmp.app_context.get_context(context_id_value)
            request = stored.model_copy(update={"callback_reference": callback_reference})
            return self.lcmp.app_context.update_context(request).to_wire()

        return _with_error_handling("update_app_context_callback", _call)

    def delete_app_context(
        self,
        context_id: Annotated[str, Field(description="Identifier returned by create_app_context.")],
    ) -> dict[str, Any]:
        """Delete an active application context."""

        def _call() -> dict[str, Any]:
            context_id_value = _validate_non_empty(context_id, "context_id")
            self.lcmp.app_context.del_context(context_id_value)
            return {"contextId": context_id_value, "deleted": True}

        return _with_error_handling("delete_app_context", _call)

    def list_app_contexts(self) -> dict[str, Any]:
        """Return the identifiers of all active application contexts."""
        return _with_error_handling(
            "list_app_contexts",
            lambda: {"contextIds": self.lcmp.app_context.list_contexts()},
        )

    def lcmp_status(self) -> dict[str, Any]:
        """Report the health of the application list and of the context store."""
        return {"components": self.lcmp.status()}


def register_lcmp_tools(mcp: FastMCP, tools: LcmpTools) -> None:
    """Register the LCMP tools on the given FastMCP instance."""
    for name, description, fn in (
        (
            "list_applications",
            "Lists the edge applications available to the device application, optionally filtered by name, provider, software version, vendor and service continuity.",
            tools.list_applications,
        ),
        (
            "create_app_context",
            "Requests the instantiation of an edge application. Returns the application context with its 'contextId' and the reference URI of the instance.",
            tools.create_app_context,
        ),
        (
            "get_app_context",
            "Retrieves an active application context by its 'contextId'.",
            tools.get_app_context,
        ),
        (
            "update_app_context_callback",
            "Changes the callback reference of an active application context.",
            tools.update_app_context_callback,
        ),
        (
            "delete_app_context",
            "Deletes an active application context, releasing the application instance.",
            tools.delete_app_context,
        ),
        (
            "list_app_contexts",
            "Lists the identifiers of all active application contexts.",
            tools.list_app_contexts,
        ),
        (
            "lcmp_status",
            "Reports the health of the application list and of the application context store.",
            tools.lcmp_status,
        ),
    ):
        mcp.tool(name=name, description=description)(fn)

    logger.info("LCMP MCP tools registered.")
