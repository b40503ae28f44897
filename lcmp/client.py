"""
Dev App API client used by device applications to reach an LCMP.

Typed helper methods encapsulate request/response handling, including
consistent error reporting and logging.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from lcmp.http_client import create_lcmp_client
from lcmp.routes import API_ROOT
from lcmp.settings import Settings

logger = logging.getLogger(__name__)


class LcmpApiError(RuntimeError):
    """Represents failures when communicating with the LCMP."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _require_non_empty(value: str, field_name: str) -> str:
    """Normalize and validate non-empty request arguments."""
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} must be a non-empty string.")
    return cleaned


def _error_detail(response: httpx.Response) -> str:
    """Detail of a ProblemDetails body, or a snippet of whatever came back."""
    try:
        detail = response.json().get("detail")
    except (json.JSONDecodeError, AttributeError):
        detail = None
    if isinstance(detail, str) and detail:
        return detail
    snippet = response.text.strip()
    if len(snippet) > 512:
        snippet = f"{snippet[:512]}..."
    return snippet


@dataclass(slots=True)
class LcmpApiClient:
    """Typed wrapper around the shared AsyncClient."""

    _client: httpx.AsyncClient

    @classmethod
    def from_settings(cls, base_url: str, settings: Settings) -> "LcmpApiClient":
        """Factory that builds the client from Settings."""
        return cls(create_lcmp_client(base_url, settings))

    async def aclose(self) -> None:
        """Close the underlying HTTP resources."""
        await self._client.aclose()

    async def list_applications(
        self,
        *,
        app_name: str = "",
        app_provider: str = "",
        app_soft_version: str = "",
        vendor_id: str = "",
        service_cont: int | None = None,
    ) -> dict[str, Any]:
        """Query the application list; empty criteria match everything."""
        params: dict[str, Any] = {
            key: value
            for key, value in (
                ("appName", app_name),
                ("appProvider", app_provider),
                ("appSoftVersion", app_soft_version),
                ("vendorId", vendor_id),
            )
            if value
        }
        if service_cont is not None:
            params["serviceCont"] = service_cont
        logger.debug("Querying application list", extra={"params": params})
        return await self._request("GET", f"{API_ROOT}/app_list", params=params)

    async def create_context(self, app_context: dict[str, Any]) -> dict[str, Any]:
        """Create an application context and return it with the assigned identifiers."""
        logger.debug("Creating application context")
        return await self._request("POST", f"{API_ROOT}/app_contexts", json=app_context)

    async def get_context(self, context_id: str) -> dict[str, Any]:
        context_id_clean = _require_non_empty(context_id, "context_id")
        logger.debug("Fetching application context", extra={"context_id": context_id_clean})
        return await self._request("GET", f"{API_ROOT}/app_contexts/{context_id_clean}")

    async def update_context(self, context_id: str, app_context: dict[str, Any]) -> None:
        """Send the full context back; only its callbackReference may differ."""
        context_id_clean = _require_non_empty(context_id, "context_id")
        logger.debug("Updating application context", extra={"context_id": context_id_clean})
        await self._request("PUT", f"{API_ROOT}/app_contexts/{context_id_clean}", json=app_context)

    async def delete_context(self, context_id: str) -> None:
        context_id_clean = _require_non_empty(context_id, "context_id")
        logger.debug("Deleting application context", extra={"context_id": context_id_clean})
        await self._request("DELETE", f"{API_ROOT}/app_contexts/{context_id_clean}")

    async def health(self) -> dict[str, Any]:
        return await self._request("GET", "/health")

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Normalized request handler for all outgoing API calls."""

        def _transport_error(message: str, *, exc: Exception | None = None) -> LcmpApiError:
            logger.error(
                message,
                extra={"method": method, "path": path},
                exc_info=exc,
            )
            return LcmpApiError(message)

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise _transport_error(
                f"LCMP request timed out ({method} {path}).",
                exc=exc,
            ) from exc
        except httpx.RequestError as exc:
            raise _transport_error(
                f"LCMP request failed ({method} {path}): {exc!s}",
                exc=exc,
            ) from exc

        if response.is_error:
            detail = _error_detail(response)
            logger.warning(
                "LCMP responded with error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "content": detail,
                },
            )
            raise LcmpApiError(
                f"LCMP error ({response.status_code}) during {method} {path}: {detail or 'no body provided.'}",
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            data: dict[str, Any] = response.json()
        except json.JSONDecodeError as exc:
            logger.error(
                "LCMP returned invalid JSON",
                extra={"method": method, "path": path},
            )
            raise LcmpApiError(
                f"LCMP returned invalid JSON during {method} {path}.",
                status_code=response.status_code,
            ) from exc

        return data
