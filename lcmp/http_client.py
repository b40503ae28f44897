"""HTTP client factory for device applications talking to the LCMP."""

import httpx

from lcmp.settings import Settings


def create_lcmp_client(base_url: str, settings: Settings) -> httpx.AsyncClient:
    """
    Build an AsyncClient configured for the Dev App API of an LCMP.

    Every request carries a JSON content type, which the API expects on
    request bodies.
    """
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=settings.api_timeout,
        headers={"Content-Type": "application/json"},
    )
