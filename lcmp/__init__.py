"""
ETSI MEC Life Cycle Management Proxy (LCMP).

Device applications query the catalog of edge applications and manage the
application contexts created on their behalf through the Dev App API.
"""

__all__ = []
