"""Reference URI assignment for new application contexts."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from lcmp.errors import ResolutionFailed


class ReferenceUriResolver(ABC):
    """Map an application descriptor identifier to the URI given to the device app."""

    @abstractmethod
    def resolve(self, app_d_id: str | None) -> str:
        """Return the reference URI or raise ResolutionFailed."""


@dataclass(frozen=True, slots=True)
class SingleUriResolver(ReferenceUriResolver):
    """Same reference URI for every request, whatever the appDId."""

    reference_uri: str

    def resolve(self, app_d_id: str | None) -> str:
        return self.reference_uri


@dataclass(frozen=True, slots=True)
class TableUriResolver(ReferenceUriResolver):
    """Lookup by appDId, falling back to ``default`` when one is configured."""

    mapping: Mapping[str, str] = field(default_factory=dict)
    default: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "mapping", MappingProxyType(dict(self.mapping)))

    def resolve(self, app_d_id: str | None) -> str:
        if app_d_id is not None and app_d_id in self.mapping:
            return self.mapping[app_d_id]
        if self.default is not None:
            return self.default
        raise ResolutionFailed(app_d_id)
