"""Directory of the edge applications available to device applications."""

import json
import logging
from pathlib import Path

from lcmp.errors import CatalogUnavailable, ValidationFailed
from lcmp.messages import AppList, ApplicationList, ApplicationListFilter, validate

logger = logging.getLogger(__name__)

_TEXT_CRITERIA = (
    ("app_name", lambda entry: entry.app_info.app_name),
    ("app_provider", lambda entry: entry.app_info.app_provider),
    ("app_soft_version", lambda entry: entry.app_info.app_soft_version),
    ("vendor_id", lambda entry: entry.vendor_id),
)


def matches(entry: AppList, query: ApplicationListFilter) -> bool:
    """True if the catalog entry satisfies every criterion of the query."""
    for field_name, value_of in _TEXT_CRITERIA:
        accepted = query.accepted(field_name)
        if accepted and value_of(entry) not in accepted:
            return False
    if query.service_cont is not None:
        charcs = entry.app_info.app_charcs
        if charcs is None or charcs.service_cont != query.service_cont:
            return False
    return True


def load_application_list(filename: str) -> ApplicationList:
    """
    Read a catalog file.

    The file holds ``{"appList": [...]}``; a bare list of entries is accepted
    as well. The catalog must pass validation.
    """
    content = json.loads(Path(filename).read_text(encoding="utf-8"))
    if isinstance(content, list):
        content = {"appList": content}
    catalog = ApplicationList.model_validate(content)
    validate(catalog)
    return catalog


class StaticApplicationListServer:
    """Catalog loaded once at construction; a load failure is reported on every query."""

    def __init__(
        self,
        app_list: ApplicationList | None = None,
        last_err: str | None = None,
    ) -> None:
        self._app_list = app_list if app_list is not None else ApplicationList()
        self._last_err = last_err

    @classmethod
    def from_file(cls, filename: str) -> "StaticApplicationListServer":
        try:
            app_list = load_application_list(filename)
        except (OSError, ValueError, ValidationFailed) as exc:
            logger.error(
                "Could not load the application list",
                extra={"catalog_file": filename, "error": str(exc)},
            )
            return cls(last_err=f"could not load application list from '{filename}': {exc}")
        logger.info(
            "Application list loaded",
            extra={"catalog_file": filename, "entries": len(app_list.app_list)},
        )
        for entry in app_list.app_list:
            logger.debug("Catalog entry: %s", entry.describe())
        return cls(app_list=app_list)

    @classmethod
    def empty(cls) -> "StaticApplicationListServer":
        return cls()

    def _require_catalog(self) -> ApplicationList:
        if self._last_err is not None:
            raise CatalogUnavailable(self._last_err)
        return self._app_list

    def query(self, criteria: ApplicationListFilter) -> ApplicationList:
        """Return the catalog entries matching ``criteria``."""
        catalog = self._require_catalog()
        validate(criteria)
        return ApplicationList(
            app_list=tuple(entry for entry in catalog.app_list if matches(entry, criteria))
        )

    def status(self) -> None:
        self._require_catalog()


def build_application_list_server(value: str) -> StaticApplicationListServer:
    """
    Build the application list server from a configuration string.

    Accepted values are ``empty`` and ``static;file=<path>``. A file that
    cannot be loaded does not prevent construction: the failure is reported
    by every query instead.
    """
    if value == "empty":
        return StaticApplicationListServer.empty()
    kind, _, rest = value.partition(";")
    if kind == "static" and rest.startswith("file="):
        filename = rest[len("file="):]
        if filename:
            return StaticApplicationListServer.from_file(filename)
    raise ValueError(f"could not create the application list server from {value!r}")
