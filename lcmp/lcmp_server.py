"""Life Cycle Management Proxy: the application list plus the application contexts."""

from dataclasses import dataclass

from lcmp.applist import StaticApplicationListServer, build_application_list_server
from lcmp.contexts import AppContextStore, build_app_context_store
from lcmp.errors import LcmpError


@dataclass(frozen=True, slots=True)
class LcmpServer:
    """State shared by every request handler for the lifetime of the process."""

    application_list: StaticApplicationListServer
    app_context: AppContextStore

    @classmethod
    def build(cls, app_list_type: str, app_context_type: str) -> "LcmpServer":
        return cls(
            application_list=build_application_list_server(app_list_type),
            app_context=build_app_context_store(app_context_type),
        )

    def status(self) -> dict[str, str]:
        """Health of each component: ``ok`` or the failure message."""
        report: dict[str, str] = {}
        for name, component in (
            ("application_list", self.application_list),
            ("app_context", self.app_context),
        ):
            try:
                component.status()
            except LcmpError as exc:
                report[name] = exc.message
            else:
                report[name] = "ok"
        return report
