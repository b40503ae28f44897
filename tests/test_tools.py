import pytest

from lcmp.applist import StaticApplicationListServer
from lcmp.contexts import AppContextStore
from lcmp.lcmp_server import LcmpServer
from lcmp.messages import AppInfo, AppList, ApplicationList
from lcmp.resolver import TableUriResolver
from lcmp.tools import LcmpTools

CONTEXT_REQUEST = {
    "associateDevAppId": "dev-app",
    "appInfo": {"appDId": "app-a", "appName": "A", "appProvider": "P1", "appDVersion": "1.0"},
}


@pytest.fixture
def tools() -> LcmpTools:
    catalog = ApplicationList(
        app_list=(
            AppList(app_info=AppInfo(app_d_id="app-a", app_name="A", app_provider="P1")),
            AppList(app_info=AppInfo(app_d_id="app-b", app_name="B", app_provider="P2")),
        )
    )
    lcmp = LcmpServer(
        application_list=StaticApplicationListServer(app_list=catalog),
        app_context=AppContextStore(5, TableUriResolver({"app-a": "uri-a"})),
    )
    return LcmpTools(lcmp)


def test_list_applications(tools: LcmpTools) -> None:
    result = tools.list_applications(app_provider="P2")
    assert [e["appInfo"]["appDId"] for e in result["appList"]] == ["app-b"]
    assert len(tools.list_applications()["appList"]) == 2


def test_list_applications_reports_invalid_filter(tools: LcmpTools) -> None:
    result = tools.list_applications(service_cont=4)
    assert result == {"error": "invalid serviceCont value: 4", "kind": "validation"}


def test_context_tools_flow(tools: LcmpTools) -> None:
    created = tools.create_app_context(CONTEXT_REQUEST)
    context_id = created["contextId"]
    assert created["appInfo"]["userAppInstanceInfo"][0]["referenceURI"] == "uri-a"
    assert tools.list_app_contexts() == {"contextIds": [context_id]}

    updated = tools.update_app_context_callback(context_id, "http://device.example/cb")
    assert updated["callbackReference"] == "http://device.example/cb"
    assert tools.get_app_context(context_id)["callbackReference"] == "http://device.example/cb"

    assert tools.delete_app_context(context_id) == {"contextId": context_id, "deleted": True}
    missing = tools.get_app_context(context_id)
    assert missing["kind"] == "not_found"


def test_create_app_context_errors(tools: LcmpTools) -> None:
    unknown = dict(CONTEXT_REQUEST, appInfo=dict(CONTEXT_REQUEST["appInfo"], appDId="app-z"))
    assert tools.create_app_context(unknown) == {
        "error": "no matching reference URI for app-z",
        "kind": "resolution",
    }

    malformed = tools.create_app_context({"appInfo": {}})
    assert malformed["kind"] == "validation"


def test_blank_context_id_is_rejected(tools: LcmpTools) -> None:
    assert tools.get_app_context("  ")["kind"] == "validation"


def test_status(tools: LcmpTools) -> None:
    assert tools.lcmp_status() == {
        "components": {"application_list": "ok", "app_context": "ok"}
    }
