import json
from pathlib import Path

import pytest

from lcmp.applist import StaticApplicationListServer, build_application_list_server, matches
from lcmp.errors import CatalogUnavailable, ErrorKind, ValidationFailed
from lcmp.messages import (
    AppCharcs,
    AppInfo,
    AppList,
    ApplicationList,
    ApplicationListFilter,
    VendorSpecificExt,
)

EXAMPLE_CATALOG = {
    "appList": [
        {
            "appInfo": {
                "appDId": "test_appDId",
                "appName": "test_appName",
                "appProvider": "test_appProvider",
                "appSoftVersion": "test_appSoftVersion",
                "appDVersion": "test_appDVersion",
                "appDescription": "test_appDescription",
                "appLocation": [],
            },
            "vendorSpecificExt": None,
        }
    ]
}


def _entry(
    app_d_id: str,
    app_name: str,
    app_provider: str,
    *,
    vendor_id: str | None = None,
    service_cont: int | None = None,
    with_charcs: bool = True,
) -> AppList:
    charcs = AppCharcs(service_cont=service_cont) if with_charcs else None
    vendor = VendorSpecificExt(vendor_id=vendor_id) if vendor_id is not None else None
    return AppList(
        app_info=AppInfo(
            app_d_id=app_d_id,
            app_name=app_name,
            app_provider=app_provider,
            app_soft_version="1.0",
            app_charcs=charcs,
        ),
        vendor_specific_ext=vendor,
    )


@pytest.fixture
def server() -> StaticApplicationListServer:
    catalog = ApplicationList(
        app_list=(
            _entry("a", "A", "P1", service_cont=1, vendor_id="acme"),
            _entry("b", "B", "P2", service_cont=0),
            _entry("c", "C", "P2", with_charcs=False),
        )
    )
    return StaticApplicationListServer(app_list=catalog)


def _names(result: ApplicationList) -> list[str]:
    return [entry.app_info.app_name for entry in result.app_list]


def test_filter_by_provider_and_names() -> None:
    catalog = ApplicationList(app_list=(_entry("a", "A", "P1"), _entry("b", "B", "P2")))
    server = StaticApplicationListServer(app_list=catalog)

    assert _names(server.query(ApplicationListFilter(app_provider="P1"))) == ["A"]
    assert _names(server.query(ApplicationListFilter())) == ["A", "B"]
    assert _names(server.query(ApplicationListFilter(app_name="A,B"))) == ["A", "B"]


def test_filter_fields_combine_with_and(server: StaticApplicationListServer) -> None:
    query = ApplicationListFilter(app_name="A,B,C", app_provider="P2")
    assert _names(server.query(query)) == ["B", "C"]

    query = ApplicationListFilter(app_name="A", app_provider="P2")
    assert _names(server.query(query)) == []

    query = ApplicationListFilter(app_soft_version="1.0,2.0")
    assert _names(server.query(query)) == ["A", "B", "C"]


def test_filter_by_vendor(server: StaticApplicationListServer) -> None:
    assert _names(server.query(ApplicationListFilter(vendor_id="acme"))) == ["A"]
    assert _names(server.query(ApplicationListFilter(vendor_id="other"))) == []


def test_filter_by_service_continuity(server: StaticApplicationListServer) -> None:
    assert _names(server.query(ApplicationListFilter(service_cont=1))) == ["A"]
    # Entries without characteristics never match, even "not required".
    assert _names(server.query(ApplicationListFilter(service_cont=0))) == ["B"]


def test_entry_without_service_continuity_value() -> None:
    entry = _entry("d", "D", "P3", service_cont=None)
    assert matches(entry, ApplicationListFilter())
    assert not matches(entry, ApplicationListFilter(service_cont=0))


def test_invalid_filter_is_rejected(server: StaticApplicationListServer) -> None:
    with pytest.raises(ValidationFailed) as exc:
        server.query(ApplicationListFilter(app_name="n" * 33, service_cont=7))
    assert exc.value.reasons == ("appName is too long", "invalid serviceCont value: 7")


def test_empty_server() -> None:
    server = StaticApplicationListServer.empty()
    assert server.query(ApplicationListFilter()).app_list == ()
    assert server.status() is None


def test_server_from_file(tmp_path: Path) -> None:
    catalog_file = tmp_path / "application_list.json"
    catalog_file.write_text(json.dumps(EXAMPLE_CATALOG))

    server = StaticApplicationListServer.from_file(str(catalog_file))
    result = server.query(ApplicationListFilter())
    assert len(result.app_list) == 1
    assert result.app_list[0].app_info.app_d_id == "test_appDId"
    assert result.app_list[0].vendor_specific_ext is None
    assert server.status() is None


def test_server_from_file_accepts_bare_list(tmp_path: Path) -> None:
    catalog_file = tmp_path / "application_list.json"
    catalog_file.write_text(json.dumps(EXAMPLE_CATALOG["appList"]))

    server = StaticApplicationListServer.from_file(str(catalog_file))
    assert len(server.query(ApplicationListFilter()).app_list) == 1


def test_catalog_file_round_trip(tmp_path: Path) -> None:
    catalog = ApplicationList(
        app_list=(_entry("a", "A", "P1", service_cont=1, vendor_id="acme"), _entry("b", "B", "P2"))
    )
    catalog_file = tmp_path / "application_list.json"
    catalog_file.write_text(json.dumps(catalog.to_wire()))

    server = StaticApplicationListServer.from_file(str(catalog_file))
    assert server.query(ApplicationListFilter()) == catalog


@pytest.mark.parametrize(
    "content",
    [
        None,
        "not json",
        json.dumps({"appList": [{"appInfo": {"appName": "missing appDId"}}]}),
        json.dumps({"appList": [{"appInfo": {"appDId": "x", "appName": "n" * 40}}]}),
    ],
)
def test_load_failure_is_sticky(tmp_path: Path, content: str | None) -> None:
    catalog_file = tmp_path / "application_list.json"
    if content is not None:
        catalog_file.write_text(content)

    server = StaticApplicationListServer.from_file(str(catalog_file))
    for query in (ApplicationListFilter(), ApplicationListFilter(app_name="n" * 40)):
        with pytest.raises(CatalogUnavailable) as exc:
            server.query(query)
        assert exc.value.kind is ErrorKind.CATALOG_UNAVAILABLE
        assert str(catalog_file) in exc.value.message
    with pytest.raises(CatalogUnavailable):
        server.status()


@pytest.mark.parametrize("value", ["non-existing-type", "static;aaa", "static;file", "static;file="])
def test_build_rejects_invalid_configuration(value: str) -> None:
    with pytest.raises(ValueError):
        build_application_list_server(value)


def test_build_with_missing_file_reports_on_query() -> None:
    server = build_application_list_server("static;file=non-existing")
    with pytest.raises(CatalogUnavailable):
        server.query(ApplicationListFilter())


def test_build_empty() -> None:
    server = build_application_list_server("empty")
    assert server.query(ApplicationListFilter()).app_list == ()
