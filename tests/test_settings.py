import pytest

from lcmp import settings as settings_module
from lcmp.lcmp_server import LcmpServer
from lcmp.settings import Settings

_VARIABLES = (
    "LCMP_HOST",
    "LCMP_PORT",
    "LCMP_APP_LIST_TYPE",
    "LCMP_APP_CONTEXT_TYPE",
    "LCMP_MCP_ENABLED",
    "API_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings_module, "load_dotenv", lambda: False)
    for name in _VARIABLES:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = Settings.load()
    assert settings == Settings()
    assert settings.app_context_type == "single;10,URI"
    assert settings.mcp_enabled is False


def test_values_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LCMP_HOST", "127.0.0.1")
    monkeypatch.setenv("LCMP_PORT", "9090")
    monkeypatch.setenv("LCMP_APP_LIST_TYPE", "empty")
    monkeypatch.setenv("LCMP_APP_CONTEXT_TYPE", "single;3,http://edge.example")
    monkeypatch.setenv("LCMP_MCP_ENABLED", "yes")
    monkeypatch.setenv("API_TIMEOUT", "2.5")

    settings = Settings.load()
    assert settings.host == "127.0.0.1"
    assert settings.port == 9090
    assert settings.mcp_enabled is True
    assert settings.api_timeout == 2.5

    lcmp = LcmpServer.build(settings.app_list_type, settings.app_context_type)
    assert lcmp.app_context.max_contexts == 3
    assert lcmp.status() == {"application_list": "ok", "app_context": "ok"}


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("LCMP_PORT", "http"),
        ("LCMP_PORT", "0"),
        ("LCMP_MCP_ENABLED", "maybe"),
        ("API_TIMEOUT", "soon"),
        ("API_TIMEOUT", "-1"),
    ],
)
def test_invalid_values(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        Settings.load()
