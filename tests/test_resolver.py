import pytest

from lcmp.errors import ErrorKind, ResolutionFailed
from lcmp.resolver import SingleUriResolver, TableUriResolver


def test_single_resolver_ignores_app_d_id() -> None:
    resolver = SingleUriResolver("referenceURI")
    assert resolver.resolve(None) == "referenceURI"
    assert resolver.resolve("any-app") == "referenceURI"


def test_table_resolver_prefers_mapping_then_default() -> None:
    resolver = TableUriResolver({"1": "uri1", "2": "uri2"}, default="D")
    assert resolver.resolve("1") == "uri1"
    assert resolver.resolve("2") == "uri2"
    assert resolver.resolve("unknown") == "D"
    assert resolver.resolve(None) == "D"


def test_table_resolver_without_default_fails() -> None:
    resolver = TableUriResolver({"1": "uri1"})
    with pytest.raises(ResolutionFailed) as exc:
        resolver.resolve("unknown")
    assert exc.value.kind is ErrorKind.RESOLUTION
    assert exc.value.message == "no matching reference URI for unknown"

    with pytest.raises(ResolutionFailed) as exc:
        resolver.resolve(None)
    assert exc.value.message == "no matching reference URI for unspecified"


def test_table_resolver_mapping_is_read_only() -> None:
    source = {"1": "uri1"}
    resolver = TableUriResolver(source)
    source["2"] = "uri2"
    with pytest.raises(ResolutionFailed):
        resolver.resolve("2")
    with pytest.raises(TypeError):
        resolver.mapping["3"] = "uri3"  # type: ignore[index]
