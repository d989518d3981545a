"""Tests for YAML loading and the document fetchers."""

from __future__ import annotations

import httpx
import pytest

from tileschema_codegen import (
    GeneratorConfig,
    HttpDocumentFetcher,
    LocalDocumentFetcher,
    SchemaDocumentFetcher,
    load_yaml,
)
from tileschema_core import FetchError, IDocumentFetcher


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


# -- load_yaml ---------------------------------------------------------------


def test_yes_no_stay_strings():
    assert load_yaml("building: yes\nno: no\noneway: on\nflag: true\nother: False\n", "x") == {
        "building": "yes",
        "no": "no",
        "oneway": "on",
        "flag": True,
        "other": False,
    }


def test_numbers_and_nulls():
    assert load_yaml("buffer_size: 4\nratio: 0.5\nvalue: null\nempty:\n", "x") == {
        "buffer_size": 4,
        "ratio": 0.5,
        "value": None,
        "empty": None,
    }


def test_anchors_are_resolved():
    document = load_yaml("a: &values [rail, tram]\nb: *values\n", "x")
    assert document["b"] == ["rail", "tram"]


def test_invalid_yaml_is_a_fetch_error():
    with pytest.raises(FetchError, match="invalid YAML") as exc_info:
        load_yaml("a: [unclosed", "layers/poi/poi.yaml")
    assert exc_info.value.reference == "layers/poi/poi.yaml"


# -- HttpDocumentFetcher -----------------------------------------------------


def test_http_fetch():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="tileset:\n  name: OpenMapTiles\n")

    fetcher = HttpDocumentFetcher(client=mock_client(handler))
    document = fetcher.fetch("https://example.test/v3.12.2/openmaptiles.yaml")

    assert document == {"tileset": {"name": "OpenMapTiles"}}
    assert str(requests[0].url) == "https://example.test/v3.12.2/openmaptiles.yaml"


def test_http_status_error():
    fetcher = HttpDocumentFetcher(client=mock_client(lambda request: httpx.Response(404)))
    with pytest.raises(FetchError, match="HTTP 404") as exc_info:
        fetcher.fetch("https://example.test/missing.yaml")
    assert exc_info.value.reason == "HTTP 404"


def test_http_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = HttpDocumentFetcher(client=mock_client(handler))
    with pytest.raises(FetchError, match="connection refused"):
        fetcher.fetch("https://example.test/openmaptiles.yaml")


def test_injected_client_is_not_closed():
    client = mock_client(lambda request: httpx.Response(200, text="{}"))
    with HttpDocumentFetcher(client=client) as fetcher:
        fetcher.fetch("https://example.test/a.yaml")
    assert not client.is_closed


def test_owned_client_is_closed():
    fetcher = HttpDocumentFetcher(timeout=5.0, user_agent="test-agent")
    fetcher.close()
    assert fetcher._client.is_closed
    assert fetcher._client.headers["User-Agent"] == "test-agent"


# -- LocalDocumentFetcher ----------------------------------------------------


def test_local_fetch(tmp_path):
    (tmp_path / "mapping.yaml").write_text("tables: {}\n", encoding="utf-8")
    fetcher = LocalDocumentFetcher()

    assert fetcher.fetch(str(tmp_path / "mapping.yaml")) == {"tables": {}}
    assert fetcher.fetch(f"file://{tmp_path / 'mapping.yaml'}") == {"tables": {}}


def test_local_missing_file(tmp_path):
    with pytest.raises(FetchError) as exc_info:
        LocalDocumentFetcher().fetch(str(tmp_path / "missing.yaml"))
    assert exc_info.value.reference.endswith("missing.yaml")


# -- SchemaDocumentFetcher ---------------------------------------------------


def test_dispatch_by_reference(tmp_path):
    (tmp_path / "layer.yaml").write_text("layer: {id: water}\n", encoding="utf-8")
    http = HttpDocumentFetcher(
        client=mock_client(lambda request: httpx.Response(200, text="remote: true\n"))
    )

    with SchemaDocumentFetcher(http=http) as fetcher:
        assert isinstance(fetcher, IDocumentFetcher)
        assert fetcher.fetch(str(tmp_path / "layer.yaml")) == {"layer": {"id": "water"}}
        assert fetcher.fetch("https://example.test/remote.yaml") == {"remote": True}


def test_from_config_uses_http_settings():
    config = GeneratorConfig(timeout=2.5, user_agent="basemap-build/1.0")

    with SchemaDocumentFetcher.from_config(config) as fetcher:
        client = fetcher._http._client
        assert client.timeout == httpx.Timeout(2.5)
        assert client.headers["User-Agent"] == "basemap-build/1.0"
    assert client.is_closed


def test_default_http_settings_match_config():
    with SchemaDocumentFetcher() as fetcher:
        client = fetcher._http._client
        assert client.timeout == httpx.Timeout(GeneratorConfig().timeout)
        assert client.headers["User-Agent"] == GeneratorConfig().user_agent
