from unittest.mock import AsyncMock

import httpx

import pytest
from fastapi.testclient import TestClient

from spell_search.api.dependencies import get_search_client, get_settings
from spell_search.config import Settings
from spell_search.core.errors import SearchBackendError
from spell_search.main import app
from spell_search.search.client import TypesenseClient

SECRET = "super-secret-admin-key"

FIREBALL_HIT = {
    "document": {
        "id": "fireball",
        "name": "Fireball",
        "slug": "fireball",
        "level": 3,
        "school": "Evocation",
        "classes": ["Wizard"],
        "description": "A bright streak flashes... Secondary burst.",
        "source": "PHB",
    }
}


@pytest.fixture
def mock_backend():
    mock = AsyncMock(spec=TypesenseClient)
    mock.api_key_provided = True
    mock.search.return_value = {"found": 1, "hits": [FIREBALL_HIT]}
    return mock

@pytest.fixture
def test_settings():
    return Settings(
        typesense_host="search.internal",
        typesense_api_key=SECRET,
        collection_name="spells",
    )

@pytest.fixture
def client(mock_backend, test_settings):
    app.dependency_overrides[get_search_client] = lambda: mock_backend
    app.dependency_overrides[get_settings] = lambda: test_settings

    with TestClient(app) as c:
        yield c

    app.dependency_overrides = {}

def test_short_query_short_circuits(client, mock_backend):
    resp = client.get("/api/search", params={"q": "a"})
    assert resp.status_code == 200
    assert resp.json() == {"hits": []}
    mock_backend.search.assert_not_called()

def test_missing_query_short_circuits(client, mock_backend):
    resp = client.get("/api/search")
    assert resp.status_code == 200
    assert resp.json() == {"hits": []}
    mock_backend.search.assert_not_called()

def test_text_search_relays_payload_with_cache_header(client, mock_backend):
    resp = client.get("/api/search", params={"q": "fire"})
    assert resp.status_code == 200
    assert resp.json() == {"found": 1, "hits": [FIREBALL_HIT]}
    assert resp.headers["cache-control"] == "public, max-age=3600"

    collection, params = mock_backend.search.await_args.args
    assert collection == "spells"
    assert params["q"] == "fire"
    assert params["query_by"] == "name"
    assert params["per_page"] == 250
    assert params["infix"] == "always"

def test_facet_only_query_uses_match_all(client, mock_backend):
    resp = client.get("/api/search", params={"level": "3", "school": "Evocation"})
    assert resp.status_code == 200

    _, params = mock_backend.search.await_args.args
    assert params["q"] == "*"
    assert params["filter_by"] == "level:=3 && school:=Evocation"

def test_class_parameter_filters_classes_field(client, mock_backend):
    client.get("/api/search", params={"q": "fi", "class": "Wizard"})
    _, params = mock_backend.search.await_args.args
    assert params["filter_by"] == "classes:=Wizard"

def test_invalid_facet_returns_empty_hits_without_backend_call(client, mock_backend):
    resp = client.get("/api/search", params={"q": "fire", "school": "Evocation && level:>0"})
    assert resp.status_code == 200
    assert resp.json() == {"hits": []}
    mock_backend.search.assert_not_called()

def test_backend_failure_returns_diagnostic_500(client, mock_backend):
    mock_backend.search.side_effect = SearchBackendError("Forbidden", status=401)

    resp = client.get("/api/search", params={"q": "fire"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Search Failed"
    assert body["details"]["status"] == 401
    assert body["details"]["reason"] == "Forbidden"
    assert body["details"]["key_provided"] is True
    assert body["details"]["host"] == "search.internal"
    assert SECRET not in resp.text
    assert "cache-control" not in resp.headers

def test_backend_unreachable_reports_missing_key(client, mock_backend):
    mock_backend.api_key_provided = False
    mock_backend.search.side_effect = SearchBackendError("Could not reach search backend: ConnectError")

    resp = client.get("/api/search", params={"q": "fire"})

    assert resp.status_code == 500
    assert resp.json()["details"]["status"] is None
    assert resp.json()["details"]["key_provided"] is False

def test_health_reports_backend_state(client, mock_backend):
    mock_backend.health.return_value = False
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "backend": "unavailable", "host": "search.internal"}

def test_non_json_backend_body_returns_diagnostic_500(test_settings):
    def handler(request):
        return httpx.Response(200, text="<html>proxy login</html>")

    backend = TypesenseClient(
        base_url="http://search.internal:8108",
        api_key=SECRET,
        transport=httpx.MockTransport(handler),
    )
    app.dependency_overrides[get_search_client] = lambda: backend
    app.dependency_overrides[get_settings] = lambda: test_settings
    try:
        with TestClient(app) as c:
            resp = c.get("/api/search", params={"q": "fire"})
    finally:
        app.dependency_overrides = {}

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Search Failed"
    assert body["details"]["status"] == 200
    assert body["details"]["reason"] == "Invalid JSON from search backend"
    assert body["details"]["key_provided"] is True
    assert SECRET not in resp.text

@pytest.mark.asyncio
async def test_search_client_uses_injected_settings():
    cfg = Settings(
        _env_file=None,
        typesense_host="search.internal",
        typesense_port=9000,
        typesense_protocol="https",
        typesense_api_key=None,
    )
    deps = get_search_client(cfg)
    client = await deps.__anext__()
    try:
        assert client.base_url == "https://search.internal:9000"
        assert client.api_key_provided is False
    finally:
        await deps.aclose()
