"""
Tests for the TTS cache API.
"""

import json

import pytest
from fastapi.testclient import TestClient

from tts_cache.api.app import create_app
from tts_cache.config import Settings
from tts_cache.exceptions import SnapshotDecodeError

VALID_REQUEST = {
    "text": "hello",
    "language": "en-US",
    "gender": "Female",
    "name": "en-US-JennyNeural",
    "style": "",
    "azureKey": "secret-key",
    "azureRegion": "westeurope",
}


@pytest.fixture
def provider(make_provider):
    """Create a fake provider."""
    return make_provider()


@pytest.fixture
def client(test_settings, provider):
    """Create a test client with the lifespan running."""
    app = create_app(test_settings, provider=provider)
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "TTS Cache API"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["persistence"] is True


def test_durable_request_miss_then_hit(client, provider, test_settings):
    """First request streams from upstream, second is served from cache."""
    request = {**VALID_REQUEST, "shouldCache": True}

    first = client.post("/tts", json=request)
    assert first.status_code == 200
    assert first.content == provider.audio
    assert first.headers["content-type"] == "audio/mpeg"
    assert first.headers["x-cache"] == "miss"
    assert len(provider.calls) == 1

    second = client.post("/tts", json=request)
    assert second.status_code == 200
    assert second.content == first.content
    assert second.headers["content-type"] == "audio/mpeg"
    assert second.headers["x-cache"] == "durable"
    assert len(provider.calls) == 1

    status = client.get("/status").json()
    assert status["itemsCount"] == 1


def test_non_durable_request_uses_temporary_tier(client, provider):
    client.post("/tts", json=VALID_REQUEST)
    response = client.post("/tts", json=VALID_REQUEST)

    assert response.headers["x-cache"] == "temporary"
    status = client.get("/status").json()
    assert status["itemsCount"] == 0
    assert status["temporaryItemsCount"] == 1
    assert status["cacheMemoryBytes"] == 0


@pytest.mark.parametrize("missing", ["text", "azureKey", "azureRegion"])
def test_missing_required_field_is_rejected(client, provider, missing):
    request = {k: v for k, v in VALID_REQUEST.items() if k != missing}

    response = client.post("/tts", json=request)

    assert response.status_code == 400
    assert missing in response.json()["detail"]
    assert provider.calls == []
    assert client.get("/status").json()["performance"]["total_queries"] == 0


@pytest.mark.parametrize("field", ["text", "azureKey", "azureRegion"])
def test_empty_required_field_is_rejected(client, provider, field):
    response = client.post("/tts", json={**VALID_REQUEST, field: ""})

    assert response.status_code == 400
    assert provider.calls == []


def test_malformed_region_is_rejected(client, provider):
    response = client.post("/tts", json={**VALID_REQUEST, "azureRegion": "evil.example.com/x"})

    assert response.status_code == 400
    assert provider.calls == []


def test_malformed_json_is_rejected(client, provider):
    response = client.post(
        "/tts",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert provider.calls == []


def test_upstream_failure_is_reported_and_not_cached(client, provider):
    provider.fail_status = 503

    response = client.post("/tts", json={**VALID_REQUEST, "shouldCache": True})

    assert response.status_code == 500
    assert response.json()["detail"] == "Upstream returned 503"

    provider.fail_status = None
    retry = client.post("/tts", json={**VALID_REQUEST, "shouldCache": True})
    assert retry.headers["x-cache"] == "miss"
    assert len(provider.calls) == 2


def test_status_report(client):
    client.post("/tts", json={**VALID_REQUEST, "shouldCache": True})

    response = client.get("/status")

    assert response.status_code == 200
    data = response.json()
    key = json.dumps(["hello", "en-US", "Female", "en-US-JennyNeural", ""], separators=(",", ":"))
    assert data["cacheMemoryBytes"] == len(key) + len(b"ID3-fake-audio")
    assert data["cacheMemory"].endswith(" mb")
    for field in ["processAllocBytes", "processTotalAllocBytes", "processSysBytes", "gcCycles"]:
        assert data[field] >= 0
    assert data["performance"]["misses"] == 1


def test_clear_temporary(client):
    client.post("/tts", json=VALID_REQUEST)

    response = client.delete("/cache/temporary")

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 1


def test_durable_entries_survive_restart(test_settings, make_provider):
    first_provider = make_provider()
    with TestClient(create_app(test_settings, provider=first_provider)) as client:
        client.post("/tts", json={**VALID_REQUEST, "shouldCache": True})

    second_provider = make_provider()
    with TestClient(create_app(test_settings, provider=second_provider)) as client:
        response = client.post("/tts", json={**VALID_REQUEST, "shouldCache": True})
        assert response.headers["x-cache"] == "durable"
        assert response.content == first_provider.audio

    assert second_provider.calls == []
    assert second_provider.closed is True


def test_persistence_disabled_writes_no_file(tmp_path, provider):
    settings = Settings(persist_cache=False, cache_file=str(tmp_path / "cache-data.json"))
    with TestClient(create_app(settings, provider=provider)) as client:
        client.post("/tts", json={**VALID_REQUEST, "shouldCache": True})
        assert client.get("/health").json()["persistence"] is False

    assert not (tmp_path / "cache-data.json").exists()


def test_corrupt_snapshot_aborts_startup(test_settings, provider):
    with open(test_settings.cache_file, "w", encoding="utf-8") as f:
        f.write("garbage")

    with pytest.raises(SnapshotDecodeError):
        with TestClient(create_app(test_settings, provider=provider)):
            pass


def test_non_ascii_key_is_rejected(client, provider):
    response = client.post("/tts", json={**VALID_REQUEST, "azureKey": "clé-secrète"})

    assert response.status_code == 400
    assert "azureKey" in response.json()["detail"]
    assert provider.calls == []


def test_mid_stream_failure_truncates_response_and_caches_nothing(client, provider):
    provider.fail_after = 1

    response = client.post("/tts", json={**VALID_REQUEST, "shouldCache": True})

    assert response.status_code == 200
    assert response.headers["x-cache"] == "miss"
    assert response.content == b"ID3"
    status = client.get("/status").json()
    assert status["itemsCount"] == 0
    assert status["temporaryItemsCount"] == 0

    provider.fail_after = None
    retry = client.post("/tts", json={**VALID_REQUEST, "shouldCache": True})
    assert retry.headers["x-cache"] == "miss"
    assert retry.content == provider.audio
    assert len(provider.calls) == 2
