"""
Tests for the hotspot feed client.

Requests go through httpx.MockTransport, so no network access is needed.
"""

import httpx
import pytest

from oceanfleet.entities import Severity
from oceanfleet.errors import FeedError
from oceanfleet.feed import FALLBACK_SOURCE, MIN_OPERATIONAL_HOTSPOTS, HotspotFeedClient

FEED_URL = "https://feed.example.org/hotspots"


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def records():
    return [
        {"id": "nw-1", "lat": 45.0, "lng": -150.0, "concentration": 26000, "area": 300},
        {"id": "nw-2", "lat": 44.0, "lng": -151.0, "concentration": 9000, "severity": "low", "area": 120},
        {"id": "nw-3", "lat": 43.5, "lng": -149.5, "concentration": 12000, "area": 200},
        {"id": "nw-4", "lat": 42.0, "lng": -148.0, "concentration": 19000, "area": 250},
    ]


@pytest.fixture
def make_client():
    """Build a feed client whose requests are answered by `handler`."""
    clients = []

    def _make(handler, url=FEED_URL, api_key=None):
        client = HotspotFeedClient(
            url=url,
            api_key=api_key,
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


def respond_json(payload, status_code=200):
    def handler(request):
        return httpx.Response(status_code, json=payload)
    return handler


# =============================================================================
# SUCCESS
# =============================================================================

class TestFetchHotspots:

    def test_list_payload(self, make_client, records):
        result = make_client(respond_json(records)).fetch_hotspots()

        assert result.source == FEED_URL
        assert result.used_fallback is False
        assert result.error is None
        assert result.raw_count == 4
        assert [h.hotspot_id for h in result.hotspots] == ["nw-1", "nw-2", "nw-3", "nw-4"]

    def test_object_payload(self, make_client, records):
        result = make_client(respond_json({"hotspots": records})).fetch_hotspots()
        assert len(result.hotspots) == 4

    def test_severity_derived_or_kept(self, make_client, records):
        result = make_client(respond_json(records)).fetch_hotspots()
        severities = {h.hotspot_id: h.severity for h in result.hotspots}
        assert severities["nw-1"] == Severity.CRITICAL
        assert severities["nw-2"] == Severity.LOW
        assert severities["nw-4"] == Severity.HIGH

    def test_sends_auth_header(self, make_client, records):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=records)

        make_client(handler, api_key="secret").fetch_hotspots()

        assert requests[0].headers["Authorization"] == "Bearer secret"
        assert requests[0].headers["Accept"] == "application/json"

    def test_invalid_records_skipped(self, make_client, records):
        records.append({"id": "bad-lat", "lat": 120.0, "lng": 0.0})
        records.append({"lat": 1.0, "lng": 1.0})
        records.append("not a record")

        result = make_client(respond_json(records)).fetch_hotspots()

        assert result.skipped == 3
        assert result.raw_count == 7
        assert len(result.hotspots) == 4
        assert result.used_fallback is False

    @pytest.mark.parametrize("severity", [3, ["high"], {"level": "high"}, "extreme"])
    def test_bad_severity_skipped(self, make_client, records, severity):
        records.append({"id": "x", "lat": 10, "lng": 20, "concentration": 9000, "severity": severity})

        result = make_client(respond_json(records)).fetch_hotspots()

        assert result.skipped == 1
        assert "x" not in [h.hotspot_id for h in result.hotspots]
        assert len(result.hotspots) == 4


# =============================================================================
# FALLBACK
# =============================================================================

class TestFallback:

    def test_http_error(self, make_client):
        result = make_client(respond_json({"error": "down"}, status_code=503)).fetch_hotspots()

        assert result.used_fallback is True
        assert result.source == FALLBACK_SOURCE
        assert "503" in result.error
        assert len(result.hotspots) == 6

    def test_network_error(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = make_client(handler).fetch_hotspots()

        assert result.used_fallback is True
        assert "connection refused" in result.error

    def test_bad_json(self, make_client):
        result = make_client(lambda request: httpx.Response(200, content=b"<html>")).fetch_hotspots()
        assert result.used_fallback is True
        assert "invalid JSON" in result.error

    def test_payload_without_list(self, make_client):
        result = make_client(respond_json({"items": []})).fetch_hotspots()
        assert result.used_fallback is True

    def test_no_url(self, make_client, monkeypatch):
        monkeypatch.delenv("OCEANFLEET_HOTSPOT_FEED_URL", raising=False)

        result = make_client(respond_json([]), url=None).fetch_hotspots()

        assert result.used_fallback is True
        assert "OCEANFLEET_HOTSPOT_FEED_URL" in result.error

    def test_too_few_records_topped_up(self, make_client):
        records = [{"id": "gp-1", "lat": 37.6, "lng": -145.1, "concentration": 30000}]

        result = make_client(respond_json(records)).fetch_hotspots()

        ids = [h.hotspot_id for h in result.hotspots]
        assert len(result.hotspots) >= MIN_OPERATIONAL_HOTSPOTS
        assert result.used_fallback is True
        assert result.source == FEED_URL
        assert ids.count("gp-1") == 1
        assert result.hotspots[0].lat == 37.6
        assert result.notes

    def test_empty_feed_uses_all_fallback_zones(self, make_client):
        result = make_client(respond_json([])).fetch_hotspots()
        assert len(result.hotspots) == 6


class TestFetchRaw:

    def test_status_code_on_error(self, make_client):
        with pytest.raises(FeedError) as excinfo:
            make_client(respond_json({}, status_code=404)).fetch_raw()
        assert excinfo.value.status_code == 404

    def test_context_manager(self, records):
        transport = httpx.MockTransport(respond_json(records))
        with HotspotFeedClient(url=FEED_URL, client=httpx.Client(transport=transport)) as feed:
            assert len(feed.fetch_raw()) == 4
