"""Unit tests for the Water Quality Portal client."""

from __future__ import annotations

import pytest
import requests

from src.wqp_api.api_wqp import WQPSiteInventoryAPI
from src.wqp_api.support_functions.support_functions import split_in_half, timed_call
from src.wqp_pull.errors import WQPQueryError


GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [-89.4, 43.1]},
            "properties": {
                "OrganizationIdentifier": "WIDNR_WQX",
                "MonitoringLocationIdentifier": "WIDNR_WQX-10031092",
                "ResolvedMonitoringLocationTypeName": "Lake",
                "StateName": "Wisconsin",
                "CountyName": "Dane County",
                "HUCEightDigitCode": "07090002",
                "resultCount": "1204",
            },
        },
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [-89.9, 44.0]},
            "properties": {
                "OrganizationIdentifier": "USGS-WI",
                "MonitoringLocationIdentifier": "USGS-05427718",
                "ResolvedMonitoringLocationTypeName": "Stream",
            },
        },
    ],
}


class FakeResponse:
    def __init__(self, payload=None, status_code=200, url="http://wqp.test"):
        self.payload = payload
        self.status_code = status_code
        self.url = url

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.payload is None:
            raise ValueError("not json")
        return self.payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def api():
    return WQPSiteInventoryAPI(base_url="http://wqp.test/")


def record_gets(monkeypatch, api, responses):
    calls = []

    def fake_get(url, timeout=None, **kwargs):
        calls.append((url, kwargs.get("params")))
        return responses.pop(0)

    monkeypatch.setattr(api.session, "get", fake_get)
    return calls


class TestSiteInventory:
    """Test the station search."""

    def test_state_request(self, monkeypatch, api):
        """Characteristic names are joined with semicolons."""
        calls = record_gets(monkeypatch, api, [FakeResponse(GEOJSON)])

        df = api.fetch_site_inventory(["Temperature", "Temperature, water"], statecode="US:55")

        url, params = calls[0]
        assert url == "http://wqp.test/data/Station/search"
        assert params == {
            "characteristicName": "Temperature;Temperature, water",
            "mimeType": "geojson",
            "statecode": "US:55",
        }
        assert len(df) == 2

    def test_county_request(self, monkeypatch, api):
        """County codes are joined with semicolons."""
        calls = record_gets(monkeypatch, api, [FakeResponse(GEOJSON)])

        api.fetch_site_inventory(["Temperature"], countycode=["US:55:001", "US:55:003"])

        assert calls[0][1]["countycode"] == "US:55:001;US:55:003"
        assert "statecode" not in calls[0][1]

    def test_needs_exactly_one_scope(self, api):
        """State and county scopes are exclusive."""
        with pytest.raises(ValueError):
            api.fetch_site_inventory(["Temperature"])
        with pytest.raises(ValueError):
            api.fetch_site_inventory(["Temperature"], statecode="US:55", countycode=["US:55:001"])

    def test_http_error(self, monkeypatch, api):
        """Server errors surface as WQPQueryError."""
        record_gets(monkeypatch, api, [FakeResponse(status_code=500)])

        with pytest.raises(WQPQueryError, match="500"):
            api.fetch_site_inventory(["Temperature"], statecode="US:06")

    def test_unreadable_body(self, monkeypatch, api):
        """Non-JSON bodies surface as WQPQueryError."""
        record_gets(monkeypatch, api, [FakeResponse(None)])

        with pytest.raises(WQPQueryError, match="unreadable"):
            api.fetch_site_inventory(["Temperature"], statecode="US:06")


class TestFeaturesToFrame:
    """Test flattening GeoJSON features."""

    def test_rows_and_coordinates(self):
        """Point coordinates become lon/lat; counts become integers."""
        df = WQPSiteInventoryAPI.features_to_frame(GEOJSON)

        assert df["lon"].tolist() == [-89.4, -89.9]
        assert df["lat"].tolist() == [43.1, 44.0]
        assert df["resultCount"].tolist() == [1204, 0]
        assert str(df["resultCount"].dtype) == "int64"

    def test_empty(self):
        """No features, no rows, but the count column exists."""
        df = WQPSiteInventoryAPI.features_to_frame({"type": "FeatureCollection", "features": []})

        assert df.empty
        assert "resultCount" in df.columns


class TestCodes:
    """Test the codes service."""

    def test_state_codes(self, monkeypatch, api):
        """Only US:NN state codes are kept."""
        payload = {"codes": [{"value": "US:01"}, {"value": "US:55"}, {"value": "CA:10"}, {"value": "US:XX"}]}
        calls = record_gets(monkeypatch, api, [FakeResponse(payload)])

        assert api.fetch_state_codes() == ["US:01", "US:55"]
        assert calls[0][0] == "http://wqp.test/Codes/statecode"

    def test_county_codes(self, monkeypatch, api):
        """Counties of the requested state only."""
        payload = {"codes": [{"value": "US:55:001"}, {"value": "US:55:003"}, {"value": "US:56:001"}]}
        calls = record_gets(monkeypatch, api, [FakeResponse(payload)])

        assert api.fetch_county_codes("US:55") == ["US:55:001", "US:55:003"]
        assert calls[0][1] == {"statecode": "US:55", "mimeType": "json"}


class TestSupportFunctions:
    """Test helpers used by the inventory fallback."""

    @pytest.mark.parametrize("n, first", [(0, 0), (1, 1), (9, 5), (10, 5)])
    def test_split_in_half(self, n, first):
        """Contiguous halves, extra element first."""
        a, b = split_in_half(list(range(n)))

        assert len(a) == first
        assert a + b == list(range(n))

    def test_timed_call(self):
        """Rows are counted and time is non-negative."""
        res = timed_call(WQPSiteInventoryAPI.features_to_frame, GEOJSON)

        assert res.nrow == 2
        assert res.time >= 0
