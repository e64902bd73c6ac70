import logging

import pytest
import requests

from domain.exploration.value_objects import Coordinate, Snapped, Unavailable

# Use infrastructure.* (not src.infrastructure.*) so monkeypatch paths match
# import paths.
from infrastructure.exploration.amap_adapter import (
    AmapRoadSnapper,
    DisabledRoadSnapper,
    parse_lon_lat,
)

POINT = Coordinate(latitude=31.23, longitude=121.47)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, json_error: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    def json(self):
        if self._json_error:
            raise requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
        return self._payload


def amap_payload(*locations: str) -> dict:
    return {
        "status": "1",
        "info": "OK",
        "infocode": "10000",
        "regeocode": {
            "formatted_address": "Shanghai",
            "roads": [
                {"id": str(i), "name": f"Road {i}", "distance": "12.3", "location": loc}
                for i, loc in enumerate(locations)
            ],
        },
    }


@pytest.fixture
def captured(monkeypatch):
    """Patch requests.get and record the call arguments."""
    calls = []

    def install(response=None, exc=None):
        def fake_get(url, params=None, timeout=None):
            calls.append({"url": url, "params": params, "timeout": timeout})
            if exc is not None:
                raise exc
            return response

        monkeypatch.setattr("requests.get", fake_get)
        return calls

    return install


def test_requires_api_key():
    with pytest.raises(ValueError):
        AmapRoadSnapper(api_key="")


def test_request_uses_lon_lat_order_and_parameters(captured):
    calls = captured(FakeResponse(payload=amap_payload("121.480000,31.240000")))
    snapper = AmapRoadSnapper(api_key="k", radius_m=1000, timeout_s=2.5)

    snapper.snap(POINT)

    assert len(calls) == 1
    params = calls[0]["params"]
    assert params["location"] == "121.470000,31.230000"
    assert params["key"] == "k"
    assert params["radius"] == 1000
    assert params["extensions"] == "all"
    assert calls[0]["timeout"] == 2.5
    assert calls[0]["url"] == "https://restapi.amap.com/v3/geocode/regeo"


def test_first_road_is_used(captured):
    captured(
        FakeResponse(payload=amap_payload("121.480000,31.240000", "121.500000,31.260000"))
    )

    outcome = AmapRoadSnapper(api_key="k").snap(POINT)

    assert isinstance(outcome, Snapped)
    assert outcome.coordinate == Coordinate(latitude=31.24, longitude=121.48)


@pytest.mark.parametrize("status_code", [400, 403, 500, 503])
def test_http_error_is_unavailable(captured, status_code):
    captured(FakeResponse(status_code=status_code, payload={}))

    outcome = AmapRoadSnapper(api_key="k").snap(POINT)

    assert isinstance(outcome, Unavailable)
    assert outcome.reason == f"http_{status_code}"


def test_amap_failure_status_is_unavailable(captured):
    captured(FakeResponse(payload={"status": "0", "info": "INVALID_USER_KEY", "infocode": "10001"}))

    outcome = AmapRoadSnapper(api_key="k").snap(POINT)

    assert isinstance(outcome, Unavailable)
    assert outcome.reason == "amap_status_0:10001"


@pytest.mark.parametrize(
    "regeocode, reason",
    [
        ({"roads": []}, "no_roads"),
        ({}, "no_roads"),
        ([], "no_regeocode"),
        ({"roads": ["not-a-road"]}, "malformed_road"),
    ],
)
def test_empty_or_odd_regeocode_is_unavailable(captured, regeocode, reason):
    captured(FakeResponse(payload={"status": "1", "regeocode": regeocode}))

    outcome = AmapRoadSnapper(api_key="k").snap(POINT)

    assert isinstance(outcome, Unavailable)
    assert outcome.reason == reason


@pytest.mark.parametrize(
    "location, reason",
    [
        ("121.48", "malformed_location"),
        ("abc,def", "malformed_location"),
        ("121.4,31.2,0", "malformed_location"),
        ("", "malformed_location"),
        ("200.0,31.2", "road_out_of_range"),
        ("121.4,95.0", "road_out_of_range"),
    ],
)
def test_malformed_location_is_unavailable(captured, location, reason):
    captured(FakeResponse(payload=amap_payload(location)))

    outcome = AmapRoadSnapper(api_key="k").snap(POINT)

    assert isinstance(outcome, Unavailable)
    assert outcome.reason == reason


def test_missing_location_is_unavailable(captured):
    payload = amap_payload("121.48,31.24")
    del payload["regeocode"]["roads"][0]["location"]
    captured(FakeResponse(payload=payload))

    outcome = AmapRoadSnapper(api_key="k").snap(POINT)

    assert isinstance(outcome, Unavailable)
    assert outcome.reason == "malformed_location"


def test_invalid_json_is_unavailable(captured):
    captured(FakeResponse(json_error=True))

    outcome = AmapRoadSnapper(api_key="k").snap(POINT)

    assert isinstance(outcome, Unavailable)
    assert outcome.reason == "invalid_json"


@pytest.mark.parametrize(
    "exc",
    [
        requests.exceptions.Timeout("timed out"),
        requests.exceptions.ConnectionError("refused"),
    ],
)
def test_network_failure_is_unavailable(captured, exc, caplog):
    captured(exc=exc)

    with caplog.at_level(logging.WARNING):
        outcome = AmapRoadSnapper(api_key="secret-key").snap(POINT)

    assert isinstance(outcome, Unavailable)
    assert outcome.reason == "request_failed"
    assert "secret-key" not in caplog.text


def test_unavailable_is_logged(captured, caplog):
    captured(FakeResponse(payload=amap_payload()))

    with caplog.at_level(logging.WARNING):
        AmapRoadSnapper(api_key="k").snap(POINT)

    assert "no_roads" in caplog.text


def test_disabled_snapper_is_always_unavailable():
    outcome = DisabledRoadSnapper().snap(POINT)
    assert isinstance(outcome, Unavailable)
    assert outcome.reason == "disabled"


def test_parse_lon_lat():
    assert parse_lon_lat("121.5, 31.2") == (121.5, 31.2)
    with pytest.raises(ValueError):
        parse_lon_lat(None)
