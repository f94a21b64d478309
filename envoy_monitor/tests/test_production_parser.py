import pytest

from envoy_monitor.errors import PayloadError
from envoy_monitor.models.production import ProductionSnapshot
from envoy_monitor.services.production_parser import parse_production

from envoy_monitor.tests.fake_http import SAMPLE_PRODUCTION


def test_extracts_production_and_total_consumption():
    payload = {
        "consumption": [{"measurementType": "total-consumption", "wNow": 123.4}],
        "production": [{"measurementType": "production", "wNow": 567.8}],
    }

    snap = parse_production(payload)

    assert snap == ProductionSnapshot(production_watts_now=567.8, consumption_watts_now=123.4)


def test_ignores_other_measurement_types():
    snap = parse_production(SAMPLE_PRODUCTION)

    assert snap.production_watts_now == 567.8
    assert snap.consumption_watts_now == 123.4


def test_missing_total_consumption_defaults_to_zero():
    payload = {
        "consumption": [{"measurementType": "net-consumption", "wNow": -12.0}],
        "production": [{"measurementType": "production", "wNow": 400}],
    }

    snap = parse_production(payload)

    assert snap.consumption_watts_now == 0.0
    assert snap.production_watts_now == 400.0


def test_empty_arrays_default_to_zero():
    snap = parse_production({"consumption": [], "production": []})
    assert snap == ProductionSnapshot()


def test_last_matching_entry_wins():
    payload = {
        "consumption": [],
        "production": [
            {"measurementType": "production", "wNow": 100.0},
            {"measurementType": "production", "wNow": 250.5},
        ],
    }

    assert parse_production(payload).production_watts_now == 250.5


def test_integer_wattage_becomes_float():
    payload = {
        "consumption": [{"measurementType": "total-consumption", "wNow": 0}],
        "production": [{"measurementType": "production", "wNow": 3}],
    }

    snap = parse_production(payload)

    assert isinstance(snap.production_watts_now, float)
    assert snap.production_watts_now == 3.0


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"production": []},
        {"consumption": {}, "production": []},
        {"consumption": [], "production": ["oops"]},
        {"consumption": [{"measurementType": 7, "wNow": 1.0}], "production": []},
        {"consumption": [{"measurementType": "total-consumption", "wNow": "12"}], "production": []},
        {"consumption": [], "production": [{"measurementType": "production", "wNow": True}]},
        {"consumption": [], "production": [{"measurementType": "inverters"}]},
    ],
)
def test_shape_errors_raise_payload_error(payload):
    with pytest.raises(PayloadError) as excinfo:
        parse_production(payload)
    assert excinfo.value.stage == "telemetry"
