# envoy_monitor/services/production_parser.py

from __future__ import annotations

from typing import Any, List

from envoy_monitor.errors import PayloadError
from envoy_monitor.models.production import Measurement, ProductionSnapshot

CONSUMPTION_TYPE = "total-consumption"
PRODUCTION_TYPE = "production"


def _measurements(payload: dict, key: str) -> List[Measurement]:
    entries = payload.get(key)
    if not isinstance(entries, list):
        raise PayloadError(f"'{key}' must be a list, got {type(entries).__name__}")

    measurements: List[Measurement] = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise PayloadError(f"{key}[{idx}] must be an object, got {type(entry).__name__}")
        m_type = entry.get("measurementType")
        if not isinstance(m_type, str):
            raise PayloadError(f"{key}[{idx}].measurementType must be a string")
        w_now = entry.get("wNow")
        # bool is an int subclass; JSON true/false is not a wattage.
        if isinstance(w_now, bool) or not isinstance(w_now, (int, float)):
            raise PayloadError(f"{key}[{idx}].wNow must be a number")
        measurements.append(Measurement(measurement_type=m_type, w_now=float(w_now)))
    return measurements


def _pick(measurements: List[Measurement], measurement_type: str) -> float:
    value = 0.0
    for m in measurements:
        if m.measurement_type == measurement_type:
            value = m.w_now
    return value


def parse_production(payload: Any) -> ProductionSnapshot:
    """Extract the current production/consumption wattage from production.json.

    A missing ``total-consumption`` or ``production`` entry leaves that field
    at 0.0. When several entries match, the last one wins.
    """
    if not isinstance(payload, dict):
        raise PayloadError(f"production.json must be an object, got {type(payload).__name__}")

    consumption = _measurements(payload, "consumption")
    production = _measurements(payload, "production")

    return ProductionSnapshot(
        production_watts_now=_pick(production, PRODUCTION_TYPE),
        consumption_watts_now=_pick(consumption, CONSUMPTION_TYPE),
    )
