# envoy_monitor/services/output_formatter.py

from __future__ import annotations

import json
from datetime import datetime

from envoy_monitor.models.production import ProductionSnapshot
from envoy_monitor.models.token import TokenStatus


def _net_w(snapshot: ProductionSnapshot) -> float:
    # Positive means exporting to the grid.
    return snapshot.production_watts_now - snapshot.consumption_watts_now


def snapshot_to_dict(snapshot: ProductionSnapshot, *, host: str, timestamp: datetime) -> dict:
    return {
        "timestamp": timestamp.isoformat(),
        "host": host,
        "production_w": snapshot.production_watts_now,
        "consumption_w": snapshot.consumption_watts_now,
        "net_w": _net_w(snapshot),
    }


def emit_json(snapshot: ProductionSnapshot, *, host: str, timestamp: datetime) -> None:
    print(json.dumps(snapshot_to_dict(snapshot, host=host, timestamp=timestamp)))


def emit_human(snapshot: ProductionSnapshot, *, host: str, timestamp: datetime) -> None:
    net = _net_w(snapshot)
    direction = "export" if net >= 0 else "import"
    print(
        f"[{host}] {timestamp.strftime('%Y-%m-%d %H:%M:%S')}  "
        f"production={snapshot.production_watts_now:.0f}W  "
        f"consumption={snapshot.consumption_watts_now:.0f}W  "
        f"{direction}={abs(net):.0f}W"
    )


def token_status_to_dict(status: TokenStatus) -> dict:
    return {
        "has_token": status.has_token,
        "expires_at": status.expires_at.isoformat() if status.expires_at else None,
        "expired": status.expired,
        "remaining_s": int(status.remaining.total_seconds()) if status.remaining is not None else None,
    }


def emit_token_status(status: TokenStatus, *, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps(token_status_to_dict(status)))
        return
    if not status.has_token:
        print("No cached Envoy token")
        return
    if status.expired:
        print(f"Cached Envoy token expired at {status.expires_at.isoformat()}")
        return
    hours, rem = divmod(int(status.remaining.total_seconds()), 3600)
    minutes = rem // 60
    print(
        f"Cached Envoy token valid until {status.expires_at.isoformat()} "
        f"({hours}h{minutes:02d}m remaining)"
    )


def reading_record(
    snapshot: ProductionSnapshot | None,
    *,
    host: str,
    timestamp: datetime,
    token_minted: bool,
    error: str | None = None,
) -> dict:
    """One structured-log line: the snapshot fields plus run metadata.

    A failed reading has no snapshot; its wattage fields are ``None``.
    """
    if snapshot is not None:
        record = snapshot_to_dict(snapshot, host=host, timestamp=timestamp)
    else:
        record = {
            "timestamp": timestamp.isoformat(),
            "host": host,
            "production_w": None,
            "consumption_w": None,
            "net_w": None,
        }
    record["token_minted"] = token_minted
    record["error"] = error
    return record
