# envoy_monitor/services/http_util.py

from __future__ import annotations

import requests

from envoy_monitor.errors import EnvoyStatusError, EnvoyTransportError


def send(
    session: requests.Session,
    method: str,
    url: str,
    *,
    stage: str,
    check_status: bool = True,
    **kwargs,
) -> requests.Response:
    """Issue one request, mapping failures onto the client's error types."""
    try:
        resp = session.request(method, url, **kwargs)
    except requests.RequestException as exc:
        raise EnvoyTransportError(f"{method} {url} failed: {exc}", stage=stage) from exc

    if check_status and not 200 <= resp.status_code < 300:
        raise EnvoyStatusError(stage, resp.status_code, response=resp)
    return resp
