# envoy_monitor/tests/fake_http.py

import json
from datetime import datetime, timezone

from envoy_monitor.config import EnvoyConfig

LOGIN_URL = "https://enlighten.test/login/login.json"
TOKEN_URL = "https://entrez.test/tokens"
PRODUCTION_URL = "https://192.168.1.50/production.json"

SAMPLE_PRODUCTION = {
    "production": [
        {"type": "inverters", "activeCount": 20, "wNow": 560, "measurementType": "inverters"},
        {"type": "eim", "measurementType": "production", "wNow": 567.8},
    ],
    "consumption": [
        {"type": "eim", "measurementType": "total-consumption", "wNow": 123.4},
        {"type": "eim", "measurementType": "net-consumption", "wNow": -444.4},
    ],
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Stand-in for requests.Session that replays canned responses per URL."""

    def __init__(self, responses=None):
        # url -> list of (status, payload_or_text) or Exception, consumed in order;
        # the last entry repeats.
        self.responses = {url: list(items) for url, items in (responses or {}).items()}
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        queue = self.responses.get(url)
        if not queue:
            return FakeResponse(status_code=404, text="not found")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        status_code, body = item
        if isinstance(body, str):
            return FakeResponse(status_code=status_code, text=body)
        return FakeResponse(status_code=status_code, payload=body)

    @property
    def urls(self):
        return [call["url"] for call in self.calls]


class FakeClock:
    def __init__(self, now=None):
        self.now = now or datetime(2024, 6, 1, 12, 0, 0, 250000, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, delta):
        self.now = self.now + delta


def envoy_cfg(**overrides):
    kwargs = dict(
        email="owner@example.com",
        password="hunter2",
        serial_number="122212345678",
        host="192.168.1.50",
        timeout=5.0,
        login_url=LOGIN_URL,
        token_url=TOKEN_URL,
    )
    kwargs.update(overrides)
    return EnvoyConfig(**kwargs)


def happy_session(token="eyJ.device.token", production=None):
    return FakeSession({
        LOGIN_URL: [(200, {"message": "success", "session_id": "sess-42"})],
        TOKEN_URL: [(200, token)],
        PRODUCTION_URL: [(200, production if production is not None else SAMPLE_PRODUCTION)],
    })
