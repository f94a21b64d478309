# envoy_monitor/services/envoy_client.py

from __future__ import annotations

import warnings
from datetime import datetime
from typing import Callable, Optional

import requests
import urllib3

from envoy_monitor.config import EnvoyConfig
from envoy_monitor.errors import EnvoyDecodeError
from envoy_monitor.models.production import ProductionSnapshot
from envoy_monitor.models.token import utcnow
from envoy_monitor.services.http_util import send
from envoy_monitor.services.production_parser import parse_production
from envoy_monitor.services.token_manager import TokenManager
from envoy_monitor.services.token_store import TokenStore


class EnvoyClient:
    """Reads live production/consumption from a local Envoy gateway."""

    def __init__(
        self,
        cfg: EnvoyConfig,
        log,
        session: Optional[requests.Session] = None,
        *,
        store: Optional[TokenStore] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.cfg = cfg
        self.log = log
        self.session = session or requests.Session()
        # Loading the cache here is the only way construction can fail.
        self.tokens = TokenManager(
            cfg,
            store or TokenStore(),
            log,
            session=self.session,
            clock=clock,
        )

    # ------------------------------------------------------------------
    @property
    def production_url(self) -> str:
        return f"https://{self.cfg.host}/production.json"

    @property
    def verify(self):
        # The gateway ships a self-signed certificate. Either trust the
        # operator's pinned bundle for it or skip verification for this host.
        return self.cfg.ca_bundle or False

    # ------------------------------------------------------------------
    def get_production_data(self) -> ProductionSnapshot:
        token = self.tokens.get_valid_token()

        with warnings.catch_warnings():
            if self.verify is False:
                warnings.simplefilter("ignore", urllib3.exceptions.InsecureRequestWarning)
            resp = send(
                self.session,
                "GET",
                self.production_url,
                stage="telemetry",
                check_status=self.cfg.check_status,
                headers={"Authorization": f"Bearer {token}"},
                verify=self.verify,
                timeout=self.cfg.timeout,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise EnvoyDecodeError(f"production.json was not JSON: {exc}", stage="telemetry") from exc

        snapshot = parse_production(payload)
        self.log.debug(
            "Envoy %s: production=%.1fW consumption=%.1fW",
            self.cfg.host,
            snapshot.production_watts_now,
            snapshot.consumption_watts_now,
        )
        return snapshot
