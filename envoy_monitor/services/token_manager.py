# envoy_monitor/services/token_manager.py

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

import requests

from envoy_monitor.config import EnvoyConfig
from envoy_monitor.errors import EnvoyDecodeError
from envoy_monitor.models.token import TOKEN_LIFETIME, TokenCache, TokenStatus, utcnow
from envoy_monitor.services.http_util import send
from envoy_monitor.services.token_store import TokenStore


class TokenManager:
    """Hands out a non-expired Envoy bearer token, minting one only when needed.

    Minting is a two step exchange with the Enphase cloud: an Enlighten login
    yields a session id, which Entrez trades (together with the gateway
    serial number) for a device-scoped token. The token is cached with a 24h
    expiry and persisted through ``TokenStore``.
    """

    def __init__(
        self,
        cfg: EnvoyConfig,
        store: TokenStore,
        log,
        session: Optional[requests.Session] = None,
        *,
        cache: Optional[TokenCache] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.cfg = cfg
        self.store = store
        self.log = log
        self.session = session or requests.Session()
        self.clock = clock
        self.cache = cache if cache is not None else store.load()
        self.last_minted = False

    # ------------------------------------------------------------------
    def get_valid_token(self) -> str:
        now = self.clock()
        self.last_minted = False
        if not self.cache.needs_refresh(now):
            self.log.debug(
                "Reusing cached Envoy token (expires %s)",
                self.cache.expires_at.isoformat(),
            )
            return self.cache.token

        if self.cache.is_empty:
            self.log.info("No cached Envoy token; requesting a new one")
        else:
            self.log.info(
                "Cached Envoy token expired at %s; requesting a new one",
                self.cache.expires_at.isoformat(),
            )

        return self.refresh()

    def refresh(self) -> str:
        """Mint a new token and replace the cached one.

        The cache is only touched once minting has succeeded, so a cloud
        outage leaves a still-valid token usable against the gateway.
        """
        self.last_minted = False
        token = self.request_new_token()
        self.cache = TokenCache(token=token, expires_at=self.clock() + TOKEN_LIFETIME)
        self.store.save(self.cache)
        self.last_minted = True
        self.log.info("New Envoy token cached until %s", self.cache.expires_at.isoformat())
        return token

    def request_new_token(self) -> str:
        session_id = self.cloud_login()
        return self.device_token_exchange(session_id)

    # ------------------------------------------------------------------
    def cloud_login(self) -> str:
        """Log in to Enlighten and return the session id."""
        resp = send(
            self.session,
            "POST",
            self.cfg.login_url,
            stage="login",
            check_status=self.cfg.check_status,
            data={
                "user[email]": self.cfg.email,
                "user[password]": self.cfg.password,
            },
            timeout=self.cfg.timeout,
        )

        try:
            data = resp.json()
        except ValueError as exc:
            raise EnvoyDecodeError(f"login response was not JSON: {exc}", stage="login") from exc

        session_id = data.get("session_id") if isinstance(data, dict) else None
        if not isinstance(session_id, str) or not session_id:
            raise EnvoyDecodeError("login response did not include a session_id", stage="login")

        self.log.debug("Enlighten login succeeded for %s", self.cfg.email)
        return session_id

    def device_token_exchange(self, session_id: str) -> str:
        """Trade an Enlighten session id for a token scoped to this gateway."""
        resp = send(
            self.session,
            "POST",
            self.cfg.token_url,
            stage="token",
            check_status=self.cfg.check_status,
            json={
                "session_id": session_id,
                "serial_num": self.cfg.serial_number,
                "username": self.cfg.email,
            },
            timeout=self.cfg.timeout,
        )
        # The body is the bare token, no envelope.
        token = resp.text.strip()
        if not token:
            raise EnvoyDecodeError("token response body was empty", stage="token")
        self.log.debug("Entrez issued a token for gateway %s", self.cfg.serial_number)
        return token

    # ------------------------------------------------------------------
    def invalidate(self) -> None:
        self.cache = TokenCache()
        self.store.save(self.cache)
        self.log.info("Envoy token cache cleared")

    def status(self, now: Optional[datetime] = None) -> TokenStatus:
        now = now or self.clock()
        if self.cache.is_empty:
            return TokenStatus(has_token=False, expires_at=None, expired=True, remaining=None)
        expired = self.cache.is_expired(now)
        return TokenStatus(
            has_token=True,
            expires_at=self.cache.expires_at,
            expired=expired,
            remaining=None if expired else self.cache.expires_at - now,
        )
