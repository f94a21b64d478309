# envoy_monitor/services/token_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from envoy_monitor.errors import PersistenceError
from envoy_monitor.models.token import ZERO_TIME, TokenCache

BUCKET = "envoy"
TOKEN_KEY = "envoyToken"
EXPIRES_AT_KEY = "envoyTokenExpiresAt"


def encode_time(value: datetime) -> bytes:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds").encode("utf-8")


def decode_time(raw: bytes) -> datetime:
    value = datetime.fromisoformat(bytes(raw).decode("utf-8"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class TokenStore:
    """SQLite-backed durable copy of the token cache.

    The database holds one table (the ``envoy`` bucket) of key/blob pairs.
    Each load and save opens its own connection and closes it again, so no
    handle is held between calls.
    """

    def __init__(self, path: Optional[Union[Path, str]] = None):
        self.path = Path(path).expanduser() if path else Path("envoy.db")
        self._log = logging.getLogger("envoy.cache")

    # ------------------------------------------------------------------
    @contextlib.contextmanager
    def _connect(self):
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path)
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"error opening cache database {self.path}: {exc}") from exc
        try:
            # The connection context manager wraps one transaction.
            with conn:
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {BUCKET} (
                        key TEXT PRIMARY KEY,
                        value BLOB NOT NULL
                    )
                    """
                )
                yield conn
        except sqlite3.Error as exc:
            raise PersistenceError(f"cache database {self.path} failed: {exc}") from exc
        finally:
            conn.close()

    # ------------------------------------------------------------------
    def load(self) -> TokenCache:
        cache = TokenCache()
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT key, value FROM {BUCKET} WHERE key IN (?, ?)",
                (TOKEN_KEY, EXPIRES_AT_KEY),
            ).fetchall()

        values = {key: value for key, value in rows}
        token_raw = values.get(TOKEN_KEY)
        if token_raw is not None:
            try:
                cache.token = bytes(token_raw).decode("utf-8")
            except (UnicodeDecodeError, TypeError) as exc:
                raise PersistenceError(f"could not decode {TOKEN_KEY}: {exc}") from exc

        expires_raw = values.get(EXPIRES_AT_KEY)
        if expires_raw is not None:
            try:
                cache.expires_at = decode_time(expires_raw)
            except (UnicodeDecodeError, TypeError, ValueError) as exc:
                raise PersistenceError(f"could not decode {EXPIRES_AT_KEY}: {exc}") from exc

        self._log.debug(
            "Loaded token cache from %s (token=%s, expires_at=%s)",
            self.path,
            "present" if cache.token else "absent",
            cache.expires_at.isoformat() if cache.expires_at != ZERO_TIME else "unset",
        )
        return cache

    def save(self, cache: TokenCache) -> None:
        with self._connect() as conn:
            conn.executemany(
                f"""
                INSERT INTO {BUCKET}(key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                [
                    (TOKEN_KEY, cache.token.encode("utf-8")),
                    (EXPIRES_AT_KEY, encode_time(cache.expires_at)),
                ],
            )
        self._log.debug("Saved token cache to %s", self.path)
