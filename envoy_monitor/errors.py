"""Exceptions raised by the Envoy client."""

from __future__ import annotations


class EnvoyError(Exception):
    """Base exception for Envoy client errors.

    ``stage`` names the step that failed: ``login``, ``token``, ``cache`` or
    ``telemetry``.
    """

    def __init__(self, message: str, stage: str | None = None):
        self.message = message
        self.stage = stage
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class EnvoyTransportError(EnvoyError):
    """Connection, DNS, TLS or timeout failure."""


class EnvoyDecodeError(EnvoyError):
    """Response body could not be decoded into the expected shape."""


class EnvoyStatusError(EnvoyError):
    """Remote endpoint answered with a non-2xx status."""

    def __init__(self, stage: str, status_code: int, response=None):
        self.status_code = status_code
        self.response = response
        super().__init__(f"unexpected HTTP status {status_code}", stage=stage)


class PersistenceError(EnvoyError):
    """Token cache store could not be opened, read or written."""

    def __init__(self, message: str):
        super().__init__(message, stage="cache")


class PayloadError(EnvoyError):
    """production.json did not have the expected structure."""

    def __init__(self, message: str):
        super().__init__(message, stage="telemetry")
