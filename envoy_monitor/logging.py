from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Mapping

APP_LOGGER = "envoy"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Third-party loggers that flood DEBUG output with per-request noise.
NOISY_MODULES = ("urllib3",)


class ConsoleLog:
    """Route log records to stdout and hand back the ``envoy`` logger.

    ``quiet`` drops the stdout handler entirely, leaving only whatever
    handlers callers add later. Modules listed in ``debug_modules`` are
    forced to DEBUG; noisy third-party loggers are held at WARNING unless
    they are listed there too.
    """

    def __init__(self, level: str = "INFO", quiet: bool = False, debug_modules: Iterable[str] | None = None):
        self.level = level.upper()
        self.quiet = quiet
        self.debug_modules = list(debug_modules or [])

    def _stdout_handler(self) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(getattr(logging, self.level, logging.INFO))
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        return handler

    def setup(self) -> logging.Logger:
        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(logging.DEBUG)
        if not self.quiet:
            root.addHandler(self._stdout_handler())

        for name in NOISY_MODULES:
            if name not in self.debug_modules:
                logging.getLogger(name).setLevel(logging.WARNING)
        for name in self.debug_modules:
            logging.getLogger(name).setLevel(logging.DEBUG)

        return logging.getLogger(APP_LOGGER)


class StructuredLog:
    """Append each reading record to a JSON Lines file.

    Records are plain mappings, normally built by
    ``output_formatter.reading_record``. A disabled log, or one without a
    path, accepts writes and discards them.
    """

    def __init__(self, path: str | None, enabled: bool = False):
        self.path = Path(path).expanduser() if path else None
        self.enabled = enabled and self.path is not None
        if self.enabled:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, record: Mapping[str, Any]) -> None:
        if not self.enabled:
            return
        line = json.dumps(dict(record), default=str, sort_keys=True)
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except OSError as exc:
            logging.getLogger(APP_LOGGER).warning("Could not append reading to %s: %s", self.path, exc)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
