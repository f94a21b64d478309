# envoy_monitor/config.py
from dataclasses import dataclass, field
from pathlib import Path
import configparser


ENLIGHTEN_LOGIN_URL = "https://enlighten.enphaseenergy.com/login/login.json"
ENTREZ_TOKEN_URL = "https://entrez.enphaseenergy.com/tokens"


@dataclass(frozen=True)
class EnvoyConfig:
    email: str
    password: str = field(repr=False)
    serial_number: str
    host: str
    timeout: float = 30.0
    check_status: bool = True
    ca_bundle: str | None = None
    login_url: str = ENLIGHTEN_LOGIN_URL
    token_url: str = ENTREZ_TOKEN_URL


@dataclass
class CacheConfig:
    path: str = "envoy.db"


@dataclass
class PollConfig:
    interval: float = 60.0


@dataclass
class LoggingConfig:
    console_level: str = "INFO"
    console_quiet: bool = False
    debug_modules: list[str] = field(default_factory=list)
    structured_enabled: bool = False
    structured_path: str | None = None


@dataclass
class AppConfig:
    envoy: EnvoyConfig
    cache: CacheConfig
    poll: PollConfig
    logging: LoggingConfig


class Config:
    REQUIRED_ENVOY_KEYS = ("email", "password", "serial_number", "host")

    def __init__(self, path: str):
        self.path = Path(path)
        self.parser = configparser.ConfigParser(
            inline_comment_prefixes=("#",),
            interpolation=None,
        )
        read = self.parser.read(self.path)
        if not read:
            raise FileNotFoundError(f"Config file not found: {self.path}")

    @classmethod
    def load(cls, path: str) -> AppConfig:
        cfg = cls(path)

        p = cfg.parser

        def _as_bool(value: str) -> bool:
            return value.strip().lower() == "true"

        def _maybe_str(raw: str | None) -> str | None:
            if raw is None:
                return None
            raw = raw.strip()
            return raw or None

        # --- Envoy ---
        if "envoy" not in p:
            raise ValueError("[envoy] section missing from config")

        envoy_sec = p["envoy"]
        missing = [key for key in cls.REQUIRED_ENVOY_KEYS if not _maybe_str(envoy_sec.get(key))]
        if missing:
            raise ValueError(f"[envoy] missing required keys: {', '.join(missing)}")

        envoy_kwargs = {
            "email": envoy_sec["email"].strip(),
            "password": envoy_sec["password"],
            "serial_number": envoy_sec["serial_number"].strip(),
            "host": envoy_sec["host"].strip(),
        }
        if "timeout" in envoy_sec:
            envoy_kwargs["timeout"] = float(envoy_sec["timeout"])
        if "check_status" in envoy_sec:
            envoy_kwargs["check_status"] = _as_bool(envoy_sec["check_status"])
        if (ca_bundle := _maybe_str(envoy_sec.get("ca_bundle"))) is not None:
            envoy_kwargs["ca_bundle"] = ca_bundle
        if (login_url := _maybe_str(envoy_sec.get("login_url"))) is not None:
            envoy_kwargs["login_url"] = login_url
        if (token_url := _maybe_str(envoy_sec.get("token_url"))) is not None:
            envoy_kwargs["token_url"] = token_url
        envoy_cfg = EnvoyConfig(**envoy_kwargs)

        # --- Cache ---
        cache_kwargs = {}
        if "cache" in p and (cache_path := _maybe_str(p["cache"].get("path"))) is not None:
            cache_kwargs["path"] = cache_path
        cache_cfg = CacheConfig(**cache_kwargs)

        # --- Poll ---
        poll_kwargs = {}
        if "poll" in p and "interval" in p["poll"]:
            poll_kwargs["interval"] = float(p["poll"]["interval"])
        poll_cfg = PollConfig(**poll_kwargs)

        # --- Logging ---
        logging_kwargs = {}
        if "logging" in p:
            logging_sec = p["logging"]
            if "console_level" in logging_sec:
                logging_kwargs["console_level"] = logging_sec["console_level"]
            if "console_quiet" in logging_sec:
                logging_kwargs["console_quiet"] = _as_bool(logging_sec["console_quiet"])
            if "debug_modules" in logging_sec:
                raw = logging_sec["debug_modules"]
                logging_kwargs["debug_modules"] = [x.strip() for x in raw.split(",") if x.strip()]
            if "structured_enabled" in logging_sec:
                logging_kwargs["structured_enabled"] = _as_bool(logging_sec["structured_enabled"])
            if "structured_path" in logging_sec:
                logging_kwargs["structured_path"] = logging_sec["structured_path"]
        logging_cfg = LoggingConfig(**logging_kwargs)

        return AppConfig(
            envoy=envoy_cfg,
            cache=cache_cfg,
            poll=poll_cfg,
            logging=logging_cfg,
        )
