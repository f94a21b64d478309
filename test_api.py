#!/usr/bin/env python3
"""Quick helper to inspect the Envoy token cache and take one reading."""

from envoy_monitor.config import Config
from envoy_monitor.logging import ConsoleLog
from envoy_monitor.services.envoy_client import EnvoyClient
from envoy_monitor.services.token_store import TokenStore


def main() -> None:
    log = ConsoleLog(level="DEBUG").setup()
    cfg = Config.load("envoy_monitor.conf")
    client = EnvoyClient(cfg.envoy, log, store=TokenStore(cfg.cache.path))

    print("Token status before:", client.tokens.status())

    snapshot = client.get_production_data()
    print("Production now:", snapshot.production_watts_now, "W")
    print("Consumption now:", snapshot.consumption_watts_now, "W")

    print("Token minted this run?", client.tokens.last_minted)
    print("Token status after:", client.tokens.status())


if __name__ == "__main__":
    main()
