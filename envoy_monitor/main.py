# envoy_monitor/main.py

import logging
import sys
import time
from itertools import count

from .cli import build_parser
from .config import Config
from .errors import EnvoyError
from .logging import ConsoleLog, StructuredLog
from .models.token import utcnow
from .services.envoy_client import EnvoyClient
from .services.output_formatter import emit_human, emit_json, emit_token_status, reading_record
from .services.token_store import TokenStore

EXIT_ENVOY_ERROR = 2


def take_reading(client, structured_logger, *, as_json: bool):
    now = utcnow()
    host = client.cfg.host
    try:
        snapshot = client.get_production_data()
    except EnvoyError as exc:
        structured_logger.write(
            reading_record(
                None,
                host=host,
                timestamp=now,
                token_minted=client.tokens.last_minted,
                error=str(exc),
            )
        )
        raise

    local_now = now.astimezone()
    if as_json:
        emit_json(snapshot, host=host, timestamp=local_now)
    else:
        emit_human(snapshot, host=host, timestamp=local_now)

    structured_logger.write(
        reading_record(snapshot, host=host, timestamp=now, token_minted=client.tokens.last_minted)
    )
    return snapshot


def run_poll(client, structured_logger, log, *, interval: float, limit=None, as_json: bool = False, sleep=time.sleep) -> int:
    failures = 0
    counter = count(1) if limit is None else range(1, limit + 1)
    for n in counter:
        try:
            take_reading(client, structured_logger, as_json=as_json)
        except EnvoyError as exc:
            log.warning("Envoy reading %s failed: %s", n, exc)
            failures += 1
        if limit is not None and n >= limit:
            break
        sleep(interval)
    log.info("Polling finished (%s failed readings)", failures)
    return failures


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    app_cfg = Config.load(args.config)
    console_logger = ConsoleLog(
        level="DEBUG" if args.debug else app_cfg.logging.console_level,
        quiet=args.quiet or app_cfg.logging.console_quiet,
        debug_modules=app_cfg.logging.debug_modules,
    )
    log = console_logger.setup()
    structured_logger = StructuredLog(
        app_cfg.logging.structured_path,
        app_cfg.logging.structured_enabled,
    )
    if args.debug:
        logging.getLogger("urllib3").setLevel(logging.INFO)

    try:
        client = EnvoyClient(app_cfg.envoy, log, store=TokenStore(app_cfg.cache.path))

        if args.command == "read":
            take_reading(client, structured_logger, as_json=args.json)
        elif args.command == "poll":
            interval = args.interval or app_cfg.poll.interval
            log.info("Polling %s every %.0fs", app_cfg.envoy.host, interval)
            try:
                run_poll(
                    client,
                    structured_logger,
                    log,
                    interval=interval,
                    limit=args.count,
                    as_json=args.json,
                )
            except KeyboardInterrupt:
                log.info("Polling interrupted")
        elif args.command == "token":
            if args.refresh:
                client.tokens.refresh()
            emit_token_status(client.tokens.status(), as_json=args.json)
        elif args.command == "clear-cache":
            client.tokens.invalidate()
        else:
            raise ValueError(f"Unsupported command: {args.command}")
    except EnvoyError as exc:
        log.error("%s", exc)
        return EXIT_ENVOY_ERROR

    return 0


if __name__ == "__main__":
    sys.exit(main())
