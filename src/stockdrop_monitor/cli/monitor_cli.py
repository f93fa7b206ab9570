"""CLI to trigger monitoring cycles (for cron-style schedulers) and manage the DB.

Usage:
  poetry run stockdrop-cli health
  poetry run stockdrop-cli run                 # POST /monitor/run on a running server
  poetry run stockdrop-cli run-local           # one cycle in-process, no server
  poetry run stockdrop-cli init-db
"""
import argparse
import asyncio
import json
import signal
import sys

import httpx

from stockdrop_monitor.config import load_settings
from stockdrop_monitor.container import close_container, init_container
from stockdrop_monitor.db import init_db
from stockdrop_monitor.providers.core import ConfigurationError
from stockdrop_monitor.schemas import MonitorRunResponse
from stockdrop_monitor.utils import configure_logging


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_run(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.post("/monitor/run")
    try:
        body = r.json()
    except ValueError:
        print(f"HTTP {r.status_code}: {r.text}", file=sys.stderr)
        return 1
    print_json(body)
    return 0 if r.is_success and body.get("success") else 1


async def _run_local_cycle() -> MonitorRunResponse:
    settings = load_settings()
    container = init_container(settings)
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except NotImplementedError:  # e.g. Windows
            pass
    try:
        summary = await container.orchestrator().run(cancel_event=cancel_event)
    finally:
        await close_container(container)
    return MonitorRunResponse.from_summary(summary)


def cmd_run_local(_: argparse.Namespace) -> int:
    response = asyncio.run(_run_local_cycle())
    print_json(response.model_dump(mode="json", by_alias=True))
    return 0 if response.success else 1


def cmd_init_db(_: argparse.Namespace) -> int:
    container = init_container(load_settings())
    init_db(container.engine())
    print("Tables created")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="StockDrop monitor CLI")
    parser.add_argument(
        "--base-url",
        default="http://127.0.0.1:8001",
        help="Server base URL for HTTP commands (default: http://127.0.0.1:8001)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=120.0,
        help="HTTP timeout in seconds; a cycle can take a while (default: 120)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("health", help="GET /")
    subparsers.add_parser("run", help="POST /monitor/run")
    subparsers.add_parser("run-local", help="Run one cycle in-process")
    subparsers.add_parser("init-db", help="Create database tables")

    args = parser.parse_args()
    configure_logging(args.log_level)

    local_handlers = {"run-local": cmd_run_local, "init-db": cmd_init_db}
    if args.command in local_handlers:
        try:
            return local_handlers[args.command](args)
        except ConfigurationError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return 2

    http_handlers = {"health": cmd_health, "run": cmd_run}
    try:
        with httpx.Client(base_url=args.base_url.rstrip("/"), timeout=args.timeout) as client:
            return http_handlers[args.command](client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
