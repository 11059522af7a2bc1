"""Command-line entry point for the network quality tester."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from netgauge import ApplicationContext, AllProbesFailedError, bootstrap, get_network_status

LOGGER = logging.getLogger("netgauge.cli")

COMMANDS = ("run", "latency", "quick", "provider", "status", "serve")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Network speed and quality tester")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument(
        "command",
        nargs="?",
        default="run",
        choices=COMMANDS,
        help="Operation to perform (default: run)",
    )
    parser.add_argument("--host", default=None, help="Override web server host (serve only)")
    parser.add_argument("--port", type=int, default=None, help="Override web server port (serve only)")
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode (serve only)")
    return parser.parse_args(argv)


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


def run_command(context: ApplicationContext, args: argparse.Namespace) -> int:
    tester = context.tester

    if args.command == "serve":
        context.start()
        host = args.host or context.config.web.host
        port = args.port or context.config.web.port
        context.web_app.run(host=host, port=port, debug=args.debug)
        return 0

    if args.command == "quick":
        result = tester.quick_check()
        _emit(result.to_dict())
        return 0 if result.is_online else 1

    if args.command == "provider":
        _emit(tester.get_network_provider().to_dict())
        return 0

    try:
        if args.command == "latency":
            _emit(tester.test_latency().to_dict())
        elif args.command == "status":
            _emit(get_network_status(tester).to_dict())
        else:
            result = tester.run_speed_test()
            _emit({"result": result.to_dict(), "quality": tester.analyze_quality(result).to_dict()})
    except AllProbesFailedError as exc:
        LOGGER.error("%s; the network appears to be unreachable", exc)
        return 2
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    context = bootstrap(args.config)
    try:
        return run_command(context, args)
    finally:
        context.close()


if __name__ == "__main__":
    sys.exit(main())
