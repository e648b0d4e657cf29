"""portcheck - check whether local TCP ports are in use."""

from __future__ import annotations

import argparse
import asyncio
import functools
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

from pydantic import ValidationError

from portcheck.config import ScanConfig, load_config
from portcheck.errors import PortcheckError
from portcheck.presenter import (
    Style,
    format_result,
    format_scan_header,
    pick_style,
    render_json,
    render_report,
    usage_text,
)
from portcheck.prober import probe
from portcheck.query import PortQuery, parse_port_query
from portcheck.resolver import get_default_resolver
from portcheck.scanner import RangeScanner, check_port

logger = logging.getLogger(__name__)

__all__ = ["build_parser", "main", "run"]


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.exit(1, f"Error: {message}\nRun 'portcheck --help' for usage.\n")


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(prog="portcheck", add_help=False)
    p.add_argument("port", nargs="?", help="Port (8080) or range (3000-3010)")
    p.add_argument("-p", "--pid", action="store_true", help="Show process using the port")
    p.add_argument("-c", "--concurrency", type=int, help="Maximum ports probed at once")
    p.add_argument("--json", action="store_true", help="Print results as JSON")
    p.add_argument("--no-color", action="store_true", help="Disable colored output")
    p.add_argument("--config", type=Path, help="JSON config file")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    p.add_argument("-h", "--help", action="store_true", help="Show this help message")
    return p


def _setup_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def _build_config(args: argparse.Namespace) -> ScanConfig:
    """Merge the optional config file with command line overrides.

    Raises:
        ConfigError: If the config file cannot be loaded
        ValidationError: If an override is invalid
    """
    config = load_config(args.config) if args.config else ScanConfig()

    overrides: dict[str, object] = {}
    if args.pid:
        overrides["resolve_process"] = True
    if args.concurrency is not None:
        overrides["max_concurrency"] = args.concurrency
    if args.no_color:
        overrides["color"] = False

    if not overrides:
        return config
    return ScanConfig.model_validate({**config.model_dump(), **overrides})


def _report_error(message: str, as_json: bool, style: Style, payload: dict[str, object]) -> int:
    if as_json:
        print(json.dumps(payload, indent=2))
    else:
        print(f"{style.red}Error: {message}{style.reset}", file=sys.stderr)
    return 1


def _check_single(query: PortQuery, config: ScanConfig, as_json: bool, style: Style) -> None:
    resolver = get_default_resolver(config.proc_root) if config.resolve_process else None
    result = check_port(
        query.start,
        resolve_process=config.resolve_process,
        probe_func=functools.partial(probe, host=config.bind_host),
        resolver=resolver,
    )
    if as_json:
        print(render_json(result))
    else:
        print(format_result(result, show_pid=config.resolve_process, style=style))


def _check_range(query: PortQuery, config: ScanConfig, as_json: bool, style: Style) -> None:
    if not as_json:
        print(format_scan_header(query.start, query.end, style))
        print()

    report = asyncio.run(RangeScanner(config).scan(query.start, query.end))

    if as_json:
        print(render_json(report))
    else:
        print(render_report(report, show_pid=config.resolve_process, style=style))


def main(argv: list[str] | None = None) -> int:
    """Run portcheck.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Process exit status: 0 after a completed check, 1 on input errors
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    style = pick_style(False if args.no_color else None, sys.stdout)

    if args.help:
        print(usage_text(style))
        return 0

    if args.port is None:
        print(usage_text(style), file=sys.stderr)
        return 1

    try:
        config = _build_config(args)
        query = parse_port_query(args.port)
    except PortcheckError as e:
        return _report_error(e.message, args.json, style, e.to_dict())
    except ValidationError as e:
        message = f"Invalid option: {e.errors()[0]['msg']}"
        return _report_error(message, args.json, style, {"error": message, "code": "INVALID_OPTION"})

    logger.debug(f"Effective config: {config.model_dump()}")
    style = pick_style(config.color, sys.stdout)

    if query.is_range:
        _check_range(query, config, args.json, style)
    else:
        _check_single(query, config, args.json, style)
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
