"""Text and JSON rendering of port check results."""

from __future__ import annotations

import json
import os
from typing import IO

from pydantic import BaseModel

from portcheck.scanner import PortResult, ScanReport, ScanSummary

__all__ = [
    "Style",
    "COLOR",
    "PLAIN",
    "pick_style",
    "format_result",
    "format_scan_header",
    "format_summary",
    "format_duration",
    "render_report",
    "render_json",
    "usage_text",
]


class Style(BaseModel):
    """ANSI escape codes used by the presenter."""

    reset: str = "\033[0m"
    red: str = "\033[31m"
    green: str = "\033[32m"
    yellow: str = "\033[33m"
    cyan: str = "\033[36m"
    bold: str = "\033[1m"

    model_config = {"frozen": True}


COLOR = Style()
PLAIN = Style(reset="", red="", green="", yellow="", cyan="", bold="")


def pick_style(color: bool | None = None, stream: IO[str] | None = None) -> Style:
    """Choose colored or plain output.

    ``color=None`` enables colors only for a TTY when NO_COLOR is unset.
    """
    if color is not None:
        return COLOR if color else PLAIN
    if os.environ.get("NO_COLOR"):
        return PLAIN
    isatty = getattr(stream, "isatty", None)
    return COLOR if isatty is not None and isatty() else PLAIN


def format_result(result: PortResult, show_pid: bool = False, style: Style = PLAIN) -> str:
    """Format one port result as a single line."""
    s = style
    if not result.in_use:
        return (
            f"{s.green}○{s.reset} Port {s.bold}{result.port}{s.reset} is "
            f"{s.green}{s.bold}available{s.reset}"
        )

    line = (
        f"{s.red}●{s.reset} Port {s.bold}{result.port}{s.reset} is "
        f"{s.red}{s.bold}in use{s.reset}"
    )
    if show_pid and result.owner_resolved:
        line += (
            f" (PID: {s.yellow}{result.owner_pid}{s.reset}, "
            f"Process: {s.cyan}{result.owner_name}{s.reset})"
        )
    elif show_pid:
        line += f" {s.yellow}(process info unavailable - may need root){s.reset}"
    return line


def format_scan_header(start: int, end: int, style: Style = PLAIN) -> str:
    return f"{style.cyan}Scanning ports {start}-{end}...{style.reset}"


def format_duration(seconds: float) -> str:
    """Render a duration rounded to milliseconds (``850ms``, ``1.204s``)."""
    ms = round(seconds * 1000)
    if ms < 1000:
        return f"{ms}ms"
    return f"{ms / 1000:.3f}".rstrip("0").rstrip(".") + "s"


def format_summary(summary: ScanSummary, style: Style = PLAIN) -> str:
    return (
        f"{style.cyan}{summary.total} ports scanned in {format_duration(summary.elapsed)} | "
        f"{summary.in_use} in use, {summary.available} available{style.reset}"
    )


def render_report(report: ScanReport, show_pid: bool = False, style: Style = PLAIN) -> str:
    """Render a range scan: in-use ports only, then the summary."""
    lines = [format_result(r, show_pid, style) for r in report.busy_results]
    if lines:
        lines.append("")
    lines.append(format_summary(report.summary, style))
    return "\n".join(lines)


def render_json(result: PortResult | ScanReport) -> str:
    """Render a single result or a range report as JSON."""
    return json.dumps(result.to_dict(), indent=2)


def usage_text(style: Style = PLAIN) -> str:
    s = style
    return f"""{s.bold}{s.cyan}portcheck{s.reset} - Check if ports are open/in use

{s.yellow}Usage:{s.reset}
  portcheck <port>           Check a single port
  portcheck <start>-<end>    Check a range of ports
  portcheck --pid <port>     Show process using the port

{s.yellow}Examples:{s.reset}
  portcheck 8080             Check if port 8080 is in use
  portcheck 3000-3010        Scan ports 3000 through 3010
  portcheck --pid 22         Show what's using port 22

{s.yellow}Flags:{s.reset}
  -p, --pid                  Show process ID and name using the port
  -c, --concurrency N        Maximum ports probed at once (default: 100)
  --json                     Print results as JSON
  --no-color                 Disable colored output
  --config PATH              Load settings from a JSON config file
  -v, --verbose              Increase log verbosity (repeatable)
  -h, --help                 Show this help message
"""
