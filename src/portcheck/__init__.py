"""portcheck - check whether local TCP ports are in use and who owns them."""

from __future__ import annotations

from portcheck.config import ScanConfig, load_config
from portcheck.errors import ConfigError, InvalidPortError, InvalidRangeError, PortcheckError
from portcheck.prober import probe
from portcheck.query import PortQuery, parse_port_query
from portcheck.resolver import (
    ProcessOwner,
    ProcessResolver,
    ProcfsResolver,
    UnsupportedResolver,
    get_default_resolver,
)
from portcheck.scanner import (
    PortResult,
    RangeScanner,
    ScanReport,
    ScanSummary,
    check_port,
    scan_range,
)

__all__ = [
    # Config
    "ScanConfig",
    "load_config",
    # Errors
    "PortcheckError",
    "InvalidPortError",
    "InvalidRangeError",
    "ConfigError",
    # Query
    "PortQuery",
    "parse_port_query",
    # Probe & resolve
    "probe",
    "ProcessOwner",
    "ProcessResolver",
    "ProcfsResolver",
    "UnsupportedResolver",
    "get_default_resolver",
    # Scanner
    "PortResult",
    "ScanSummary",
    "ScanReport",
    "RangeScanner",
    "check_port",
    "scan_range",
]
