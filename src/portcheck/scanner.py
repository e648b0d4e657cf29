"""Port range scanner.

Fans one probe task per port out over a thread pool, gated by a semaphore,
collects results through a queue and sorts them once every task has finished.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Literal

from pydantic import BaseModel

from portcheck.config import ScanConfig
from portcheck.prober import probe
from portcheck.query import validate_range
from portcheck.resolver import ProcessResolver, get_default_resolver

logger = logging.getLogger(__name__)

__all__ = [
    "PortResult",
    "ScanSummary",
    "ScanReport",
    "RangeScanner",
    "check_port",
    "scan_range",
]

ProbeFunc = Callable[[int], bool]
Resolution = Literal["not_requested", "resolved", "unavailable"]


class PortResult(BaseModel):
    """Outcome of checking one port.

    Attributes:
        port: Port number
        in_use: Whether the port could not be claimed
        owner_pid: PID of the listening process (resolved ports only)
        owner_name: Short command name of that process
        resolution: "not_requested", "resolved" or "unavailable"
    """

    port: int
    in_use: bool
    owner_pid: int | None = None
    owner_name: str | None = None
    resolution: Resolution = "not_requested"

    model_config = {"frozen": True}

    @property
    def owner_resolved(self) -> bool:
        return self.resolution == "resolved"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "port": self.port,
            "in_use": self.in_use,
            "owner_pid": self.owner_pid,
            "owner_name": self.owner_name,
            "resolution": self.resolution,
        }


class ScanSummary(BaseModel):
    """Aggregate counts for a finished range scan."""

    total: int
    in_use: int
    available: int
    elapsed: float  # seconds

    model_config = {"frozen": True}

    @classmethod
    def from_results(cls, results: tuple[PortResult, ...], elapsed: float) -> ScanSummary:
        in_use = sum(1 for r in results if r.in_use)
        return cls(total=len(results), in_use=in_use, available=len(results) - in_use, elapsed=elapsed)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "in_use": self.in_use,
            "available": self.available,
            "elapsed": round(self.elapsed, 3),
        }


class ScanReport(BaseModel):
    """Port-ascending results of a range scan plus its summary."""

    results: tuple[PortResult, ...]
    summary: ScanSummary

    model_config = {"frozen": True}

    @property
    def busy_results(self) -> list[PortResult]:
        return [r for r in self.results if r.in_use]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
        }


def check_port(
    port: int,
    resolve_process: bool = False,
    probe_func: ProbeFunc = probe,
    resolver: ProcessResolver | None = None,
) -> PortResult:
    """Check a single port, resolving its owner when requested.

    The owner is only looked up for ports that are in use.

    Args:
        port: Port to check
        resolve_process: Whether to look up the owning process
        probe_func: Occupancy probe, returns True when the port is in use
        resolver: Process resolver (default: platform resolver)

    Returns:
        PortResult for the port
    """
    in_use = probe_func(port)
    if not in_use or not resolve_process:
        return PortResult(port=port, in_use=in_use)

    active_resolver = resolver or get_default_resolver()
    owner = active_resolver.resolve(port)
    if owner is None:
        return PortResult(port=port, in_use=True, resolution="unavailable")

    return PortResult(
        port=port,
        in_use=True,
        owner_pid=owner.pid,
        owner_name=owner.name,
        resolution="resolved",
    )


class RangeScanner:
    """Concurrent scanner for a closed port interval.

    At most ``config.max_concurrency`` ports are checked at any moment. Every
    port in the interval yields exactly one result; a failing check is
    recorded as in use and never stops the scan.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        probe_func: ProbeFunc | None = None,
        resolver: ProcessResolver | None = None,
    ) -> None:
        """Initialize scanner.

        Args:
            config: Scan configuration (default: ScanConfig())
            probe_func: Occupancy probe (default: bind probe on config.bind_host)
            resolver: Process resolver (default: platform resolver on config.proc_root)
        """
        self._config = config or ScanConfig()
        self._probe = probe_func or functools.partial(probe, host=self._config.bind_host)
        self._resolver = resolver
        if self._resolver is None and self._config.resolve_process:
            self._resolver = get_default_resolver(self._config.proc_root)

    @property
    def max_concurrency(self) -> int:
        return self._config.max_concurrency

    def _check(self, port: int) -> PortResult:
        try:
            return check_port(
                port,
                resolve_process=self._config.resolve_process,
                probe_func=self._probe,
                resolver=self._resolver,
            )
        except Exception as e:
            logger.warning(f"Port {port}: check failed, reporting as in use: {e}")
            resolution: Resolution = (
                "unavailable" if self._config.resolve_process else "not_requested"
            )
            return PortResult(port=port, in_use=True, resolution=resolution)

    async def scan(self, start: int, end: int) -> ScanReport:
        """Scan every port in ``[start, end]``.

        Args:
            start: First port (inclusive)
            end: Last port (inclusive)

        Returns:
            ScanReport with results sorted by port

        Raises:
            InvalidRangeError: If the bounds are out of range or start > end
        """
        validate_range(start, end)

        size = end - start + 1
        workers = min(self._config.max_concurrency, size)
        semaphore = asyncio.Semaphore(self._config.max_concurrency)
        collected: asyncio.Queue[PortResult] = asyncio.Queue()
        loop = asyncio.get_running_loop()

        logger.info(f"Scanning ports {start}-{end} ({size} ports, concurrency {workers})")
        started = time.perf_counter()

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="portcheck") as pool:

            async def run_one(port: int) -> None:
                async with semaphore:
                    result = await loop.run_in_executor(pool, self._check, port)
                await collected.put(result)

            await asyncio.gather(*(run_one(port) for port in range(start, end + 1)))

        results: list[PortResult] = []
        while not collected.empty():
            results.append(collected.get_nowait())
        elapsed = time.perf_counter() - started

        results.sort(key=lambda r: r.port)
        ordered = tuple(results)
        summary = ScanSummary.from_results(ordered, elapsed)

        logger.info(
            f"Scanned {summary.total} port(s) in {elapsed:.3f}s: "
            f"{summary.in_use} in use, {summary.available} available"
        )
        return ScanReport(results=ordered, summary=summary)


def scan_range(
    start: int,
    end: int,
    resolve_process: bool = False,
    config: ScanConfig | None = None,
) -> ScanReport:
    """Synchronous wrapper around ``RangeScanner.scan``.

    Args:
        start: First port (inclusive)
        end: Last port (inclusive)
        resolve_process: Whether to look up owning processes
        config: Base configuration; ``resolve_process`` overrides its flag

    Returns:
        ScanReport with results sorted by port
    """
    base = config or ScanConfig()
    scan_config = base.model_copy(update={"resolve_process": resolve_process})
    return asyncio.run(RangeScanner(scan_config).scan(start, end))
