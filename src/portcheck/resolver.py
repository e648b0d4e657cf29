"""Socket-to-process resolution.

Linux exposes no direct "who owns this socket" query, so the owner is found in
two steps:

1. Find the listening socket for the port in ``/proc/net/tcp`` (then
   ``/proc/net/tcp6``) and take its inode.
2. Walk ``/proc/<pid>/fd`` for every process until a descriptor link reads
   ``socket:[<inode>]``.

Everything here is best effort. Missing tables, permission errors on other
users' fd directories and processes exiting mid-scan all end in ``None``.
"""

from __future__ import annotations

import logging
import os
import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

__all__ = [
    "LISTEN_STATE",
    "ProcessOwner",
    "ProcessResolver",
    "ProcfsResolver",
    "UnsupportedResolver",
    "find_listening_inode",
    "find_owner_by_inode",
    "get_default_resolver",
]

# st column value for TCP_LISTEN
LISTEN_STATE = "0A"

UNKNOWN_PROCESS = "unknown"

_SOCKET_TABLES = ("net/tcp", "net/tcp6")


class ProcessOwner(BaseModel):
    """Process holding a socket."""

    pid: int
    name: str

    model_config = {"frozen": True}


def find_listening_inode(lines: Iterable[str], port: int) -> str | None:
    """Return the inode of the first listening socket on ``port``.

    Args:
        lines: Lines of a /proc/net/tcp style table, header included
        port: Local port to look for

    Returns:
        The inode column as text, or None if no listening row matches
    """
    port_hex = format(port, "04X")
    rows = iter(lines)
    next(rows, None)  # header

    for row in rows:
        fields = row.split()
        if len(fields) < 10:
            continue

        addr_parts = fields[1].split(":")
        if len(addr_parts) != 2:
            continue

        if addr_parts[1] == port_hex and fields[3] == LISTEN_STATE:
            return fields[9]

    return None


def find_owner_by_inode(proc_root: Path, inode: str) -> ProcessOwner | None:
    """Find the process holding a descriptor for socket ``inode``.

    Args:
        proc_root: Root of the process information filesystem
        inode: Socket inode from the socket table

    Returns:
        The first matching process, or None
    """
    target = f"socket:[{inode}]"
    denied = 0

    try:
        entries = os.listdir(proc_root)
    except OSError as e:
        logger.debug(f"Cannot list {proc_root}: {e}")
        return None

    for entry in entries:
        if not entry.isdigit():
            continue

        fd_dir = proc_root / entry / "fd"
        try:
            fds = os.listdir(fd_dir)
        except PermissionError:
            denied += 1
            continue
        except OSError:
            # Process went away or is not a process directory
            continue

        for fd in fds:
            try:
                link = os.readlink(fd_dir / fd)
            except OSError:
                continue

            if link == target:
                return ProcessOwner(pid=int(entry), name=_read_comm(proc_root / entry))

    if denied:
        logger.debug(
            f"Socket inode {inode} not found; {denied} process fd table(s) were not readable"
        )
    else:
        logger.debug(f"Socket inode {inode} not found in any process fd table")
    return None


def _read_comm(proc_dir: Path) -> str:
    try:
        return (proc_dir / "comm").read_text(encoding="utf-8", errors="replace").strip()
    except OSError:
        return UNKNOWN_PROCESS


class ProcessResolver(ABC):
    """Maps a port to the process listening on it."""

    supported = False

    @abstractmethod
    def resolve(self, port: int) -> ProcessOwner | None:
        """Return the owner of the listening socket on ``port``, or None."""


class UnsupportedResolver(ProcessResolver):
    """Resolver for platforms without a procfs socket table."""

    def resolve(self, port: int) -> ProcessOwner | None:
        return None


class ProcfsResolver(ProcessResolver):
    """Resolver backed by the Linux /proc filesystem."""

    supported = True

    def __init__(self, proc_root: Path = Path("/proc")) -> None:
        """Initialize resolver.

        Args:
            proc_root: Root of the process information filesystem
        """
        self._proc_root = Path(proc_root)

    @property
    def proc_root(self) -> Path:
        return self._proc_root

    def resolve(self, port: int) -> ProcessOwner | None:
        """Resolve the owner of the listening socket on ``port``.

        The IPv4 table is searched first, then the IPv6 table.

        Returns:
            ProcessOwner, or None when resolution is not possible
        """
        for table in _SOCKET_TABLES:
            inode = self._lookup_inode(self._proc_root / table, port)
            if inode is None:
                continue

            owner = find_owner_by_inode(self._proc_root, inode)
            if owner is not None:
                logger.debug(f"Port {port}: owned by pid {owner.pid} ({owner.name})")
                return owner

        return None

    def _lookup_inode(self, table_path: Path, port: int) -> str | None:
        try:
            with open(table_path, encoding="ascii", errors="replace") as f:
                return find_listening_inode(f, port)
        except OSError as e:
            logger.debug(f"Cannot read socket table {table_path}: {e}")
            return None


def get_default_resolver(proc_root: Path | None = None) -> ProcessResolver:
    """Pick the resolver for the running platform."""
    if sys.platform.startswith("linux"):
        return ProcfsResolver(proc_root or Path("/proc"))
    logger.debug(f"Process resolution is not supported on {sys.platform}")
    return UnsupportedResolver()
