"""Port query parsing."""

from __future__ import annotations

from pydantic import BaseModel

from portcheck.errors import InvalidPortError, InvalidRangeError

__all__ = ["MIN_PORT", "MAX_PORT", "PortQuery", "parse_port", "parse_port_query", "validate_range"]

MIN_PORT = 1
MAX_PORT = 65535


class PortQuery(BaseModel):
    """A single port or a closed port interval.

    A single port is stored as ``start == end``. ``is_range`` records the
    input form, so "22-22" is still scanned as a range.
    """

    start: int
    end: int
    is_range: bool = False  # input was written as <start>-<end>

    model_config = {"frozen": True}

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    def ports(self) -> range:
        """All ports covered by the query, ascending."""
        return range(self.start, self.end + 1)


def parse_port(text: str) -> int:
    """Parse one decimal port number.

    Raises:
        InvalidPortError: If ``text`` is not a decimal integer in 1-65535
    """
    value = text.strip()
    if not value.isdecimal():
        raise InvalidPortError(text)

    port = int(value)
    if port < MIN_PORT or port > MAX_PORT:
        raise InvalidPortError(text)
    return port


def validate_range(start: int, end: int) -> None:
    """Check interval bounds, raising InvalidRangeError on violation."""
    if not (MIN_PORT <= start <= MAX_PORT and MIN_PORT <= end <= MAX_PORT):
        raise InvalidRangeError(f"{start}-{end}", f"ports must be between {MIN_PORT} and {MAX_PORT}")
    if start > end:
        raise InvalidRangeError(f"{start}-{end}", "start port is greater than end port")


def parse_port_query(text: str) -> PortQuery:
    """Parse ``"<port>"`` or ``"<start>-<end>"`` into a PortQuery.

    Examples:
        parse_port_query("8080")       # PortQuery(start=8080, end=8080)
        parse_port_query("3000-3010")  # PortQuery(start=3000, end=3010)

    Raises:
        InvalidPortError: For a malformed or out-of-range single port
        InvalidRangeError: For a malformed range, out-of-range bounds or start > end
    """
    spec = text.strip()

    if "-" not in spec:
        port = parse_port(spec)
        return PortQuery(start=port, end=port)

    parts = spec.split("-")
    if len(parts) != 2:
        raise InvalidRangeError(text, "expected <start>-<end>")

    start_s, end_s = parts
    if not start_s.strip().isdecimal() or not end_s.strip().isdecimal():
        raise InvalidRangeError(text, "bounds must be decimal numbers")

    start, end = int(start_s), int(end_s)
    validate_range(start, end)
    return PortQuery(start=start, end=end, is_range=True)
