"""Formatting helpers shared by the access log and the problem envelopes."""

_SIZE_UNITS = ("B", "kB", "MB", "GB", "TB")


def byte_size_to_friendly_string(length: int) -> str:
    """
    Render a byte count with two decimals and a binary-scaled unit.

    Examples:
        1023     → "1023.00 B"
        1024     → "1.00 kB"
        1536     → "1.50 kB"
        1048576  → "1.00 MB"
    """
    value = float(length)
    unit = 0

    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1

    return f"{value:.2f} {_SIZE_UNITS[unit]}"


def format_duration(seconds: float) -> str:
    """
    Render an elapsed time compactly for log lines.

    Examples:
        0       → "0s"
        0.0125  → "12.5ms"
        1.25    → "1.25s"
    """
    if seconds <= 0:
        return "0s"
    if seconds < 1:
        return _trim(f"{seconds * 1000:.3f}") + "ms"
    return _trim(f"{seconds:.3f}") + "s"


def _trim(number: str) -> str:
    return number.rstrip("0").rstrip(".")
