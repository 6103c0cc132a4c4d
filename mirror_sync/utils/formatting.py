"""
Helper functions for turning sizes, durations and file listings into text for
log lines and summary panels.
"""

from collections.abc import Iterable

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(num_bytes: int) -> str:
    """Formats a byte count, e.g. '512 B' or '3.4 MB'."""
    size = float(max(num_bytes, 0))
    for unit in _SIZE_UNITS[:-1]:
        if size < 1024:
            break
        size /= 1024
    else:
        unit = _SIZE_UNITS[-1]
    return f"{int(size)} B" if unit == "B" else f"{size:.1f} {unit}"


def format_duration(seconds: float) -> str:
    """
    Formats an elapsed time. Cycles usually take well under a minute, so short
    durations keep two decimals ('0.42s') while long ones read '1h 5m 3s'.
    """
    seconds = max(seconds, 0)
    if seconds < 60:
        return f"{seconds:.2f}s" if seconds % 1 else f"{int(seconds)}s"
    minutes, secs = divmod(round(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    units = ((hours, "h"), (minutes, "m"), (secs, "s"))
    return " ".join(f"{value}{unit}" for value, unit in units if value) or "0s"


def format_file_list(names: Iterable[str], indent: str = "    ") -> str:
    """Formats file names as an indented, sorted, one-per-line listing."""
    ordered = sorted(names)
    if not ordered:
        return f"{indent}(none)"
    return "\n".join(f"{indent}{name}" for name in ordered)
