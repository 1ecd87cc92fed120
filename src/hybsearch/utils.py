"""Small formatting helpers shared by the CLI and the message dispatcher."""

import re
from typing import Optional, Union

_UNITS = (
    ("d", 86_400_000),
    ("h", 3_600_000),
    ("m", 60_000),
)


def format_duration(milliseconds: Optional[Union[int, float]]) -> str:
    """Render a millisecond count as a short human duration.

    Examples: ``500ms``, ``1.5s``, ``1m 5s``, ``1d 1h 1m 1s``.
    """
    if milliseconds is None:
        return "an unknown time"

    remaining = max(int(milliseconds), 0)
    if remaining < 1000:
        return f"{remaining}ms"

    parts = []
    for suffix, size in _UNITS:
        count, remaining = divmod(remaining, size)
        if count:
            parts.append(f"{count}{suffix}")

    # Seconds keep one decimal, truncated
    tenths = remaining // 100
    if tenths:
        whole, fraction = divmod(tenths, 10)
        parts.append(f"{whole}s" if not fraction else f"{whole}.{fraction}s")

    return " ".join(parts)


def sanitize_error_message(error_msg: Union[str, bytes]) -> str:
    """Sanitize error message to prevent Rich markup errors with binary data."""
    if isinstance(error_msg, bytes):
        error_msg = error_msg.decode("utf-8", errors="replace")

    # Replace control characters that could confuse the terminal
    sanitized = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "?", str(error_msg))

    # Escape Rich markup characters
    return sanitized.replace("[", "\\[")
