"""Compact duration strings ("10m30s", "1h30m") for user-supplied intervals."""

import logging
import re
from datetime import timedelta

logger = logging.getLogger(__name__)

UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600}

# Everything up to the next unit marker is the segment's magnitude
_SEGMENT_RE = re.compile(r"([^smh]*)([smh])")


class DurationParseError(ValueError):
    """Base for compact duration parse failures."""


class InvalidNumber(DurationParseError):
    """A segment's magnitude is not a non-negative integer."""


class DurationNotFound(DurationParseError):
    """No unit-tagged segment was present."""


def parse_duration(text: str) -> timedelta:
    """Parse a compact duration such as "1h30m10s".

    Segments may appear in any order and repeat; they are summed.
    Trailing text without a unit marker is ignored.
    """
    cleaned = "".join(text.lower().split())
    total = 0
    found = 0
    for number, unit in _SEGMENT_RE.findall(cleaned):
        found += 1
        if not (number.isascii() and number.isdigit()):
            raise InvalidNumber(f"Invalid number {number!r} in duration {text!r}")
        total += int(number) * UNIT_SECONDS[unit]

    if found == 0:
        raise DurationNotFound(f"No duration found in {text!r}")
    try:
        return timedelta(seconds=total)
    except OverflowError as e:
        raise InvalidNumber(f"Duration {text!r} is out of range") from e


def format_duration(duration: timedelta) -> str:
    """Render as "<minutes>m<seconds>s". Hours are folded into minutes."""
    minutes, seconds = divmod(int(duration.total_seconds()), 60)
    return f"{minutes}m{seconds}s"


def resolve_duration(text: str | None, default: timedelta) -> timedelta:
    """Parse text, falling back to default when absent or invalid."""
    if text is None:
        return default
    try:
        return parse_duration(text)
    except DurationParseError as e:
        logger.warning(
            "Ignoring duration %r (%s), using default %s",
            text, e, format_duration(default),
        )
        return default
