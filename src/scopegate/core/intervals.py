"""Histogram interval selection.

Picks a fixed histogram interval from a ladder of human-legible widths, trading
exact bucket counts for boundaries that read well on a time axis.
"""

from __future__ import annotations

from datetime import UTC, datetime

_SECOND = 1000
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR

# (label, width in milliseconds), ascending
INTERVAL_LADDER: tuple[tuple[str, int], ...] = (
    ("10ms", 10),
    ("100ms", 100),
    ("1s", _SECOND),
    ("5s", 5 * _SECOND),
    ("15s", 15 * _SECOND),
    ("30s", 30 * _SECOND),
    ("1m", _MINUTE),
    ("5m", 5 * _MINUTE),
    ("15m", 15 * _MINUTE),
    ("30m", 30 * _MINUTE),
    ("1h", _HOUR),
    ("3h", 3 * _HOUR),
    ("6h", 6 * _HOUR),
    ("12h", 12 * _HOUR),
    ("1d", _DAY),
    ("7d", 7 * _DAY),
    ("30d", 30 * _DAY),
)

DEFAULT_TARGET_BUCKETS = 50


def to_epoch_millis(value: int | float | str | datetime) -> float:
    """Convert a time bound to epoch milliseconds.

    Numbers are taken as epoch milliseconds. Strings may be numeric or
    ISO-8601 (a trailing ``Z`` is accepted); naive datetimes are read as UTC.

    Raises:
        ValueError: If the value is not an absolute instant (e.g. ``now-15m``).
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a time value: {value!r}")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return float(text)
        except ValueError:
            pass
        value = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.timestamp() * 1000
    raise ValueError(f"Not a time value: {value!r}")


def choose_interval(
    start: int | float | str | datetime,
    end: int | float | str | datetime,
    target_buckets: int = DEFAULT_TARGET_BUCKETS,
) -> str:
    """Return the smallest ladder interval that yields at most ``target_buckets``.

    Args:
        start: Lower bound of the time range.
        end: Upper bound of the time range.
        target_buckets: Desired number of buckets.

    Returns:
        An interval label such as ``"5s"`` or ``"1h"``. Empty or inverted
        ranges give ``"10ms"``; ranges too wide for the ladder give ``"30d"``.

    Raises:
        ValueError: If a bound is not an absolute instant or
            ``target_buckets`` is not positive.
    """
    if target_buckets <= 0:
        raise ValueError(f"target_buckets must be positive, got {target_buckets}")

    span = max(0.0, to_epoch_millis(end) - to_epoch_millis(start))
    ideal = span / target_buckets

    for label, width in INTERVAL_LADDER:
        if width >= ideal:
            return label
    return INTERVAL_LADDER[-1][0]
