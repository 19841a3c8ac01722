"""Timestamp accuracy levels and marker label rendering.

The MOSJ API describes the precision of a series with a strftime-like token
(`%Y`, `%Y-%m`, `%Y-%m-%dT%H:%M:%SZ`, ...). The accuracy decides how each
point's timestamp is rendered as a time marker, and therefore which points of
different series line up on the same x-axis category.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Final

from .points import DataPoint


class AccuracyLevel(Enum):
    """Supported timestamp precisions, most precise first."""

    second = "second"
    minute = "minute"
    hour = "hour"
    day = "day"
    month = "month"
    year = "year"
    literal = "literal"


@dataclass(frozen=True, slots=True)
class Accuracy:
    """Accuracy of a series' timestamps.

    Args:
        level: Precision level.
        literal: Verbatim format token when `level` is `literal`.
    """

    level: AccuracyLevel
    literal: str | None = None

    @property
    def is_literal(self) -> bool:
        return self.level is AccuracyLevel.literal

    @property
    def label(self) -> str:
        """Return a label that compares equal only for identical accuracies."""

        if self.is_literal:
            return f"literal:{self.literal or ''}"
        return self.level.value


SECOND: Final[Accuracy] = Accuracy(AccuracyLevel.second)

_TOKEN_LEVELS: Final[tuple[tuple[str, AccuracyLevel], ...]] = (
    ("%S", AccuracyLevel.second),
    ("%M", AccuracyLevel.minute),
    ("%H", AccuracyLevel.hour),
    ("%d", AccuracyLevel.day),
    ("%m", AccuracyLevel.month),
    ("%Y", AccuracyLevel.year),
)

_DEFAULT_PATTERNS: Final[dict[AccuracyLevel, str]] = {
    AccuracyLevel.second: "%Y-%m-%d %H:%M:%S",
    AccuracyLevel.minute: "%Y-%m-%d %H:%M:00",
    AccuracyLevel.hour: "%Y-%m-%d %H:00:00",
    AccuracyLevel.day: "%Y-%m-%d",
    AccuracyLevel.month: "%Y-%m",
    AccuracyLevel.year: "%Y",
}

# Timestamp layouts the API emits, keyed by string length.
_API_DATETIME_FORMATS: Final[dict[int, str]] = {
    4: "%Y",
    7: "%Y-%m",
    10: "%Y-%m-%d",
    20: "%Y-%m-%dT%H:%M:%SZ",
}

MarkerFormatter = Callable[[DataPoint, Accuracy], str]


def parse_accuracy(token: str | None) -> Accuracy:
    """Map an API datetime format token to an Accuracy.

    The most precise directive present wins, so `%Y-%m` is month accuracy and
    `%Y-%m-%dT%H:%M:%SZ` is second accuracy.

    Args:
        token: The `datetime_format` value from the API, or None.

    Returns:
        The matching Accuracy; `second` when the token is missing, `literal`
        when it contains no recognized directive.
    """

    if token is None or not token.strip():
        return SECOND
    for directive, level in _TOKEN_LEVELS:
        if directive in token:
            return Accuracy(level)
    return Accuracy(AccuracyLevel.literal, literal=token)


def parse_api_datetime(raw: str) -> datetime:
    """Parse an API timestamp (`YYYY`, `YYYY-MM`, `YYYY-MM-DD` or full UTC).

    Args:
        raw: Timestamp string from a data point.

    Returns:
        A timezone-aware datetime in UTC.

    Raises:
        ValueError: When the string matches none of the supported layouts.
    """

    text = raw.strip()
    pattern = _API_DATETIME_FORMATS.get(len(text))
    if pattern is None:
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValueError(f"Unsupported timestamp {raw!r}.") from exc
    else:
        parsed = datetime.strptime(text, pattern)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def default_marker_label(point: DataPoint, accuracy: Accuracy) -> str:
    """Render a point's time marker without any locale dependency.

    Args:
        point: The data point to label.
        accuracy: Accuracy of the point's series.

    Returns:
        An ISO-like label truncated to the accuracy (`2010`, `2010-03`,
        `2010-03-05 14:00:00`), or the raw timestamp for literal accuracy.
    """

    if accuracy.is_literal or point.timestamp is None:
        return point.raw_timestamp
    return f"{point.timestamp:{_DEFAULT_PATTERNS[accuracy.level]}}"
