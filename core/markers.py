"""Localized time-marker labels.

The pure `timeseries` package renders ISO-like markers. Pages shown to readers
use these formatters instead, so a monthly series reads `March 2010` in
English and `mars 2010` in Norwegian.
"""

from __future__ import annotations

from typing import Final

from django.utils import dateformat, translation

from timeseries.accuracy import Accuracy, AccuracyLevel
from timeseries.points import DataPoint

# Django date format strings (not strftime).
MARKER_PATTERNS: Final[dict[AccuracyLevel, str]] = {
    AccuracyLevel.second: "Y-m-d H:i:s",
    AccuracyLevel.minute: "Y-m-d H:i:00",
    AccuracyLevel.hour: "Y-m-d H:00:00",
    AccuracyLevel.day: "j M Y",
    AccuracyLevel.month: "F Y",
    AccuracyLevel.year: "Y",
}

_LANGUAGE_ALIASES: Final[dict[str, str]] = {"no": "nb"}


def django_language(language: str) -> str:
    """Map an API language code to the code Django ships translations for."""

    code = (language or "en").strip().lower()
    return _LANGUAGE_ALIASES.get(code, code)


class LocalizedMarkerFormatter:
    """Render time markers with month names in a given display language.

    Args:
        language: Display language code (`en`, `no`, `nb`, ...).
    """

    def __init__(self, language: str) -> None:
        self.language = django_language(language)

    def __call__(self, point: DataPoint, accuracy: Accuracy) -> str:
        if accuracy.is_literal or point.timestamp is None:
            return point.raw_timestamp
        with translation.override(self.language):
            return dateformat.format(point.timestamp, MARKER_PATTERNS[accuracy.level])

    def __repr__(self) -> str:
        return f"LocalizedMarkerFormatter(language={self.language!r})"
