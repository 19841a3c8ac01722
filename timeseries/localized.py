"""Pick language-specific strings out of API records.

API records carry translations as lists of small objects, for example
`[{"title": "Ice extent", "lang": "en"}, {"title": "Isutbredelse", "lang": "nb"}]`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Final

DEFAULT_LANGUAGE: Final[str] = "en"

_NORWEGIAN: Final[frozenset[str]] = frozenset({"no", "nb"})


def language_matches(candidate: str | None, language: str) -> bool:
    """Return True when `candidate` satisfies the requested language.

    Norwegian is published as both `no` and `nb`; either satisfies the other.
    """

    if not candidate:
        return False
    candidate = candidate.strip().lower()
    language = language.strip().lower()
    if candidate == language:
        return True
    return candidate in _NORWEGIAN and language in _NORWEGIAN


def localized_string(
    entries: Iterable[Any],
    key: str,
    language: str,
    *,
    lang_key: str = "lang",
) -> str | None:
    """Return the value of `key` for `language` from a list of translations.

    Args:
        entries: Translation objects; non-mapping entries are ignored.
        key: Name of the translated field (e.g. `title`, `label`, `unit`).
        language: Requested language code.
        lang_key: Name of the language field in each entry.

    Returns:
        The requested translation, else the English one, else the first
        non-empty value, else None.
    """

    candidates: list[tuple[str | None, str]] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        value = entry.get(key)
        if not isinstance(value, str) or not value.strip():
            continue
        lang = entry.get(lang_key)
        candidates.append((lang if isinstance(lang, str) else None, value.strip()))

    for wanted in (language, DEFAULT_LANGUAGE):
        for lang, value in candidates:
            if language_matches(lang, wanted):
                return value
    if candidates:
        return candidates[0][1]
    return None
