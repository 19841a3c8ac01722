"""HTML data tables for time-series collections.

Tables are the accessible companion of each chart: one row per time marker and
one column per series (`render_data_table`), or the transposed parameter view
with one row per series (`render_parameter_table`). Values use the display
language's decimal separator, unlike the chart JSON which is locale-invariant.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Final

from django.utils import translation
from django.utils.formats import number_format
from django.utils.html import format_html, format_html_join
from django.utils.safestring import SafeString, mark_safe

from core.markers import django_language
from timeseries.collection import TimeSeriesCollection
from timeseries.points import format_number

logger = logging.getLogger(__name__)

ACCURACY_WARNING: Final[str] = (
    "<!-- Warning: the time series in this table have different timestamp accuracies; "
    "rows may not line up meaningfully. -->\n"
)
TABLE_ERROR_COMMENT: Final[str] = "<!-- Error creating table. -->\n"
TIME_MARKER_CLASS: Final[str] = "hs-time-marker"


def localized_number(value: float | None, language: str) -> str:
    """Format `value` for display in `language` (e.g. `0,5` in Norwegian).

    Args:
        value: Number to format, or None.
        language: Display language code.

    Returns:
        The localized number without grouping, or an empty string for None.
    """

    if value is None:
        return ""
    with translation.override(django_language(language)):
        return number_format(Decimal(format_number(value)), use_l10n=True)


def _table_open(collection: TimeSeriesCollection, *, table_id: str, css_class: str) -> SafeString:
    attributes = format_html_join(
        "",
        ' {}="{}"',
        ((name, value) for name, value in (("id", table_id), ("class", css_class)) if value),
    )
    return format_html("<table{}>\n<caption>{}</caption>\n", attributes, collection.title)


def _data_table_body(collection: TimeSeriesCollection, *, language: str) -> SafeString:
    header = format_html_join("", '<th scope="col">{}</th>', ((member.label,) for member in collection.series))
    rows: list[SafeString] = []
    for marker in collection.time_markers:
        cells = format_html_join(
            "",
            "<td>{}</td>",
            (
                (localized_number(point.value, language) if point is not None else "",)
                for point in collection.data_points_for_marker(marker)
            ),
        )
        rows.append(
            format_html(
                '<tr><th scope="row"><span class="{}">{}</span></th>{}</tr>\n',
                TIME_MARKER_CLASS,
                marker,
                cells,
            )
        )
    return format_html(
        '<thead>\n<tr><th scope="col">&nbsp;</th>{}</tr>\n</thead>\n<tbody>\n{}</tbody>\n',
        header,
        mark_safe("".join(rows)),
    )


def _parameter_table_body(collection: TimeSeriesCollection, *, language: str) -> SafeString:
    header = format_html_join(
        "",
        '<th scope="col"><span class="{}">{}</span></th>',
        ((TIME_MARKER_CLASS, marker) for marker in collection.time_markers),
    )
    rows: list[SafeString] = []
    for index, member in enumerate(collection.series):
        cells = format_html_join(
            "",
            "<td>{}</td>",
            ((localized_number(value, language),) for value in collection.values_for_series(index)),
        )
        rows.append(
            format_html(
                '<tr><th scope="row">{}</th><td>{}</td>{}</tr>\n',
                member.label,
                member.unit.long_form or member.unit.short_form,
                cells,
            )
        )
    return format_html(
        '<thead>\n<tr><th scope="col">&nbsp;</th><th scope="col">{}</th>{}</tr>\n</thead>\n<tbody>\n{}</tbody>\n',
        translation.gettext("Unit"),
        header,
        mark_safe("".join(rows)),
    )


def _render(
    collection: TimeSeriesCollection,
    *,
    body_builder: Callable[..., SafeString],
    table_id: str,
    css_class: str,
    language: str | None,
) -> str:
    language = language or collection.language
    warning = "" if collection.all_accuracy_compatible() else ACCURACY_WARNING
    body: SafeString = mark_safe("")
    if collection.series:
        try:
            with translation.override(django_language(language)):
                body = body_builder(collection, language=language)
        except Exception:
            logger.exception("Failed to render table rows for %r.", collection.title)
            body = mark_safe(TABLE_ERROR_COMMENT)
    table = _table_open(collection, table_id=table_id, css_class=css_class) + body + mark_safe("</table>\n")
    return warning + str(table)


def render_data_table(
    collection: TimeSeriesCollection,
    *,
    table_id: str = "",
    css_class: str = "",
    language: str | None = None,
) -> str:
    """Render the marker-by-series HTML table for a collection.

    Args:
        collection: Aligned series to tabulate.
        table_id: Optional `id` attribute of the table.
        css_class: Optional `class` attribute of the table.
        language: Display language for numbers; defaults to the collection's.

    Returns:
        HTML markup. An empty collection renders the caption only; mixed
        timestamp accuracies prepend an HTML comment warning.
    """

    return _render(
        collection,
        body_builder=_data_table_body,
        table_id=table_id,
        css_class=css_class,
        language=language,
    )


def render_parameter_table(
    collection: TimeSeriesCollection,
    *,
    table_id: str = "",
    css_class: str = "",
    language: str | None = None,
) -> str:
    """Render the series-by-marker HTML table (one row per series, with its unit)."""

    return _render(
        collection,
        body_builder=_parameter_table_body,
        table_id=table_id,
        css_class=css_class,
        language=language,
    )
