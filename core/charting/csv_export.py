"""CSV export of a time-series collection."""

from __future__ import annotations

import csv
import io

from timeseries.collection import TimeSeriesCollection
from timeseries.points import format_number


def collection_to_csv(collection: TimeSeriesCollection, *, delimiter: str = ";") -> str:
    """Return the collection as CSV: one row per series, one column per marker.

    Args:
        collection: Aligned series to export.
        delimiter: Field delimiter.

    Returns:
        CSV text with a `Title;Unit;<markers...>` header row. Values are
        locale-invariant; absent values are empty fields.
    """

    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter, lineterminator="\n")
    writer.writerow(["Title", "Unit", *collection.time_markers])
    for index, member in enumerate(collection.series):
        writer.writerow(
            [
                member.label,
                member.unit.long_form or member.unit.short_form,
                *(format_number(value) for value in collection.values_for_series(index)),
            ]
        )
    return output.getvalue()
