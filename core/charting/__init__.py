"""Chart rendering for aligned time-series collections.

This package turns a `timeseries.TimeSeriesCollection` into presentation
artifacts: Highcharts options (`highcharts`), HTML tables (`tables`) and CSV
(`csv_export`), all steered by sparse editor overrides (`overrides`).
"""
