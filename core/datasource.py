"""Access to the MOSJ data API.

Views and commands depend on the small `ParameterSource` protocol so tests
can swap in canned records without touching the network.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote, urljoin

from django.conf import settings

logger = logging.getLogger(__name__)

USER_AGENT = "mosjCharts/0.1 (+https://mosj.no)"


class DataSourceError(RuntimeError):
    """Raised when the data API cannot be reached or returns unusable data."""


class ParameterSource(Protocol):
    """Source of MOSJ parameter and time-series records."""

    def fetch_parameter(self, parameter_id: str) -> dict[str, Any]:
        """Return the raw parameter record for `parameter_id`."""

    def fetch_time_series(self, url: str) -> dict[str, Any]:
        """Return the raw time-series record at `url`."""


@dataclass(frozen=True, slots=True)
class ApiDataSource:
    """ParameterSource backed by the public MOSJ JSON API.

    Args:
        base_url: API root; parameters live at `<base_url>parameter/<id>`.
        timeout_seconds: Socket timeout for each request.
    """

    base_url: str
    timeout_seconds: int = 10

    @classmethod
    def from_settings(cls) -> ApiDataSource:
        return cls(
            base_url=settings.MOSJ_API_BASE_URL,
            timeout_seconds=settings.MOSJ_API_TIMEOUT_SECONDS,
        )

    def _resolve(self, path_or_url: str) -> str:
        root = self.base_url if self.base_url.endswith("/") else f"{self.base_url}/"
        return urljoin(root, path_or_url)

    def fetch_parameter(self, parameter_id: str) -> dict[str, Any]:
        return self._get_json(self._resolve(f"parameter/{quote(parameter_id, safe='')}"))

    def fetch_time_series(self, url: str) -> dict[str, Any]:
        return self._get_json(self._resolve(url))

    def _get_json(self, url: str) -> dict[str, Any]:
        """Fetch `url` and decode it as a JSON object.

        Raises:
            DataSourceError: On network failures, non-JSON bodies or non-object JSON.
        """

        logger.debug("Fetching %s", url)
        request = urllib.request.Request(url, headers={"Accept": "application/json", "User-Agent": USER_AGENT})
        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                body = response.read()
        except (urllib.error.URLError, TimeoutError, OSError) as exc:
            raise DataSourceError(f"Failed to fetch {url}: {exc}") from exc
        try:
            payload = json.loads(body.decode("utf-8"))
        except ValueError as exc:
            raise DataSourceError(f"Response from {url} is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise DataSourceError(f"Response from {url} is not a JSON object.")
        return payload
