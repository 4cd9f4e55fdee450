"""Free-text place lookup against an OpenStreetMap Nominatim compatible endpoint."""
from __future__ import annotations

from typing import List

import requests
from flask import current_app

from models import SearchResult


class NominatimGeocoder:
    """Thin client for ``/search?format=json&q=...``.

    Lookup failures never propagate: a network error, a non-JSON body or an
    unexpected payload shape is logged and reported as zero results.
    """

    def __init__(self, app=None) -> None:
        self.url = "https://nominatim.openstreetmap.org/search"
        self.timeout = 10.0
        self.user_agent = "complaint-desk/1.0"
        self.limit = 0
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.url = app.config.get("GEOCODER_URL", self.url)
        self.timeout = float(app.config.get("GEOCODER_TIMEOUT", self.timeout))
        self.user_agent = app.config.get("GEOCODER_USER_AGENT", self.user_agent)
        self.limit = int(app.config.get("GEOCODER_RESULT_LIMIT", 0) or 0)
        app.extensions["geocoder"] = self

    def _params(self, query: str) -> dict:
        params = {"format": "json", "q": query}
        if self.limit > 0:
            params["limit"] = self.limit
        return params

    def search(self, query: str) -> List[SearchResult]:
        query = (query or "").strip()
        if not query:
            return []

        try:
            response = requests.get(
                self.url,
                params=self._params(query),
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                timeout=self.timeout,
            )
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            current_app.logger.warning(
                "geocoder_failed",
                extra={"query": query, "error": str(exc), "error_type": type(exc).__name__},
            )
            return []

        if not isinstance(payload, list):
            current_app.logger.warning(
                "geocoder_unexpected_payload",
                extra={"query": query, "status": response.status_code, "payload_type": type(payload).__name__},
            )
            return []

        results: List[SearchResult] = []
        for item in payload:
            result = SearchResult.from_payload(item)
            if result is None:
                current_app.logger.debug("geocoder_result_skipped", extra={"query": query})
                continue
            results.append(result)

        current_app.logger.info(
            "geocoder_search",
            extra={"query": query, "status": response.status_code, "count": len(results)},
        )
        return results
