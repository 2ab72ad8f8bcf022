"""HTTP client for the upstream emergency reports API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .config import DEFAULT_API_URL, RollupConfig
from .models import FetchResult

logger = logging.getLogger(__name__)


def unwrap_reports_payload(payload: Any) -> FetchResult:
    """Accept either ``{"success": true, "data": [...]}`` or a bare list."""
    if isinstance(payload, list):
        return FetchResult(success=True, data=payload)
    if not isinstance(payload, dict):
        return FetchResult(success=False, error=f"unexpected payload type: {type(payload).__name__}")
    if not payload.get("success"):
        message = payload.get("message") or payload.get("error") or "upstream reported failure"
        return FetchResult(success=False, error=str(message))
    data = payload.get("data")
    if not isinstance(data, list):
        return FetchResult(success=False, error="upstream payload has no report list")
    return FetchResult(success=True, data=data)


@dataclass
class EmergencyApiClient:
    base_url: str = DEFAULT_API_URL
    timeout_seconds: int = 30

    @classmethod
    def from_config(cls, config: RollupConfig) -> "EmergencyApiClient":
        return cls(base_url=config.api_url, timeout_seconds=config.timeout_seconds)

    def _build_client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout_seconds)

    def fetch(self) -> FetchResult:
        with self._build_client() as client:
            try:
                response = client.get(self.base_url, headers={"Accept": "application/json"})
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.warning("Error fetching emergencies from %s: %s", self.base_url, exc)
                return FetchResult(success=False, error=str(exc))

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Emergency API returned non-JSON body: %s", exc)
            return FetchResult(success=False, error=f"invalid JSON: {exc}")

        result = unwrap_reports_payload(payload)
        if result.success:
            logger.info("Fetched %d emergency reports", len(result.data))
        else:
            logger.warning("Emergency API fetch failed: %s", result.error)
        return result
