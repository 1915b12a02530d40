from __future__ import annotations

import logging
import time
from typing import Any, Dict, List

import httpx
from pydantic import ValidationError

from .metrics import CLIENT_ERRORS, CLIENT_LATENCY_MS
from .settings import Settings, settings as default_settings
from .types import (
    AvailabilityOffer,
    Failure,
    FailureKind,
    SearchCandidate,
    ServiceCount,
    TrendingItem,
)

logger = logging.getLogger(__name__)

# httpx.InvalidURL and httpx.StreamError are not HTTPError subclasses
_CALL_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, ValueError, ValidationError, KeyError, TypeError)


def availability_path(content_id: int | str, content_type: str) -> str:
    endpoint = "movies" if content_type == "movie" else "shows"
    return f"/v1/{endpoint}/{content_id}/streaming"


def flatten_providers(payload: Dict[str, Any]) -> List[AvailabilityOffer]:
    """Turn `{providers: {stream_type: [offer, ...]}}` into one list, stamping each
    offer with the stream type it was listed under. Keeps the payload's order."""
    providers = payload.get("providers") or {}
    if not isinstance(providers, dict):
        raise ValueError("providers is not a mapping")
    out: List[AvailabilityOffer] = []
    for stream_type, services in providers.items():
        for service in services or []:
            out.append(AvailabilityOffer.model_validate({**service, "stream_type": stream_type}))
    return out


class AvailabilityClient:
    """Single-attempt client for the StreamGuide catalog API.

    Every public call returns data or a `Failure`; nothing is raised to the caller.
    """

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings or default_settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=httpx.Timeout(self.settings.request_timeout_s),
            transport=self._transport,
        )

    async def _get_json(self, operation: str, path: str, params: Dict[str, Any] | None = None) -> Any:
        started = time.perf_counter()
        try:
            async with self._client() as c:
                r = await c.get(path, params=params)
                r.raise_for_status()
                return r.json()
        finally:
            CLIENT_LATENCY_MS.labels(operation=operation).observe((time.perf_counter() - started) * 1000.0)

    def _fail(self, operation: str, exc: Exception) -> Failure:
        CLIENT_ERRORS.labels(operation=operation).inc()
        logger.warning("streamguide %s failed: %s", operation, exc)
        return Failure(FailureKind.NETWORK, f"{operation}: {exc}")

    async def search(self, query: str) -> List[SearchCandidate] | Failure:
        if not query:
            return Failure(FailureKind.EMPTY, "empty query")
        try:
            data = await self._get_json("search", "/v1/search", params={"q": query})
            return [SearchCandidate.model_validate(r) for r in data["results"]]
        except _CALL_ERRORS as e:
            return self._fail("search", e)

    async def fetch_availability(self, content_id: int | str, content_type: str) -> List[AvailabilityOffer] | Failure:
        try:
            data = await self._get_json("availability", availability_path(content_id, content_type))
            if not isinstance(data, dict):
                raise ValueError("availability payload is not an object")
            return flatten_providers(data)
        except _CALL_ERRORS as e:
            return self._fail("availability", e)

    async def trending(self, limit: int | None = None, service: str | None = None) -> List[TrendingItem] | Failure:
        params: Dict[str, Any] = {"limit": limit or self.settings.trending_limit}
        if service:
            params["service"] = service
        try:
            data = await self._get_json("trending", "/v1/trending", params=params)
            return [TrendingItem.model_validate(r) for r in data["results"]]
        except _CALL_ERRORS as e:
            return self._fail("trending", e)

    async def trending_services(self, country: str | None = None) -> List[ServiceCount] | Failure:
        params = {"country": country or self.settings.trending_country}
        try:
            data = await self._get_json("trending_services", "/v1/trending/services", params=params)
            return [ServiceCount.model_validate(s) for s in data["services"]]
        except _CALL_ERRORS as e:
            return self._fail("trending_services", e)
