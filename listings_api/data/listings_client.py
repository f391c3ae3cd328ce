import asyncio
import logging
import time
from typing import List

import httpx
from pydantic import TypeAdapter, ValidationError

from .base import ListingsSource
from ..core.config import Settings
from ..core.errors import UpstreamDecodeFailed, UpstreamFetchFailed
from ..core.metrics import UPSTREAM_FETCHES, UPSTREAM_LATENCY
from ..schemas import Listing

logger = logging.getLogger(__name__)

_catalog = TypeAdapter(List[Listing])

class HttpListingsSource(ListingsSource):
    """
    Fetches the whole listing catalog from a single GET endpoint.
    The catalog is large and unpaginated, hence the generous timeout.
    """
    def __init__(self, url: str, timeout: float = 100, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def fetch_all(self) -> List[Listing]:
        logger.info("Requesting listing catalog", extra={"fields": {"url": self.url}})
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.get(self.url)
                r.raise_for_status()
                body = r.content
        except httpx.HTTPError as exc:
            UPSTREAM_FETCHES.labels(outcome="fetch_error").inc()
            logger.error("Listing catalog request failed", extra={"fields": {"url": self.url, "error": str(exc)}})
            raise UpstreamFetchFailed(str(exc) or type(exc).__name__) from exc
        finally:
            UPSTREAM_LATENCY.observe(time.perf_counter() - start)

        try:
            listings = await asyncio.to_thread(_catalog.validate_json, body)
        except ValidationError as exc:
            UPSTREAM_FETCHES.labels(outcome="decode_error").inc()
            logger.error("Listing catalog could not be decoded", extra={"fields": {"url": self.url, "errors": exc.error_count()}})
            raise UpstreamDecodeFailed(str(exc)) from exc

        UPSTREAM_FETCHES.labels(outcome="ok").inc()
        logger.info("Listing catalog received", extra={"fields": {"count": len(listings)}})
        return listings

def listings_source(settings: Settings) -> ListingsSource:
    """
    Factory for the configured upstream catalog.
    """
    return HttpListingsSource(settings.ZAP_PROPERTIES_ENDPOINT or "", timeout=settings.UPSTREAM_TIMEOUT_SECONDS)
