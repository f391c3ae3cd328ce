import asyncio
import logging
from typing import Iterable, Optional

from ..core.cache import BucketCache, ChannelBucket
from ..core.errors import InvalidChannel
from ..core.metrics import CACHE_LOOKUPS
from ..data.base import ListingsSource
from ..schemas import PageResult
from .paginator import paginate
from .populator import CachePopulator

logger = logging.getLogger(__name__)

class PropertiesService:
    """
    Orchestrates:
      channel → cache lookup → (miss) upstream fetch + populate → paginate
    Concurrent misses share a single upstream fetch.
    """
    def __init__(
        self,
        source: ListingsSource,
        cache: BucketCache,
        populator: CachePopulator,
        channels: Iterable[str] = ("zap", "vivareal"),
    ):
        self.source = source
        self.cache = cache
        self.populator = populator
        self.channels = frozenset(channels)
        self._inflight: Optional[asyncio.Task] = None

    def validate_channel(self, channel: Optional[str]) -> str:
        if channel not in self.channels:
            logger.error("Source not accepted", extra={"fields": {"source": channel}})
            raise InvalidChannel()
        return channel

    async def bucket_for(self, channel: str) -> ChannelBucket:
        bucket = self.cache.get(channel)
        if bucket is not None:
            CACHE_LOOKUPS.labels(source=channel, result="hit").inc()
            logger.info("Serving cached bucket", extra={"fields": {"source": channel}})
            return bucket

        CACHE_LOOKUPS.labels(source=channel, result="miss").inc()
        logger.info("No cached bucket, populating", extra={"fields": {"source": channel}})
        buckets = await self._populate_once()
        return buckets[channel]

    async def _populate_once(self) -> dict[str, ChannelBucket]:
        """
        Joins the population already running, or starts one.
        Waiters are shielded so a disconnecting caller does not cancel the
        fetch the others are waiting on.
        """
        task = self._inflight
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_populate())
            self._inflight = task
            task.add_done_callback(self._clear_inflight)
        else:
            logger.info("Joining in-flight population")
        return await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None
        # Retrieve the outcome so an error nobody awaited is not reported as unhandled
        if not task.cancelled():
            task.exception()

    async def _fetch_and_populate(self) -> dict[str, ChannelBucket]:
        listings = await self.source.fetch_all()
        # Filtering a full catalog is CPU bound; keep it off the event loop
        return await asyncio.to_thread(self.populator.populate, listings)

    async def get_page(self, channel: Optional[str], offset: int, limit: int) -> PageResult:
        channel = self.validate_channel(channel)
        bucket = await self.bucket_for(channel)
        logger.info("Paginating the response", extra={"fields": {"source": channel, "offset": offset, "limit": limit}})
        return paginate(bucket, offset, limit)
