import logging
from typing import Iterable, Mapping

from ..core.cache import BucketCache, ChannelBucket
from ..core.utils import Clock, utc_now
from ..schemas import Listing
from .eligibility import CHANNEL_RULES, ChannelRule, apply_rule
from .geofence import GeoFence

logger = logging.getLogger(__name__)

class CachePopulator:
    """
    Turns one upstream snapshot into every channel's bucket.
    All buckets are built and cached together, so a request for the sibling
    channel is served from cache without another upstream fetch.
    """
    def __init__(
        self,
        cache: BucketCache,
        fence: GeoFence,
        clock: Clock = utc_now,
        rules: Mapping[str, ChannelRule] = CHANNEL_RULES,
    ):
        self.cache = cache
        self.fence = fence
        self.clock = clock
        self.rules = rules

    def split(self, listings: Iterable[Listing]) -> dict[str, ChannelBucket]:
        """Single pass over the catalog; no cache writes."""
        now = self.clock()
        buckets: dict[str, list[Listing]] = {channel: [] for channel in self.rules}
        for listing in listings:
            for channel, rule in self.rules.items():
                accepted = apply_rule(rule, listing, self.fence, now)
                if accepted is not None:
                    buckets[channel].append(accepted)
        return {channel: tuple(bucket) for channel, bucket in buckets.items()}

    def populate(self, listings: Iterable[Listing]) -> dict[str, ChannelBucket]:
        buckets = self.split(listings)
        self.cache.set_many(buckets)
        logger.info(
            "Channel buckets cached",
            extra={"fields": {
                "ttl_seconds": self.cache.ttl,
                **{f"{channel}_count": len(bucket) for channel, bucket in buckets.items()},
            }},
        )
        return buckets
