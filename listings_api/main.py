import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Routers
from .routers.properties import router as properties_router

# Core modules
from .core.cache import BucketCache
from .core.config import Settings, settings as default_settings
from .core.errors import ConfigError, PropertiesError, properties_error_handler
from .core.logging import configure_logging, CorrelationIdMiddleware
from .core.metrics import PromMiddleware, metrics_endpoint
from .core.utils import Clock, parse_bind_address, utc_now
from .data.base import ListingsSource, VIVAREAL_BOUNDING_BOX
from .data.listings_client import listings_source
from .services.geofence import GeoFence
from .services.populator import CachePopulator
from .services.properties_service import PropertiesService

logger = logging.getLogger(__name__)

async def _sweep_expired(cache: BucketCache, interval: float):
    while True:
        await asyncio.sleep(interval)
        cache.expire()

def create_app(
    settings: Settings | None = None,
    source: ListingsSource | None = None,
    cache: BucketCache | None = None,
    clock: Clock = utc_now,
) -> FastAPI:
    """
    App factory so tests and ASGI servers can instantiate cleanly.
    Collaborators default to the ones described by settings; tests pass their own.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)  # Set up JSON logs + request-id filter

    if cache is None:
        cache = BucketCache(ttl_seconds=settings.CACHE_TTL_SECONDS, maxsize=settings.CACHE_MAXSIZE)
    populator = CachePopulator(cache, GeoFence.from_bounds(VIVAREAL_BOUNDING_BOX), clock=clock)
    service = PropertiesService(
        source=source if source is not None else listings_source(settings),
        cache=cache,
        populator=populator,
        channels=settings.DATASOURCES,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            settings.require()
        except ConfigError:
            logger.error("Environment variables must be set.", extra={"fields": {"missing": settings.missing()}})
            raise
        logger.info("Initializing...")
        sweeper = asyncio.create_task(_sweep_expired(cache, settings.CACHE_CLEANUP_SECONDS))
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper

    app = FastAPI(
        title="Listings Cache API",
        version="1.0.0",
        description="Read-through cache serving per-channel, paginated slices of the listing catalog.",
        lifespan=lifespan,
    )
    app.state.properties_service = service
    app.state.bucket_cache = cache

    allow_origins = [o.strip() for o in settings.ALLOW_ORIGINS.split(",")] if settings.ALLOW_ORIGINS else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )

    # Observability middlewares
    app.add_middleware(CorrelationIdMiddleware)  # Adds/propagates X-Request-Id
    if settings.PROMETHEUS_ENABLED:
        app.add_middleware(PromMiddleware)       # Records req/latency metrics

    app.add_exception_handler(PropertiesError, properties_error_handler)

    # Meta routes
    @app.get("/health", tags=["meta"])
    def health():
        return {"status": "ok"}

    if settings.PROMETHEUS_ENABLED:
        # Standard Prometheus scrape endpoint
        app.add_route("/metrics", metrics_endpoint, methods=["GET"])

    # Business routes
    app.include_router(properties_router, tags=["properties"])

    return app

app = create_app()

def serve(settings: Settings = default_settings) -> None:
    """Validate configuration, then listen on HOST."""
    configure_logging(settings.LOG_LEVEL)
    try:
        settings.require()
        host, port = parse_bind_address(settings.HOST)
    except (ConfigError, ValueError) as exc:
        logger.error("Invalid configuration", extra={"fields": {"error": str(exc)}})
        raise SystemExit(1) from exc
    logger.info("Listening", extra={"fields": {"host": host, "port": port}})
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)
