import os
from pydantic import BaseModel

from .errors import ConfigError

class Settings(BaseModel):
    # Upstream catalog (required)
    ZAP_PROPERTIES_ENDPOINT: str | None = os.getenv("ZAP_PROPERTIES_ENDPOINT")
    UPSTREAM_TIMEOUT_SECONDS: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "100"))

    # Bind address (required), "host:port" or ":port"
    HOST: str | None = os.getenv("HOST")

    # Channels served from the catalog
    DATASOURCES: tuple[str, ...] = ("zap", "vivareal")

    # Cache
    CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "600"))
    CACHE_MAXSIZE: int = int(os.getenv("CACHE_MAXSIZE", "16"))
    # Expired buckets are also dropped by a periodic sweep
    CACHE_CLEANUP_SECONDS: float = float(os.getenv("CACHE_CLEANUP_SECONDS", "3600"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS
    ALLOW_ORIGINS: str = os.getenv("ALLOW_ORIGINS", "*")

    # Metrics
    PROMETHEUS_ENABLED: bool = os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"

    def missing(self) -> list[str]:
        """Names of required settings that are unset or blank."""
        required = {
            "ZAP_PROPERTIES_ENDPOINT": self.ZAP_PROPERTIES_ENDPOINT,
            "HOST": self.HOST,
        }
        return [name for name, value in required.items() if not (value or "").strip()]

    def require(self) -> None:
        missing = self.missing()
        if missing:
            raise ConfigError(f"Environment variables must be set: {', '.join(missing)}")

settings = Settings()
