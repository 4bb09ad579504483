import os
import tempfile
from dataclasses import dataclass, field
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def _parse_weights(raw: str) -> tuple[int, ...]:
    return tuple(int(part) for part in raw.split(",") if part.strip())


def _optional_int(raw: str | None) -> int | None:
    return int(raw) if raw else None


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Fonts
    font_family: str = os.getenv("FONT_FAMILY", "Inter")
    font_weights: tuple[int, ...] = field(
        default_factory=lambda: _parse_weights(os.getenv("FONT_WEIGHTS", "500,700"))
    )
    font_provider_url: str = os.getenv("FONT_PROVIDER_URL", "https://fonts.googleapis.com/css2")
    # Providers choose the binary container (woff2 vs ttf) from this header
    font_user_agent: str = os.getenv("FONT_USER_AGENT", DEFAULT_USER_AGENT)
    font_fetch_timeout: float = float(os.getenv("FONT_FETCH_TIMEOUT", "10"))
    font_preferred_subset: str = os.getenv("FONT_PREFERRED_SUBSET", "latin")

    # Persistent tier
    font_cache_backend: str = os.getenv("FONT_CACHE_BACKEND", "disk")
    font_cache_dir: str = os.getenv(
        "FONT_CACHE_DIR", os.path.join(tempfile.gettempdir(), "thumbnail-fonts")
    )
    font_cache_max_bytes: int | None = _optional_int(os.getenv("FONT_CACHE_MAX_BYTES"))

    # Redis (only used when FONT_CACHE_BACKEND=redis)
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Rendering
    thumbnail_width: int = int(os.getenv("THUMBNAIL_WIDTH", "1200"))
    thumbnail_height: int = int(os.getenv("THUMBNAIL_HEIGHT", "648"))

    # Entity sources
    assistants_file: str = os.getenv("ASSISTANTS_FILE", "assistants.json")
    avatars_dir: str = os.getenv("AVATARS_DIR", "avatars")
    models_json: str = os.getenv("MODELS", "[]")
    base_path: str = os.getenv("BASE_PATH", "/")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def uses_redis(self) -> bool:
        """Check if the persistent font tier is backed by Redis.

        Returns:
            True if FONT_CACHE_BACKEND is "redis", False otherwise
        """
        return self.font_cache_backend.lower() == "redis"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.font_cache_backend.lower() not in ("disk", "redis"):
            raise ValueError(
                f"FONT_CACHE_BACKEND must be 'disk' or 'redis', got {self.font_cache_backend!r}"
            )

        if not self.font_weights:
            raise ValueError("FONT_WEIGHTS must list at least one weight")

        for weight in self.font_weights:
            if not 1 <= weight <= 1000:
                raise ValueError(f"FONT_WEIGHTS entries must be between 1 and 1000, got {weight}")

        if self.font_fetch_timeout <= 0:
            raise ValueError("FONT_FETCH_TIMEOUT must be positive")

        if self.thumbnail_width <= 0 or self.thumbnail_height <= 0:
            raise ValueError("THUMBNAIL_WIDTH and THUMBNAIL_HEIGHT must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
