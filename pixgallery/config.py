import os
from dotenv import load_dotenv
from typing import Optional
from dataclasses import dataclass, field


@dataclass
class SupabaseConfig:
    url: str
    key: str
    images_bucket: str = "images"

    def __post_init__(self):
        if not self.url:
            raise ValueError("SUPABASE_URL is not set in the environment!")
        if not self.key:
            raise ValueError("SUPABASE_KEY is not set in the environment!")


@dataclass
class ProviderConfig:
    rapidapi_key: Optional[str] = None  # shared by every RapidAPI-hosted provider
    request_timeout: Optional[float] = None  # seconds, None keeps the aiohttp default
    pollinations_base_url: str = "https://image.pollinations.ai/prompt/"

    def __post_init__(self):
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ValueError("GENERATION_TIMEOUT_SECONDS must be positive")


@dataclass
class FeedConfig:
    recent_limit: int = 50

    def __post_init__(self):
        if self.recent_limit < 1:
            raise ValueError("FEED_RECENT_LIMIT must be at least 1")


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_file: Optional[str] = None


@dataclass
class GalleryConfig:
    supabase: SupabaseConfig
    providers: ProviderConfig = field(default_factory=ProviderConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "GalleryConfig":
        """Build the configuration from environment variables (and .env)"""
        load_dotenv(dotenv_path)

        timeout = os.getenv("GENERATION_TIMEOUT_SECONDS")

        return cls(
            supabase=SupabaseConfig(
                url=os.getenv("SUPABASE_URL", ""),
                key=os.getenv("SUPABASE_KEY", ""),
                images_bucket=os.getenv("SUPABASE_IMAGES_BUCKET", "images"),
            ),
            providers=ProviderConfig(
                rapidapi_key=os.getenv("RAPIDAPI_KEY"),
                request_timeout=float(timeout) if timeout else None,
            ),
            feed=FeedConfig(
                recent_limit=int(os.getenv("FEED_RECENT_LIMIT", "50")),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                log_file=os.getenv("LOG_FILE"),
            ),
        )
