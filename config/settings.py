"""
Configuration settings for the Falabella search scraper.

Values can be overridden with SCRAPER_* environment variables (a .env file at
the project root is loaded automatically).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass
class ScraperConfig:
    """Configuration for the search-page crawler and field heuristics."""

    # Site layout
    base_url: str = field(
        default_factory=lambda: os.getenv(
            "SCRAPER_BASE_URL", "https://www.falabella.com.co"
        ).rstrip("/")
    )
    search_path: str = "/falabella-co/search"
    query_param: str = "Ntt"
    page_param: str = "page"
    price_range_param: str = "f.range.derivedPrice"
    max_price_sentinel: int = 999_999_999
    media_base_url: str = "https://media.falabella.com/falabellaCO"

    # Pagination limits
    page_size: int = field(default_factory=lambda: _env_int("SCRAPER_PAGE_SIZE", 48))
    max_pages: int = field(default_factory=lambda: _env_int("SCRAPER_MAX_PAGES", 20))

    # Rate limiting (be respectful)
    page_delay_seconds: float = 3.0  # Delay between page visits

    # Timeouts
    navigation_timeout_ms: int = 60000
    selector_timeout_ms: int = 10000
    image_ready_timeout_ms: int = 8000

    # Lazy-load completion
    scroll_step_px: int = 300
    scroll_delay_ms: int = 100
    max_scroll_steps: int = 400  # Safety limit for endless feeds
    settle_delay_ms: int = 2000
    promote_settle_ms: int = 500
    wait_for_images: bool = True
    image_ready_threshold: float = 0.7

    # Browser settings
    headless: bool = field(default_factory=lambda: _env_bool("SCRAPER_HEADLESS", True))
    viewport_width: int = 1920
    viewport_height: int = 1080
    locale: str = "es-CO"
    timezone_id: str = "America/Bogota"

    # User agents to rotate
    user_agents: list = field(
        default_factory=lambda: [
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        ]
    )
    extra_headers: dict = field(
        default_factory=lambda: {
            "Accept-Language": "es-CO,es;q=0.9,en;q=0.8",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        }
    )

    # Record formatting
    currency_prefix: str = "$ "
    thousands_separator: str = "."
    strip_brand_prefix: bool = True

    @property
    def home_url(self) -> str:
        """Default URL for candidates without a usable link."""
        return f"{self.base_url}/"


@dataclass
class StorageConfig:
    """Configuration for dataset storage."""

    base_dir: Path = field(
        default_factory=lambda: Path(__file__).parent.parent / "data"
    )

    @property
    def output_dir(self) -> Path:
        """Directory holding run datasets."""
        return self.base_dir / "datasets"

    def ensure_dirs(self) -> None:
        """Create necessary directories if they don't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    log_dir: Path = field(default_factory=lambda: Path(__file__).parent.parent / "logs")
    log_to_file: bool = field(
        default_factory=lambda: _env_bool("SCRAPER_LOG_TO_FILE", False)
    )

    def ensure_dirs(self) -> None:
        """Create log directory if it doesn't exist."""
        self.log_dir.mkdir(parents=True, exist_ok=True)


@dataclass
class PipelineConfig:
    """Main configuration combining all settings."""

    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Default configuration instance
config = PipelineConfig()
