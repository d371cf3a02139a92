"""
Centralized configuration for the Business Discovery Agent
All environment variables and settings are defined here
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Presence of provider credentials decides which discovery providers run.
    """

    # ======================
    # LLM Configuration
    # ======================
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key")
    ANTHROPIC_MODEL: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used for task and workflow generation"
    )
    MAX_TOKENS: int = Field(default=4000, description="Max tokens for Claude response")
    LLM_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature")

    # ======================
    # Browserbase (remote browser) Configuration
    # ======================
    BROWSERBASE_API_KEY: str = Field(default="", description="Browserbase API key")
    BROWSERBASE_PROJECT_ID: str = Field(default="", description="Browserbase project id")
    BROWSERBASE_API_URL: str = Field(
        default="https://api.browserbase.com/v1",
        description="Browserbase REST API base URL"
    )

    # ======================
    # Apify (managed scraping actor) Configuration
    # ======================
    APIFY_API_TOKEN: str = Field(default="", description="Apify API token")
    APIFY_API_URL: str = Field(
        default="https://api.apify.com/v2",
        description="Apify REST API base URL"
    )
    APIFY_ACTOR_ID: str = Field(
        default="compass~crawler-google-places",
        description="Google Maps scraper actor"
    )
    APIFY_MAX_REVIEWS: int = Field(default=30, description="Reviews requested per place")
    APIFY_WAIT_SECS: int = Field(
        default=120,
        description="Ceiling in seconds for an actor run to finish"
    )

    # ======================
    # Scrape Timing Configuration
    # ======================
    NAVIGATION_TIMEOUT_MS: int = Field(default=45000, description="page.goto timeout")
    SETTLE_DELAY_MS: int = Field(
        default=12000,
        description="Fixed wait after navigation for client-side rendering"
    )
    RESULT_SETTLE_DELAY_MS: int = Field(
        default=6000,
        description="Wait after clicking the first search result"
    )
    REVIEW_POLL_ATTEMPTS: int = Field(default=12, description="Review panel poll attempts")
    REVIEW_POLL_INTERVAL_MS: int = Field(default=1000, description="Delay between polls")
    MIN_REVIEW_PANEL_HEIGHT: int = Field(
        default=500,
        description="Scroll height (px) at which the review panel counts as loaded"
    )
    REVIEW_SCROLL_ITERATIONS: int = Field(default=6, description="Lazy-load scroll passes")
    LOWEST_SORT_SCROLL_ITERATIONS: int = Field(
        default=4,
        description="Scroll passes after re-sorting by lowest rating"
    )
    SCROLL_DELAY_MS: int = Field(default=1500, description="Delay between scroll passes")
    SORT_LOWEST_FIRST: bool = Field(
        default=True,
        description="Run a second review pass sorted by lowest rating"
    )

    # ======================
    # Profile Store Configuration
    # ======================
    STORE_BACKEND: str = Field(
        default="memory",
        description="Profile store backend: 'memory' or 'redis'"
    )
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL"
    )
    PROFILE_TTL: Optional[int] = Field(
        default=None,
        description="Seconds before stored documents expire (None = keep)"
    )

    # ======================
    # Tracing Configuration
    # ======================
    WANDB_API_KEY: str = Field(default="", description="Weights & Biases API key for Weave")
    WEAVE_PROJECT: str = Field(default="business-agent", description="Weave project name")

    # ======================
    # Logging Configuration
    # ======================
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    @property
    def browserbase_configured(self) -> bool:
        return bool(self.BROWSERBASE_API_KEY and self.BROWSERBASE_PROJECT_ID)

    @property
    def apify_configured(self) -> bool:
        return bool(self.APIFY_API_TOKEN)

    @property
    def llm_configured(self) -> bool:
        return bool(self.ANTHROPIC_API_KEY)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Allow extra env vars in .env file


# Global settings instance
settings = Settings()
