from datetime import timedelta

from pydantic_settings import BaseSettings, SettingsConfigDict

from preview_worker.policy import FAILURE_TTL, INTER_ITEM_DELAY, MAX_RETRIES, REFRESH_INTERVAL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Preview Worker"
    request_timeout: int = 30

    # Notion catalog
    notion_api_key: str = ""
    notion_database_id: str = ""

    # Enrichment
    anthropic_api_key: str = ""
    describe_model: str = "claude-haiku-4-5"
    describe_max_tokens: int = 150

    # Retry / capture state: "redis" or "memory"
    retry_store: str = "redis"
    redis_url: str = "redis://localhost:6379/0"

    max_retries: int = MAX_RETRIES
    refresh_interval_days: int = REFRESH_INTERVAL.days
    failure_ttl_days: int = FAILURE_TTL.days
    # 3 new browser sessions per 60s
    inter_item_delay_ms: int = int(INTER_ITEM_DELAY * 1000)

    # Capture
    playwright_timeout_ms: int = 30000
    viewport_width: int = 1920
    viewport_height: int = 1080
    jpeg_quality: int = 85

    # Shared secret expected in X-Cron-Secret; empty disables the check
    cron_secret: str = ""

    @property
    def refresh_interval(self) -> timedelta:
        return timedelta(days=self.refresh_interval_days)

    @property
    def failure_ttl(self) -> timedelta:
        return timedelta(days=self.failure_ttl_days)

    @property
    def inter_item_delay(self) -> float:
        return self.inter_item_delay_ms / 1000


settings = Settings()
