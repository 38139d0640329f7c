from pydantic_settings import BaseSettings

from app.core.constants import (
    AERODATABOX_DEFAULT_HOST,
    MAX_HUB_CANDIDATES,
    MIN_HUB_CONNECTION_SECONDS,
    SCHEDULE_WINDOW_MINUTES,
)


class Settings(BaseSettings):
    # AeroDataBox via RapidAPI
    rapidapi_key: str = ""
    rapidapi_host: str = AERODATABOX_DEFAULT_HOST
    schedule_timeout_seconds: float = 15.0
    schedule_window_minutes: int = SCHEDULE_WINDOW_MINUTES

    # Hub search
    max_hub_candidates: int = MAX_HUB_CANDIDATES
    min_hub_connection_minutes: int = MIN_HUB_CONNECTION_SECONDS // 60
    rank_hubs: bool = False

    # Client throttle and result cache
    rate_limit_requests: int = 5
    rate_limit_window_seconds: int = 60
    search_cache_ttl_seconds: int = 600
    redis_url: str = "redis://localhost:6379/0"

    # Serve deterministic mock itineraries when the provider throttles us
    mock_on_rate_limit: bool = False

    log_level: str = "INFO"

    @property
    def use_mock_provider(self) -> bool:
        return not self.rapidapi_key

    @property
    def min_hub_connection_seconds(self) -> int:
        return self.min_hub_connection_minutes * 60

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
