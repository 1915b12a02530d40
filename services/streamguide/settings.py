from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    api_base_url: str = Field(default="https://streamguide-api.onrender.com", alias="STREAMGUIDE_API")
    # No retries; a dead call fails after this many seconds instead of hanging the widget
    request_timeout_s: float = Field(default=10.0, alias="REQUEST_TIMEOUT_S")

    # --- Popup ---
    search_debounce_ms: int = Field(300, alias="SEARCH_DEBOUNCE_MS")
    min_query_length: int = Field(2, alias="MIN_QUERY_LENGTH")
    popup_max_results: int = Field(5, alias="POPUP_MAX_RESULTS")
    trending_limit: int = Field(20, alias="TRENDING_LIMIT")
    trending_country: str = Field("US", alias="TRENDING_COUNTRY")

    # --- Widget ---
    dismissal_key_prefix: str = Field("streamguide-minimized-", alias="DISMISSAL_KEY_PREFIX")
    # True restores the old behaviour of discarding offers with an unknown stream type
    drop_unknown_stream_types: bool = Field(False, alias="DROP_UNKNOWN_STREAM_TYPES")
    # True shows the error widget when a title has no offers at all
    empty_offers_as_failure: bool = Field(False, alias="EMPTY_OFFERS_AS_FAILURE")

    # --- Storage ---
    disable_redis: bool = Field(default=True, alias="DISABLE_REDIS")
    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    app_version: str = Field("0.1.0", alias="APP_VERSION")

    def resolved_redis_url(self) -> str | None:
        if self.disable_redis:
            return None
        return self.redis_url

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
