from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="QUIZDUEL_APP_ENV")
    log_level: str = Field(default="INFO", alias="QUIZDUEL_LOG_LEVEL")

    api_base_url: str = Field(default="http://127.0.0.1:8787", alias="QUIZDUEL_API_BASE_URL")
    http_timeout_seconds: float = Field(default=10.0, alias="QUIZDUEL_HTTP_TIMEOUT_SECONDS")

    match_sync_interval_seconds: float = Field(
        default=1.0,
        alias="QUIZDUEL_MATCH_SYNC_INTERVAL_SECONDS",
    )
    match_sync_follow_server_round: bool = Field(
        default=True,
        alias="QUIZDUEL_MATCH_SYNC_FOLLOW_SERVER_ROUND",
    )
    notification_poll_interval_seconds: float = Field(
        default=5.0,
        alias="QUIZDUEL_NOTIFICATION_POLL_INTERVAL_SECONDS",
    )
    queue_poll_interval_seconds: float = Field(
        default=2.0,
        alias="QUIZDUEL_QUEUE_POLL_INTERVAL_SECONDS",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
