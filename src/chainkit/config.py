"""Shared configuration for chainkit."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChainSettings(BaseSettings):
    """Chain-wide settings."""

    # Observability: chain tracing (log type/op/status/latency per call)
    ENABLE_CHAIN_TRACING: bool = False
    TRACING_LOG_LEVEL: str = "INFO"  # DEBUG | INFO | WARNING

    # Conversation buffer memory defaults
    MEMORY_KEY: str = "history"
    HUMAN_PREFIX: str = "Human"
    AI_PREFIX: str = "AI"
    MEMORY_MAX_TURNS: int = 0  # 0 = keep every turn

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


@lru_cache
def get_settings() -> ChainSettings:
    return ChainSettings()
