"""
Application settings for the ads chat backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # LLM
    llm_model: str = Field(default="gemini-2.5-flash", alias="LLM_MODEL")
    llm_temperature: float = Field(default=0.3, alias="LLM_TEMPERATURE")
    google_api_key: str | None = Field(default=None, alias="GOOGLE_API_KEY")
    google_use_vertex: bool = Field(default=False, alias="GOOGLE_USE_VERTEX")
    model_timeout_seconds: float = Field(default=55.0, alias="MODEL_TIMEOUT_SECONDS")

    # Engine
    state_load_timeout_seconds: float = Field(
        default=10.0, alias="STATE_LOAD_TIMEOUT_SECONDS"
    )
    max_tool_hops: int = Field(default=8, alias="MAX_TOOL_HOPS")
    core_tools_only: bool = Field(default=True, alias="CORE_TOOLS_ONLY")
    advertise_write_tools: bool = Field(default=True, alias="ADVERTISE_WRITE_TOOLS")
    affirmative_replies: list[str] = Field(
        default=["yes"], alias="AFFIRMATIVE_REPLIES"
    )
    quick_replies_enabled: bool = Field(default=True, alias="QUICK_REPLIES_ENABLED")

    # Thread state
    thread_store_backend: Literal["memory", "adk"] = Field(
        default="memory", alias="THREAD_STORE_BACKEND"
    )
    adk_app_name: str = Field(default="adchat", alias="ADK_APP_NAME")
    adk_user_id: str = Field(default="adchat", alias="ADK_USER_ID")

    # Ads API
    meta_api_base_url: str = Field(
        default="https://graph.facebook.com", alias="META_API_BASE_URL"
    )
    meta_api_version: str = Field(default="v21.0", alias="META_API_VERSION")
    meta_timeout_seconds: float = Field(default=15.0, alias="META_TIMEOUT_SECONDS")

    # HTTP / logging
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"], alias="CORS_ORIGINS"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
