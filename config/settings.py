"""Application settings and configuration management."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .llm import LlmRoute, load_route


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    LLM_BASE_URL: str = "https://api.openai.com"
    LLM_ENDPOINT: str = "/v1/chat/completions"
    LLM_MODEL: str = "gpt-4o"
    LLM_API_KEY_ENV: str = "OPENAI_API_KEY"
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 1000
    LLM_TIMEOUT_S: float = Field(default=30.0, gt=0)

    KNOWLEDGE_BASE_PATH: str = "Guide_Embauche.markdown"
    HISTORY_WINDOW: int = Field(default=20, ge=1)
    ADVANCE_MIN_HISTORY: int = Field(default=4, ge=1)
    WEBCHAT_DEFAULT_USER: str = "web_user"
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])
    LLM_ROUTE_FILE: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")

    def llm_route(self) -> LlmRoute:
        """Build the chat-completion route used for every LLM call."""

        if self.LLM_ROUTE_FILE:
            return load_route(Path(self.LLM_ROUTE_FILE))

        return LlmRoute(
            name="openai-chat",
            base_url=self.LLM_BASE_URL,
            endpoint=self.LLM_ENDPOINT,
            model=self.LLM_MODEL,
            timeout_s=self.LLM_TIMEOUT_S,
            api_key_env=self.LLM_API_KEY_ENV,
            temperature=self.LLM_TEMPERATURE,
            max_tokens=self.LLM_MAX_TOKENS,
        )


settings = Settings()
