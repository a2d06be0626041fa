from __future__ import annotations  # Configuration schema for the chat-completion route

import json
from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field


class LlmRoute(BaseModel):  # Chat-completion endpoint configuration
    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(ge=0.1)
    api_key_env: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)
    extra_headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.endpoint}"


def load_route(path: Path) -> LlmRoute:  # Load a route override from a JSON file
    data = json.loads(path.read_text(encoding="utf-8"))
    return LlmRoute.model_validate(data)
