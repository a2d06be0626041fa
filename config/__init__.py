"""Configuration package for the interview coach services."""
from .llm import LlmRoute, load_route
from .settings import Settings, settings

__all__ = [
    "LlmRoute",
    "load_route",
    "Settings",
    "settings",
]
