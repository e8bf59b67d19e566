"""Configuration package for the interview feedback service."""
from .routes import (
    FEEDBACK_TARGET,
    QUESTIONS_TARGET,
    AppConfig,
    LlmRoute,
    load_config,
    load_route,
    resolve_route,
)
from .settings import Settings, settings

__all__ = [
    "FEEDBACK_TARGET",
    "QUESTIONS_TARGET",
    "AppConfig",
    "LlmRoute",
    "load_config",
    "load_route",
    "resolve_route",
    "Settings",
    "settings",
]
