from __future__ import annotations  # Configuration schema for LLM routing

import os
from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field, SecretStr


FEEDBACK_TARGET = "feedback.create_feedback"
QUESTIONS_TARGET = "interviews.generate_questions"


class LlmRoute(BaseModel):  # LLM endpoint configuration
    name: str
    base_url: str
    endpoint: str = "/chat/completions"
    model: str
    temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    timeout_s: float = Field(default=30.0, ge=0.1)
    max_retries: int = Field(default=2, ge=0)
    backoff_s: float = Field(default=0.5, ge=0.0)
    api_key: SecretStr | None = None
    api_key_env: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)

    def credential(self) -> str | None:  # Explicit key wins over the environment lookup
        if self.api_key is not None:
            return self.api_key.get_secret_value()
        if self.api_key_env:
            return os.getenv(self.api_key_env) or None
        return None


class AppConfig(BaseModel):  # Application configuration root
    llm_routes: Dict[str, LlmRoute]
    registry: Dict[str, str]


def load_config(path: Path) -> AppConfig:  # Load configuration from disk
    data = Path(path).read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def resolve_route(cfg: AppConfig, target: str) -> LlmRoute:  # Look up the route bound to a pipeline target
    if target not in cfg.registry:
        raise KeyError(f"Registry entry missing for '{target}'")
    route_id = cfg.registry[target]
    if route_id not in cfg.llm_routes:
        raise KeyError(f"Route '{route_id}' missing for '{target}'")
    return cfg.llm_routes[route_id]


def load_route(path: Path, target: str) -> LlmRoute:  # Load config and resolve a single target
    cfg = load_config(path)
    return resolve_route(cfg, target)
