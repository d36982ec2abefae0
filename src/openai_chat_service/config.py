from __future__ import annotations

import os

from pydantic import BaseModel, Field

from .prompts import CHAT_SYSTEM_PROMPT, SUMMARIZE_PROMPT
from .session import DEFAULT_API_VERSION


class OpenAiServiceConfig(BaseModel):
    # Azure OpenAI deployment
    endpoint: str | None = Field(default_factory=lambda: os.getenv("AZURE_OPENAI_ENDPOINT"))
    key: str | None = Field(default_factory=lambda: os.getenv("AZURE_OPENAI_KEY"))
    model_name: str | None = Field(default_factory=lambda: os.getenv("AZURE_OPENAI_MODEL_NAME"))
    api_version: str = Field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_API_VERSION", DEFAULT_API_VERSION)
    )

    # Prompt templates
    chat_system_prompt: str = Field(
        default_factory=lambda: os.getenv("CHAT_SYSTEM_PROMPT", CHAT_SYSTEM_PROMPT)
    )
    summarize_prompt: str = Field(default_factory=lambda: os.getenv("SUMMARIZE_PROMPT", SUMMARIZE_PROMPT))

    # HTTP behavior
    upstream_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "60"))
    )

    # Observability
    enable_metrics: bool = Field(
        default_factory=lambda: os.getenv("ENABLE_METRICS", "false").lower() == "true"
    )
    metrics_bind: str = Field(default_factory=lambda: os.getenv("METRICS_BIND", "127.0.0.1"))
    metrics_port: int = Field(default_factory=lambda: int(os.getenv("METRICS_PORT", "9109")))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = Field(default_factory=lambda: os.getenv("LOG_FORMAT", "json"))

    def secrets(self) -> list[str]:
        return [s for s in (self.key,) if s]
