"""LLM configuration settings."""

from __future__ import annotations

from parlance.llm.provider import ProviderType

from .base import BaseSettings


class ModelSettings(BaseSettings):
    """Settings for a specific model."""

    provider: ProviderType = ProviderType.OpenAI
    model: str = "gpt-4o"
    max_tokens: int = 4096
    temperature: float = 1.0
    max_retries: int = 3
    timeout_seconds: float = 60.0


class AssessmentModels(BaseSettings):
    """Model configuration for different assessment tasks."""

    # rubric scoring wants stable, parseable output
    scoring: ModelSettings = ModelSettings(
        provider=ProviderType.OpenAI,
        model="gpt-4o",
        max_tokens=1024,
        temperature=0.3,
    )


class LLMSettings(BaseSettings):
    """Root LLM configuration."""

    models: AssessmentModels = AssessmentModels()
