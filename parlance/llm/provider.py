"""Chat models for rubric scoring, built through LangChain so the vendor is a config choice."""

from __future__ import annotations

import enum
import typing as t

import pydantic as p
from langchain_core.language_models import BaseChatModel

if t.TYPE_CHECKING:
    from parlance.core.config import LLMSecrets, ModelSettings


class ProviderType(enum.Enum):
    OpenAI = "openai"
    Anthropic = "anthropic"


def api_key_for(provider: ProviderType, secrets: LLMSecrets) -> p.SecretStr | None:
    """The key for `provider` from the secrets file, or None when it has none."""
    match provider:
        case ProviderType.OpenAI:
            secret = secrets.openai.secret_key if secrets.openai else None
        case ProviderType.Anthropic:
            secret = secrets.anthropic.api_key if secrets.anthropic else None
    return p.SecretStr(secret.get_secret_value()) if secret is not None else None


def create_model(settings: ModelSettings, secrets: LLMSecrets) -> BaseChatModel:
    """Build the chat model named by `settings`.

    Raises:
        ValueError: If the secrets hold no key for the model's provider
    """
    api_key = api_key_for(settings.provider, secrets)
    if api_key is None:
        raise ValueError(f"{settings.provider.value} API key required for model {settings.model}")

    match settings.provider:
        case ProviderType.OpenAI:
            from langchain_openai import ChatOpenAI

            return ChatOpenAI(
                model=settings.model,
                temperature=settings.temperature,
                max_completion_tokens=settings.max_tokens,
                timeout=settings.timeout_seconds,
                max_retries=settings.max_retries,
                api_key=api_key,
            )
        case ProviderType.Anthropic:
            from langchain_anthropic import ChatAnthropic

            return ChatAnthropic(
                model_name=settings.model,
                temperature=settings.temperature,
                max_tokens_to_sample=settings.max_tokens,
                timeout=settings.timeout_seconds,
                max_retries=settings.max_retries,
                api_key=api_key,
                stop=None,
            )
