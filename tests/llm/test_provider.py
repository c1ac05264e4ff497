from __future__ import annotations

import pytest
from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI

from parlance.core.config import LLMSecrets, ModelSettings
from parlance.llm import api_key_for, create_model, ProviderType


@pytest.fixture
def secrets() -> LLMSecrets:
    return LLMSecrets.model_validate({
        "openai": {"secret_key": "sk-openai"},
        "anthropic": {"api_key": "sk-anthropic"},
    })


class TestCreateModel(object):
    def test_api_key_for(self, secrets: LLMSecrets) -> None:
        key = api_key_for(ProviderType.Anthropic, secrets)
        assert key is not None and key.get_secret_value() == "sk-anthropic"
        assert api_key_for(ProviderType.OpenAI, LLMSecrets()) is None

    def test_openai(self, secrets: LLMSecrets) -> None:
        model = create_model(ModelSettings(model="gpt-4o", temperature=0.3), secrets)
        assert isinstance(model, ChatOpenAI)
        assert model.model_name == "gpt-4o"
        assert model.temperature == 0.3

    def test_anthropic(self, secrets: LLMSecrets) -> None:
        settings = ModelSettings(provider=ProviderType.Anthropic, model="claude-sonnet-4-5", max_tokens=512)
        model = create_model(settings, secrets)
        assert isinstance(model, ChatAnthropic)
        assert model.max_tokens == 512

    def test_missing_key(self) -> None:
        with pytest.raises(ValueError, match="openai API key required"):
            create_model(ModelSettings(), LLMSecrets())
