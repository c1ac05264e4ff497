"""Tests for the chat-model rubric scoring service."""

from __future__ import annotations

import typing as t
from unittest.mock import AsyncMock, MagicMock

import jinja2
import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from parlance.assessment.scorer import AssessmentRubric
from parlance.llm import ChatModelRubricScoringService, ScoringError
from parlance.llm.scoring import content_str

Rubric = {
    "fluency": "smooth, natural speech",
    "grammar": "accuracy of structures",
}


@pytest.fixture
def model() -> MagicMock:
    m = MagicMock()
    m.ainvoke = AsyncMock(return_value=AIMessage(content='{"scores": {}}'))
    return m


@pytest.fixture
def service(model: MagicMock, llm_env: jinja2.Environment) -> ChatModelRubricScoringService:
    return ChatModelRubricScoringService(model, llm_env)


class TestRender(object):
    """The rubric prompt carries the transcript, context and every dimension."""

    def test_includes_transcript_and_rubric(self, service: ChatModelRubricScoringService) -> None:
        prompt = service.render("hello I am Ana", {"task_variant": "roleplay", "turns": 4}, Rubric)

        assert "hello I am Ana" in prompt
        assert "- fluency (0-5): smooth, natural speech" in prompt
        assert "- grammar (0-5): accuracy of structures" in prompt
        assert '"task_variant": "roleplay"' in prompt
        assert '"grammar": integer 0-5' in prompt

    def test_empty_transcript_is_called_out(self, service: ChatModelRubricScoringService) -> None:
        prompt = service.render("", {}, Rubric)
        assert "(the candidate gave no spoken responses)" in prompt

    def test_max_score(self, model: MagicMock, llm_env: jinja2.Environment) -> None:
        svc = ChatModelRubricScoringService(model, llm_env, max_score=4)
        assert "- fluency (0-4)" in svc.render("hi", {}, Rubric)

    def test_default_rubric_renders(self, service: ChatModelRubricScoringService) -> None:
        prompt = service.render("hi", {}, AssessmentRubric)
        for name in AssessmentRubric:
            assert f'"{name}": integer 0-5' in prompt


class TestScore(object):
    @pytest.mark.anyio
    async def test_returns_raw_content(self, service: ChatModelRubricScoringService, model: MagicMock) -> None:
        model.ainvoke.return_value = AIMessage(content='{"scores": {"fluency": 4}}')

        result = await service.score("hi", {}, Rubric)

        assert result == '{"scores": {"fluency": 4}}'
        messages = model.ainvoke.call_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert "hi" in t.cast(str, messages[1].content)

    @pytest.mark.anyio
    async def test_model_failure_is_wrapped(self, service: ChatModelRubricScoringService, model: MagicMock) -> None:
        model.ainvoke.side_effect = RuntimeError("overloaded")

        with pytest.raises(ScoringError) as exc_info:
            await service.score("hi", {}, Rubric)
        assert exc_info.value.code == "api_error"
        assert "overloaded" in str(exc_info.value)


class TestContentStr(object):
    def test_string(self) -> None:
        assert content_str("abc") == "abc"

    def test_content_blocks(self) -> None:
        blocks = [{"type": "text", "text": '{"a": '}, "1", {"type": "image", "url": "x"}, {"type": "text", "text": "}"}]
        assert content_str(blocks) == '{"a": 1}'
