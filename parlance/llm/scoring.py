"""Rubric scoring by a chat model."""

from __future__ import annotations

import typing as t
from abc import abstractmethod

import jinja2
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from .errors import ScoringError

SystemPrompt: t.Final[str] = "You are a certified English assessor. Respond only with valid JSON."


class RubricScoringService(t.Protocol):
    """Protocol for free-text rubric scoring.

    Implementations return the raw model text; parsing and validation belong to
    the caller, so a malformed response is never silently defaulted here.
    """

    @abstractmethod
    async def score(self, transcript: str, context: dict[str, t.Any], rubric: t.Mapping[str, str]) -> str:
        """Score a transcript against a rubric.

        Args:
            transcript: All of the candidate's utterances, space-joined in order
            context: Session facts and automated signals, rendered as JSON
            rubric: Dimension name to description

        Returns:
            The response text, expected to hold a JSON object

        Raises:
            ScoringError: If the backing model call fails
        """
        ...


def content_str(content: t.Any) -> str:
    """Extract string content from a LangChain message content field."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in t.cast(list[t.Any], content):
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                parts.append(str(item.get("text", "")))
        return "".join(parts)
    return str(content)


class ChatModelRubricScoringService(object):
    """Score with a LangChain chat model and a Jinja2 prompt template."""

    def __init__(
        self,
        model: BaseChatModel,
        env: jinja2.Environment,
        template: str = "scoring/rubric.j2",
        max_score: int = 5,
    ) -> None:
        self.model = model
        self.env = env
        self.template = template
        self.max_score = max_score

    def render(self, transcript: str, context: dict[str, t.Any], rubric: t.Mapping[str, str]) -> str:
        template = self.env.get_template(self.template)
        return template.render(transcript=transcript, context=context, rubric=rubric, max_score=self.max_score)

    async def score(self, transcript: str, context: dict[str, t.Any], rubric: t.Mapping[str, str]) -> str:
        messages = [
            SystemMessage(content=SystemPrompt),
            HumanMessage(content=self.render(transcript, context, rubric)),
        ]
        try:
            response = await self.model.ainvoke(messages)
        except Exception as e:
            raise ScoringError(f"Scoring failed: {e!s}", code="api_error") from e
        return content_str(response.content)
