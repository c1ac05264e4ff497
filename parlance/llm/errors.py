"""Errors raised by external collaborators (transcription, synthesis, scoring)."""

import asyncio
import typing as t


class CollaboratorError(Exception):
    """A call to an external service failed or returned something unusable.

    `code` is a short machine-readable reason, e.g. "api_error" or "timeout".
    """

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self)!r}, code={self.code!r})"


class TranscriptionError(CollaboratorError):
    """Error during transcription."""


class SpeechError(CollaboratorError):
    """Error during speech synthesis."""


class ScoringError(CollaboratorError):
    """Error during rubric scoring, including responses that do not parse."""


T = t.TypeVar("T")


async def with_timeout(
    aw: t.Awaitable[T], seconds: float | None, error: type[CollaboratorError], operation: str
) -> T:
    """Await a collaborator call, converting an expired deadline into `error(code="timeout")`."""
    try:
        async with asyncio.timeout(seconds):
            return await aw
    except TimeoutError as e:
        raise error(f"{operation} timed out after {seconds}s", code="timeout") from e
