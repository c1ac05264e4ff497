"""Fixed prompt rules for each phase of the assessment.

`next_prompt` is a pure function of the phase and the turn context. The match
over `Phase` is exhaustive, so adding a phase without a rule fails type checks.
"""

from __future__ import annotations

import typing as t

import typing_extensions as te

from parlance.core.config.assessment import DefaultWarmupKeywords
from parlance.model import Phase, SessionMetadata, TaskVariant

from .errors import InvariantViolation


class Prompts(object):
    Consent = (
        "Welcome to the English assessment. I'll need to record your consent to proceed. "
        "Please say 'I consent to this assessment' after the beep."
    )
    MicTest = (
        "Great! Now let's test your microphone. "
        "Please say 'Testing, testing, one two three' so I can check the audio levels."
    )
    Ready = (
        "Perfect! Your microphone is working well. Let's begin the assessment. "
        "Tell me your first name and where you're calling from."
    )

    WarmupAsk = "Tell me your first name and where you're calling from."
    WarmupConfirm = "Thank you. Now let's move to the first interview question."
    WarmupReask = "I didn't catch that clearly. Could you please tell me your first name and where you're calling from?"

    InterviewQ1 = "What do you usually do on a typical workday? Mention two tasks."
    InterviewQ1FollowUp = "How do you prioritize those tasks?"
    InterviewQ2 = "Do you prefer working from home or office? Why?"
    InterviewQ2FollowUp = "Can you give me an example of when the opposite approach might be better?"

    TaskPicture = "I'll show you an office scene. Describe what you see and what might be happening."
    TaskRoleplay = (
        "You're calling a customer to reschedule a meeting. "
        "Explain the reason, propose two new times, and confirm next steps."
    )
    TaskClosing = "Thank you. That completes the task section."

    ListeningIntro = "I'll play a short business message. Listen carefully, then answer my question about it."
    ListeningQuestion = "What did the speaker promise to send and why?"

    Wrap = "Thank you for completing the assessment. Your results will be available shortly."

    Continue = "Please continue with your response."


class PromptContext(te.TypedDict):
    """What a prompt rule may look at; built fresh for every turn."""

    phase: Phase
    turn_index: int
    last_transcript: str | None
    time_remaining: int
    metadata: SessionMetadata


def mentions_any(transcript: str | None, keywords: t.Iterable[str]) -> bool:
    if not transcript:
        return False
    lowered = transcript.lower()
    return any(k.lower() in lowered for k in keywords)


def next_prompt(context: PromptContext, warmup_keywords: t.Iterable[str] = DefaultWarmupKeywords) -> str:
    metadata = context["metadata"]
    first = context["turn_index"] == 0

    match context["phase"]:
        case Phase.Init:
            if not metadata.consent_recorded:
                return Prompts.Consent
            if not metadata.mic_test_completed:
                return Prompts.MicTest
            return Prompts.Ready

        case Phase.Warmup:
            if first:
                return Prompts.WarmupAsk
            if mentions_any(context["last_transcript"], warmup_keywords):
                return Prompts.WarmupConfirm
            return Prompts.WarmupReask

        case Phase.InterviewQ1:
            return Prompts.InterviewQ1 if first else Prompts.InterviewQ1FollowUp

        case Phase.InterviewQ2:
            return Prompts.InterviewQ2 if first else Prompts.InterviewQ2FollowUp

        case Phase.Task:
            if not first:
                return Prompts.TaskClosing
            match metadata.task_variant:
                case TaskVariant.Picture:
                    return Prompts.TaskPicture
                case TaskVariant.Roleplay:
                    return Prompts.TaskRoleplay
                case None:
                    raise InvariantViolation("task variant must be chosen before the first task prompt")

        case Phase.Listening:
            return Prompts.ListeningIntro if first else Prompts.ListeningQuestion

        case Phase.Wrap:
            return Prompts.Wrap

        case Phase.Complete:
            return Prompts.Continue
