from __future__ import annotations  # Session feedback summary

import asyncio
from typing import List, Optional

from agents.prompts import FEEDBACK_NARRATIVE, ask, history_payload, vulnerability_context
from agents.types import InterviewSession
from llm_gateway import ChatModel, LlmResult

FEEDBACK_WINDOW = 10
SUMMARY_HEADER = "Voici un résumé de vos performances :\n\n"
TIPS_HEADER = "\nConseils pour améliorer vos réponses :\n\n"


def has_stored_feedback(session: InterviewSession) -> bool:
    return bool(session.feedback) or bool(session.prepared_questions)


def stored_summary(session: InterviewSession) -> str:  # Bullets from notes and prepared questions
    lines: List[str] = [SUMMARY_HEADER]
    for key, value in session.feedback.items():
        lines.append(f"• {key} : {value}\n")
    if session.prepared_questions:
        lines.append(TIPS_HEADER)
        for prepared in session.prepared_questions:
            lines.append(f"• Pour la question \"{prepared.question}\" : {prepared.tips}\n\n")
    return "".join(lines)


async def narrative(
    session: InterviewSession,
    llm: ChatModel,
    *,
    cancel: Optional[asyncio.Event] = None,
) -> LlmResult:  # Three-part coaching feedback over recent history
    return await ask(
        llm,
        FEEDBACK_NARRATIVE,
        cancel=cancel,
        profile_context=vulnerability_context(session.profile, guidance=True),
        history=history_payload(session.recent_history(FEEDBACK_WINDOW)),
    )


async def generate_feedback(
    session: InterviewSession,
    llm: ChatModel,
    *,
    cancel: Optional[asyncio.Event] = None,
) -> str:
    """Summarize stored feedback, or ask the LLM for a narrative; never mutates ``session``."""

    if has_stored_feedback(session):
        return stored_summary(session)
    result = await narrative(session, llm, cancel=cancel)
    return result.text_or()


__all__ = ["generate_feedback", "has_stored_feedback", "narrative", "stored_summary"]
