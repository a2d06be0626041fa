"""Difficulty-adapted interview questions backed by an in-memory bank."""
from __future__ import annotations

import asyncio
import logging
import random
import re
from typing import Dict, List, Optional, Tuple

from agents.prompts import ADAPTIVE_QUESTION, ask, vulnerability_context
from agents.types import QUESTION_CATEGORIES, Difficulty, InterviewQuestion, UserProfile
from llm_gateway import ChatModel
from observability import log_interaction

logger = logging.getLogger(__name__)

FALLBACK_TIP = "Soyez concis et authentique dans votre réponse."
SECTOR_FALLBACK_TIP = "Soyez concis et mettez en avant vos principales réalisations."
INTRO_FALLBACK = "Pouvez-vous vous présenter et me parler de votre parcours professionnel?"
INTRO_FALLBACK_TIP = (
    "Présentez-vous de manière concise en mettant en avant vos expériences pertinentes pour le poste."
)

_QUESTION_RE = re.compile(r"QUESTION:", re.IGNORECASE)
_TIPS_RE = re.compile(r"CONSEIL:", re.IGNORECASE)


def determine_difficulty(profile: UserProfile) -> Difficulty:
    """Map the evaluated vulnerability attributes onto a difficulty tier."""

    if not profile.is_profile_evaluated:
        return "Moyen"
    if "élevé" in profile.anxiety_level or "débutant" in profile.experience_level:
        return "Facile"
    if "moyen" in profile.anxiety_level or "intermédiaire" in profile.experience_level:
        return "Moyen"
    return "Difficile"


def parse_question_response(response: str) -> Tuple[str, str]:
    """Split a ``QUESTION: ... CONSEIL: ...`` reply into question and tips.

    Marker lookup is case-insensitive. When either marker is missing, or the
    tips marker precedes the question marker, the whole reply becomes the
    question and a generic tip is supplied.
    """

    question_match = _QUESTION_RE.search(response)
    tips_match = _TIPS_RE.search(response)
    if question_match and tips_match and tips_match.start() > question_match.start():
        question = response[question_match.end() : tips_match.start()].strip()
        tips = response[tips_match.end() :].strip()
        return question, tips
    return response.strip(), FALLBACK_TIP


def relevant_categories(profile: UserProfile) -> List[str]:
    categories = ["experience", "competences", "motivation"]
    if profile.is_profile_evaluated:
        if "élevé" in profile.anxiety_level:
            categories.append("aspirations")
        else:
            categories.extend(["situations", "lacunes", "aspirations"])
        if "oui" in profile.vulnerability_profile.get("Question7", "") and "lacunes" not in categories:
            categories.append("lacunes")
    else:
        categories.extend(c for c in QUESTION_CATEGORIES if c not in ("introduction", "conclusion"))
    return categories


class QuestionGenerator:
    """Pick or synthesize questions; synthesized ones are kept for reuse."""

    def __init__(self, llm: ChatModel, *, rng: Optional[random.Random] = None) -> None:
        self._llm = llm
        self._rng = rng or random.Random()
        self._bank: Dict[str, List[InterviewQuestion]] = {category: [] for category in QUESTION_CATEGORIES}

    def bank(self, category: str) -> List[InterviewQuestion]:
        return list(self._bank.get(category, []))

    async def get_adapted_question(
        self,
        profile: UserProfile,
        category: str,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> InterviewQuestion:
        try:
            log_interaction(profile.user_id, "Demande de question adaptée", f"Catégorie: {category}", "AdaptiveQuestions")
            difficulty = determine_difficulty(profile)
            matching = [q for q in self._bank[category] if q.difficulty == difficulty]
            if matching:
                return self._rng.choice(matching)
            return await self._generate(profile, category, difficulty, cancel=cancel)
        except Exception as exc:  # noqa: BLE001
            logger.error("Erreur lors de la récupération d'une question adaptée: %s", exc)
            return InterviewQuestion(
                question=(
                    "Pouvez-vous me parler de votre expérience professionnelle dans le domaine "
                    f"{profile.job_sector}?"
                ),
                category=category,
                difficulty="Moyen",
                tips=SECTOR_FALLBACK_TIP,
            )

    async def _generate(
        self,
        profile: UserProfile,
        category: str,
        difficulty: Difficulty,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> InterviewQuestion:
        result = await ask(
            self._llm,
            ADAPTIVE_QUESTION,
            cancel=cancel,
            category=category,
            difficulty=difficulty,
            job_sector=profile.job_sector,
            experience=profile.experience,
            language_level=profile.language_level,
            profile_context=vulnerability_context(profile),
        )
        if not result.ok:
            raise RuntimeError(f"question synthesis failed ({result.failure}): {result.detail}")
        question_text, tips = parse_question_response(result.text)
        question = InterviewQuestion(
            question=question_text,
            category=category,
            difficulty=difficulty,
            tips=tips,
            job_sectors=[profile.job_sector],
        )
        self._bank[category].append(question)
        return question

    async def generate_sequence(
        self,
        profile: UserProfile,
        count: int,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> List[InterviewQuestion]:
        """Introduction first, then profile-relevant categories, then a conclusion for long runs."""

        questions: List[InterviewQuestion] = []
        try:
            questions.append(await self.get_adapted_question(profile, "introduction", cancel=cancel))
            pool = relevant_categories(profile)
            remaining = count - 1
            while remaining > 0 and pool:
                category = pool.pop(self._rng.randrange(len(pool)))
                questions.append(await self.get_adapted_question(profile, category, cancel=cancel))
                if not pool:
                    pool = [c for c in QUESTION_CATEGORIES if c != "introduction"]
                remaining -= 1
            if count >= 5 and not any(q.category == "conclusion" for q in questions):
                questions.append(await self.get_adapted_question(profile, "conclusion", cancel=cancel))
            return questions
        except Exception as exc:  # noqa: BLE001
            logger.error("Erreur lors de la génération de la séquence d'entretien: %s", exc)
            if not questions:
                questions.append(
                    InterviewQuestion(
                        question=INTRO_FALLBACK,
                        category="introduction",
                        difficulty="Moyen",
                        tips=INTRO_FALLBACK_TIP,
                    )
                )
            return questions


__all__ = [
    "FALLBACK_TIP",
    "INTRO_FALLBACK",
    "INTRO_FALLBACK_TIP",
    "QuestionGenerator",
    "determine_difficulty",
    "parse_question_response",
    "relevant_categories",
]
