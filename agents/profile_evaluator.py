"""Eight-question vulnerability questionnaire and its LLM analysis."""
from __future__ import annotations

import asyncio
import logging
import re
from typing import List, Optional, Tuple

from agents.prompts import PROFILE_ANALYSIS, ask
from agents.types import UserProfile
from llm_gateway import ChatModel
from observability import log_error, log_interaction, log_transition
from services import menus
from services.menus import Menu

logger = logging.getLogger(__name__)

EVALUATION_QUESTIONS: List[str] = [
    "Pour commencer, quel est ton niveau de familiarité avec les entretiens d'embauche ? Est-ce une expérience "
    "nouvelle pour toi ou en as-tu déjà passé ?",
    "Y a-t-il des aspects spécifiques des entretiens qui t'inquiètent le plus en ce moment ? (Par exemple : parler "
    "de toi, répondre à des questions difficiles, gérer le stress ?)",
    "As-tu déjà rencontré des obstacles ou des difficultés particulières lors de tes recherches d'emploi ou "
    "d'entretiens précédents ?",
    "Te sens-tu à l'aise pour parler de tes expériences professionnelles ou de ton parcours jusqu'à présent ? Y "
    "a-t-il des périodes que tu préférerais aborder avec prudence ?",
    "Y a-t-il des aménagements ou des besoins spécifiques dont tu aimerais que nous tenions compte pour rendre "
    "cette préparation efficace pour toi ?",
    "Comment te sens-tu généralement face à l'idée de te \"vendre\" ou de mettre en avant tes compétences et "
    "qualités ?",
    "As-tu des appréhensions concernant les questions sur d'éventuelles \"lacunes\" dans ton parcours (périodes "
    "sans emploi, changements fréquents) ?",
    "Préfères-tu t'entraîner sur des situations très concrètes et réalistes, ou plutôt des scénarios progressifs "
    "et plus simples au début ?",
]
MAX_STEP = len(EVALUATION_QUESTIONS)

INTRO_MESSAGE = (
    "Bienvenue dans l'évaluation de profil ! Je vais te poser quelques questions pour mieux comprendre tes besoins "
    "et adapter nos sessions d'entraînement. Tu peux répondre simplement et honnêtement. Prêt à commencer ?"
)
COMPLETION_PREFIX = "Merci pour tes réponses ! J'ai maintenant une meilleure compréhension de tes besoins. "
COMPLETION_ADAPTED = "J'ai adapté nos futures sessions selon ton profil."
COMPLETION_STANDARD = "Nous allons utiliser un profil standard pour commencer."

SKIP_COMMANDS = ("Passer l'évaluation", "Passer cette étape")
STANDARD = "standard"

_QUESTION_KEY = re.compile(r"^Question(\d+)$")

StepReply = Tuple[str, Optional[Menu]]


def extract_profile_data(analysis: str, label: str) -> str:
    """Return the text after the colon on the line holding ``label``."""

    if not analysis:
        return STANDARD
    index = analysis.lower().find(label.lower())
    if index < 0:
        return STANDARD
    line = analysis[index:].split("\n", 1)[0]
    _, colon, value = line.partition(":")
    if not colon:
        return STANDARD
    return value.strip()


def start(profile: UserProfile) -> StepReply:
    log_transition(profile.user_id, "Menu Principal", "Évaluation")
    profile.current_state = "evaluation"
    profile.evaluation_step = 0
    profile.vulnerability_profile = {}
    return INTRO_MESSAGE, menus.EVALUATION_START


def _answers_prompt(profile: UserProfile) -> str:
    lines: List[str] = []
    for key, answer in profile.vulnerability_profile.items():
        match = _QUESTION_KEY.match(key)
        if not match:
            continue
        index = int(match.group(1))
        if 1 <= index <= MAX_STEP:
            lines.append(f"Question: {EVALUATION_QUESTIONS[index - 1]}\nRéponse: {answer}\n")
    return "\n".join(lines)


class ProfileEvaluator:
    """Walk a profile through the questionnaire one message at a time."""

    def __init__(self, llm: ChatModel) -> None:
        self._llm = llm

    def start(self, profile: UserProfile) -> StepReply:
        return start(profile)

    async def step(
        self,
        profile: UserProfile,
        message: str,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> StepReply:
        if any(command in message for command in SKIP_COMMANDS):
            return await self.complete(profile, cancel=cancel)

        step = profile.evaluation_step
        if step == 0:
            profile.evaluation_step = 1
            return EVALUATION_QUESTIONS[0], None

        profile.vulnerability_profile[f"Question{step}"] = message
        log_interaction(profile.user_id, message, "Réponse enregistrée", "Évaluation")
        if step < MAX_STEP:
            profile.evaluation_step = step + 1
            return EVALUATION_QUESTIONS[step], None
        return await self.complete(profile, cancel=cancel)

    async def complete(self, profile: UserProfile, *, cancel: Optional[asyncio.Event] = None) -> StepReply:
        await self.analyze(profile, cancel=cancel)
        profile.current_state = "menu"
        text = COMPLETION_PREFIX + (COMPLETION_ADAPTED if profile.vulnerability_profile else COMPLETION_STANDARD)
        log_transition(profile.user_id, "Évaluation", "Menu Principal")
        return text, menus.EVALUATION_DONE

    async def analyze(self, profile: UserProfile, *, cancel: Optional[asyncio.Event] = None) -> None:
        """Classify recorded answers; failures leave the profile unevaluated."""

        if not profile.vulnerability_profile:
            return
        try:
            result = await ask(self._llm, PROFILE_ANALYSIS, cancel=cancel, answers=_answers_prompt(profile))
            if not result.ok:
                log_error(profile.user_id, f"Erreur lors de l'analyse du profil: {result.failure} {result.detail}")
                return
            analysis = result.text
            profile.analysis = analysis
            profile.experience_level = extract_profile_data(analysis, "Niveau d'expérience")
            profile.anxiety_level = extract_profile_data(analysis, "Niveau d'anxiété")
            profile.learning_preference = extract_profile_data(analysis, "Format d'apprentissage")
            profile.specific_needs = extract_profile_data(analysis, "Besoins d'adaptation")
            profile.profile_summary = extract_profile_data(analysis, "Résumé")
            profile.is_profile_evaluated = True
            log_interaction(
                profile.user_id,
                "Analyse du profil",
                f"Expérience={profile.experience_level}, Anxiété={profile.anxiety_level}",
                "Évaluation",
            )
        except Exception as exc:  # noqa: BLE001
            log_error(profile.user_id, f"Erreur lors de l'analyse du profil: {exc}", exc)


__all__ = [
    "EVALUATION_QUESTIONS",
    "ProfileEvaluator",
    "extract_profile_data",
    "start",
]
