"""Menu selection handling for the main, preparation and simulation levels.

Each entry point matches the selection by exact equality against its own
option literals and returns ``(text, menu)``. Unknown selections get a
"didn't understand" message together with the menu of the same level, so a
repeated unknown selection always lands on the same menu.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Tuple

from agents import prompts
from agents.feedback import generate_feedback, has_stored_feedback
from agents.profile_evaluator import ProfileEvaluator
from agents.question_generator import QuestionGenerator
from agents.types import InterviewSession, PreparedQuestion, Stage, UserProfile
from llm_gateway import ChatModel
from observability import log_transition
from services import menus
from services.menus import Menu

DispatchReply = Tuple[str, Optional[Menu]]

SHORT_SIMULATION_SIZE = 3
FULL_SIMULATION_SIZE = 8
FEEDBACK_MIN_HISTORY = 5

SIMULATION_INTRO = (
    "Je vais maintenant jouer le rôle d'un recruteur pour une simulation d'entretien. "
    "Je vais vous poser des questions et vous donner un feedback sur vos réponses. "
    "Commençons !"
)
LAST_TIP_KEY = "dernière_question_conseil"

NOT_UNDERSTOOD_MAIN = "Je n'ai pas compris votre sélection. Voici le menu principal :"
NOT_UNDERSTOOD_PREPARATION = "Je n'ai pas compris votre sélection. Voici les options de préparation :"
NOT_UNDERSTOOD_SIMULATION = "Je n'ai pas compris votre sélection. Voici les options de simulation :"
NOT_ENOUGH_HISTORY = (
    "Vous n'avez pas encore assez d'historique pour un feedback détaillé. "
    "Essayez d'abord une simulation d'entretien !"
)
UPDATE_PROFILE_PROMPT = "Mettons à jour votre profil. Qu'aimeriez-vous modifier ?"
PREPARE_ANSWERS_PROMPT = (
    "Préparons vos réponses aux questions typiques. Quel type de question souhaitez-vous préparer ?"
)
SHORT_SIMULATION_REPLY = (
    "Parfait, nous allons faire une simulation courte de 3 questions adaptées à votre profil. Prêt à commencer ?"
)
FULL_SIMULATION_REPLY = (
    "Nous allons faire une simulation complète de 8 questions adaptées à votre profil. "
    "Prenez votre temps pour répondre. Prêt à commencer ?"
)
THEME_PROMPT = "Quel aspect spécifique de l'entretien souhaitez-vous simuler ?"


def preparation_intro(profile: UserProfile) -> str:
    text = "Préparons-nous pour votre entretien ! "
    if profile.is_profile_evaluated:
        if "élevé" in profile.anxiety_level:
            text += "Ne vous inquiétez pas, nous allons procéder étape par étape, à votre rythme. "
        if "débutant" in profile.experience_level:
            text += "Nous commencerons par les bases pour vous mettre en confiance. "
    return text + "Voici quelques options pour vous aider :"


def simulation_intro(profile: UserProfile) -> str:
    text = "C'est parti pour une simulation d'entretien ! "
    if profile.is_profile_evaluated:
        if "progressif" in profile.learning_preference:
            text += (
                "Je vous propose de commencer par une simulation progressive avec des questions "
                "de difficulté croissante. "
            )
        elif "réaliste" in profile.learning_preference:
            text += (
                "Nous allons faire une simulation aussi réaliste que possible, "
                "pour vous préparer aux conditions réelles. "
            )
    return text + "Quel type de simulation souhaitez-vous ?"


class MenuDispatcher:
    """Route menu selections to canned replies or LLM explanations."""

    def __init__(self, llm: ChatModel, evaluator: ProfileEvaluator, questions: QuestionGenerator) -> None:
        self._llm = llm
        self._evaluator = evaluator
        self._questions = questions

    async def _llm_text(self, prompt, *, cancel: Optional[asyncio.Event] = None, **variables) -> str:
        result = await prompts.ask(self._llm, prompt, cancel=cancel, **variables)
        return result.text_or()

    def _enter(self, session: InterviewSession, stage: Stage) -> None:
        session.set_stage(stage)
        log_transition(session.user_id, "MenuPrincipal", stage.value)

    async def main_menu(
        self,
        selection: str,
        session: InterviewSession,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> DispatchReply:
        profile = session.profile
        if selection == menus.EVALUATE_PROFILE:
            return self._evaluator.start(profile)
        if selection == menus.START_PREPARATION:
            self._enter(session, Stage.PREPARATION)
            return preparation_intro(profile), menus.PREPARATION
        if selection == menus.SIMULATE_INTERVIEW:
            self._enter(session, Stage.SIMULATION)
            return simulation_intro(profile), menus.SIMULATION
        if selection == menus.VIEW_FEEDBACK:
            self._enter(session, Stage.FEEDBACK)
            if has_stored_feedback(session) or len(session.history) > FEEDBACK_MIN_HISTORY:
                return await generate_feedback(session, self._llm, cancel=cancel), menus.FEEDBACK_OPTIONS
            return NOT_ENOUGH_HISTORY, menus.MAIN
        if selection == menus.GENERAL_ADVICE:
            text = await self._llm_text(
                prompts.GENERAL_ADVICE,
                cancel=cancel,
                language_level=profile.language_level,
                digital_skill_level=profile.digital_skill_level,
            )
            return text, menus.MAIN
        if selection == menus.UPDATE_PROFILE:
            return UPDATE_PROFILE_PROMPT, menus.PROFILE_UPDATE
        return NOT_UNDERSTOOD_MAIN, menus.MAIN

    async def preparation_menu(
        self,
        selection: str,
        session: InterviewSession,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> DispatchReply:
        sector = session.profile.job_sector
        if selection == menus.RESEARCH_COMPANY:
            return await self._llm_text(prompts.COMPANY_RESEARCH, cancel=cancel), menus.RESEARCH_FOLLOW_UP
        if selection == menus.FREQUENT_QUESTIONS:
            text = await self._llm_text(prompts.FREQUENT_QUESTIONS, cancel=cancel, job_sector=sector)
            return text, menus.FAQ_FOLLOW_UP
        if selection == menus.PRESENTATION_TIPS:
            text = await self._llm_text(prompts.PRESENTATION, cancel=cancel, job_sector=sector)
            return text, menus.PREPARATION
        if selection == menus.PREPARE_ANSWERS:
            return PREPARE_ANSWERS_PROMPT, menus.QUESTION_TYPES
        if selection == menus.BACK_TO_MAIN:
            return menus.MAIN_MENU_REPLY, menus.MAIN
        return NOT_UNDERSTOOD_PREPARATION, menus.PREPARATION

    async def simulation_menu(
        self,
        selection: str,
        session: InterviewSession,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> DispatchReply:
        if selection == menus.START_SIMULATION:
            session.add_bot_message(SIMULATION_INTRO)
            question = await self._questions.get_adapted_question(session.profile, "introduction", cancel=cancel)
            session.feedback[LAST_TIP_KEY] = question.tips
            session.add_bot_message(question.question)
            return f"{SIMULATION_INTRO}\n\n{question.question}", menus.SIMULATION_RESPONSE
        if selection == menus.SHORT_SIMULATION:
            await self._prepare(session, SHORT_SIMULATION_SIZE, "simulation courte, 3-5 questions", cancel=cancel)
            return SHORT_SIMULATION_REPLY, menus.READY_OPTIONS
        if selection == menus.FULL_SIMULATION:
            await self._prepare(session, FULL_SIMULATION_SIZE, "simulation complète, 8-10 questions", cancel=cancel)
            return FULL_SIMULATION_REPLY, menus.READY_OPTIONS
        if selection == menus.THEME_SIMULATION:
            return THEME_PROMPT, menus.SIMULATION_THEMES
        if selection == menus.BACK_TO_MAIN:
            return menus.MAIN_MENU_REPLY, menus.MAIN
        return NOT_UNDERSTOOD_SIMULATION, menus.SIMULATION

    async def _prepare(
        self,
        session: InterviewSession,
        count: int,
        label: str,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        """Generate the whole question run before the first answer."""

        profile = session.profile
        session.add_message("system", f"Configuration: {label}, niveau adapté: {profile.language_level}")
        sequence = await self._questions.generate_sequence(profile, count, cancel=cancel)
        session.prepared_questions = [PreparedQuestion.from_question(q) for q in sequence]
        session.prepared_cursor = 0
        session.touch()


__all__ = ["DispatchReply", "MenuDispatcher", "preparation_intro", "simulation_intro"]
