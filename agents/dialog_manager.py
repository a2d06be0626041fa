"""Per-message entry point of the interview coach.

``DialogManager.handle_message`` loads the user's session, decodes the raw
text once into a :class:`services.commands.Command` and routes it to the
menu dispatcher, the evaluation flow, the simulation controls, the profile
update flow or the stage-aware free-text conversation. Every reply is logged
as an interaction; unexpected errors become an apology with the main menu.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from agents import prompts
from agents.menu_dispatcher import LAST_TIP_KEY, MenuDispatcher
from agents.profile_evaluator import ProfileEvaluator
from agents.question_generator import QuestionGenerator
from agents.types import InterviewSession, Stage
from config import Settings, settings as default_settings
from llm_gateway import ChatModel
from observability import log_error, log_interaction, log_transition
from services import menus
from services.commands import Command, CommandKind, decode
from services.menus import Menu
from services.sessions import SessionStore

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Bonjour ! Je suis votre assistant virtuel pour vous aider à préparer vos entretiens d'embauche. "
    "Comment puis-je vous aider aujourd'hui ?"
)
APOLOGY = "Désolé, j'ai rencontré un problème. Pouvez-vous réessayer?"
PAUSE_MESSAGE = (
    "Simulation en pause. Prenez votre temps et cliquez sur 'Continuer' quand vous serez prêt à reprendre."
)
REPEAT_PREFIX = "Voici à nouveau la question:"
UNKNOWN_CONTROL = "Je n'ai pas compris votre sélection."
TIPS_INTRO = "Voici quelques conseils pour les questions qui vous attendent :"
DEFAULT_QUESTION = "Pourriez-vous me parler de votre expérience professionnelle ?"
CONTINUE_WINDOW = 5

TRANSITION_MESSAGES: Dict[Stage, str] = {
    Stage.PREPARATION: "Très bien ! Passons maintenant à l'étape de préparation pour votre entretien.",
    Stage.SIMULATION: (
        "Vous êtes prêt pour simuler un entretien ! Je vais maintenant jouer le rôle d'un recruteur "
        "et vous poser des questions."
    ),
    Stage.FEEDBACK: "Félicitations pour cette simulation ! Passons maintenant au feedback sur votre performance.",
}
DEFAULT_TRANSITION = "Passons à l'étape suivante."

# option literal -> (profile attribute, label shown to the user)
PROFILE_FIELDS: Dict[str, Tuple[str, str]] = {
    menus.FIELD_SECTOR: ("job_sector", "secteur d'activité"),
    menus.FIELD_EXPERIENCE: ("experience", "niveau d'expérience"),
    menus.FIELD_LANGUAGE: ("language_level", "niveau de langue"),
    menus.FIELD_DIGITAL: ("digital_skill_level", "niveau de compétences numériques"),
}
_FIELD_LABELS: Dict[str, str] = {attr: label for attr, label in PROFILE_FIELDS.values()}


class Reply(BaseModel):
    """Text returned to the channel plus the buttons to offer next."""

    text: str
    menu: Optional[Menu] = None

    @property
    def actions(self) -> List[str]:
        return list(self.menu.options) if self.menu else []


def last_question(session: InterviewSession) -> str:
    """Newest assistant turn that is not a menu or control prompt."""

    for message in reversed(session.history):
        if message.role != "assistant":
            continue
        if "Comment souhaitez-vous continuer" in message.content or "Menu" in message.content:
            continue
        return message.content
    return DEFAULT_QUESTION


def _abandon_flows(session: InterviewSession) -> None:
    if session.profile.current_state != "menu":
        session.profile.current_state = "menu"


class DialogManager:
    def __init__(
        self,
        store: SessionStore,
        llm: ChatModel,
        *,
        config: Optional[Settings] = None,
        questions: Optional[QuestionGenerator] = None,
        evaluator: Optional[ProfileEvaluator] = None,
        dispatcher: Optional[MenuDispatcher] = None,
        knowledge_base: Optional[str] = None,
    ) -> None:
        self._store = store
        self._llm = llm
        self._config = config if config is not None else default_settings
        self._questions = questions if questions is not None else QuestionGenerator(llm)
        self._evaluator = evaluator if evaluator is not None else ProfileEvaluator(llm)
        self._dispatcher = (
            dispatcher if dispatcher is not None else MenuDispatcher(llm, self._evaluator, self._questions)
        )
        if knowledge_base is None:
            knowledge_base = prompts.load_knowledge_base(self._config.KNOWLEDGE_BASE_PATH)
        self._knowledge_base = knowledge_base

    def welcome(self, user_id: str) -> Reply:
        session = self._store.get_or_create(user_id)
        session.add_bot_message(WELCOME_MESSAGE)
        logger.info("Message de bienvenue envoyé à l'utilisateur %s", user_id)
        return Reply(text=WELCOME_MESSAGE, menu=menus.MAIN)

    async def handle_message(
        self,
        user_id: str,
        text: str,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Reply:
        session = self._store.get_or_create(user_id)
        logger.info("Message reçu de l'utilisateur %s: %s", user_id, text)
        try:
            command = decode(text, session)
            reply = await self._route(command, session, cancel)
        except Exception as exc:  # noqa: BLE001
            log_error(user_id, "Erreur lors du traitement du message", exc)
            reply = Reply(text=APOLOGY, menu=menus.MAIN)
        log_interaction(user_id, text, reply.text, session.stage.value)
        return reply

    async def _route(
        self,
        command: Command,
        session: InterviewSession,
        cancel: Optional[asyncio.Event],
    ) -> Reply:
        kind = command.kind
        if kind is CommandKind.HOME:
            self._store.update(session.user_id, _abandon_flows)
            return Reply(text=menus.MAIN_MENU_REPLY, menu=menus.MAIN)
        if kind is CommandKind.MAIN_MENU:
            text, menu = await self._dispatcher.main_menu(command.text, session, cancel=cancel)
            return Reply(text=text, menu=menu)
        if kind is CommandKind.PREPARATION_MENU:
            text, menu = await self._dispatcher.preparation_menu(command.text, session, cancel=cancel)
            return Reply(text=text, menu=menu)
        if kind is CommandKind.SIMULATION_MENU:
            text, menu = await self._dispatcher.simulation_menu(command.text, session, cancel=cancel)
            return Reply(text=text, menu=menu)
        if kind is CommandKind.SIMULATION_CONTROL:
            return await self._simulation_control(command.text, session, cancel)
        if kind is CommandKind.EVALUATION:
            text, menu = await self._evaluator.step(session.profile, command.text, cancel=cancel)
            session.touch()
            return Reply(text=text, menu=menu)
        if kind is CommandKind.PROFILE_FIELD:
            return self._select_profile_field(command.text, session)
        if kind is CommandKind.PROFILE_VALUE:
            return self._store_profile_value(command.text, session)
        return await self._free_text(command.text, session, cancel)

    # -- simulation controls -------------------------------------------------

    async def _simulation_control(
        self,
        text: str,
        session: InterviewSession,
        cancel: Optional[asyncio.Event],
    ) -> Reply:
        if text in (menus.CONTINUE, menus.READY):
            question = await self._next_question(session, cancel)
            session.add_bot_message(question)
            return Reply(text=question, menu=menus.SIMULATION_RESPONSE)
        if text in (menus.PAUSE, menus.ONE_MINUTE):
            return Reply(text=PAUSE_MESSAGE, menu=menus.SIMULATION_RESPONSE)
        if text == menus.ASK_ADVICE:
            return Reply(text=await self._advice(session, cancel), menu=menus.SIMULATION_RESPONSE)
        if text == menus.TIPS_BEFORE:
            upcoming = session.prepared_questions[session.prepared_cursor :]
            if upcoming:
                lines = [TIPS_INTRO, ""] + [f"• {prepared.tips}" for prepared in upcoming]
                return Reply(text="\n".join(lines), menu=menus.READY_OPTIONS)
            return Reply(text=await self._advice(session, cancel), menu=menus.SIMULATION_RESPONSE)
        if text == menus.REPEAT_QUESTION:
            return Reply(text=f"{REPEAT_PREFIX}\n\n{last_question(session)}", menu=menus.SIMULATION_RESPONSE)
        return Reply(text=UNKNOWN_CONTROL, menu=menus.SIMULATION_RESPONSE)

    async def _next_question(self, session: InterviewSession, cancel: Optional[asyncio.Event]) -> str:
        prepared = session.next_prepared_question()
        if prepared is not None:
            session.feedback[LAST_TIP_KEY] = prepared.tips
            return prepared.question
        result = await prompts.ask(
            self._llm,
            prompts.NEXT_QUESTION,
            cancel=cancel,
            job_sector=session.profile.job_sector,
            experience=session.profile.experience,
            history=prompts.history_payload(session.recent_history(CONTINUE_WINDOW)),
        )
        return result.text_or()

    async def _advice(self, session: InterviewSession, cancel: Optional[asyncio.Event]) -> str:
        result = await prompts.ask(self._llm, prompts.QUESTION_ADVICE, cancel=cancel, question=last_question(session))
        return result.text_or()

    # -- profile update ------------------------------------------------------

    def _select_profile_field(self, text: str, session: InterviewSession) -> Reply:
        attr, label = PROFILE_FIELDS[text]
        session.profile.current_state = f"update:{attr}"
        session.touch()
        current = getattr(session.profile, attr)
        return Reply(
            text=f"Votre {label} actuel est « {current} ». Quelle est la nouvelle valeur ?",
            menu=menus.HOME_ONLY,
        )

    def _store_profile_value(self, text: str, session: InterviewSession) -> Reply:
        attr = session.profile.current_state.split(":", 1)[1]
        label = _FIELD_LABELS.get(attr)
        value = text.strip()
        if label is None:
            session.profile.current_state = "menu"
            return Reply(text=menus.MAIN_MENU_REPLY, menu=menus.MAIN)
        if not value:
            return Reply(text="Quelle est la nouvelle valeur ?", menu=menus.HOME_ONLY)

        def _apply(target: InterviewSession) -> None:
            setattr(target.profile, attr, value)
            target.profile.saved_responses[attr] = value
            target.profile.current_state = "menu"

        self._store.update(session.user_id, _apply)
        log_interaction(session.user_id, value, f"Profil mis à jour: {attr}", "Profil")
        return Reply(text=f"C'est noté ! Votre {label} est maintenant « {value} ».", menu=menus.MAIN)

    # -- free text -----------------------------------------------------------

    async def _free_text(self, text: str, session: InterviewSession, cancel: Optional[asyncio.Event]) -> Reply:
        session.add_user_message(text)
        stage = session.stage
        profile = session.profile
        result = await prompts.ask(
            self._llm,
            prompts.STAGE_CHAT,
            cancel=cancel,
            knowledge_base=self._knowledge_base,
            language_level=profile.language_level,
            job_sector=profile.job_sector,
            experience=profile.experience,
            digital_skill_level=profile.digital_skill_level,
            stage_instructions=prompts.STAGE_INSTRUCTIONS[stage],
            history=prompts.history_payload(session.recent_history(self._config.HISTORY_WINDOW)),
        )
        if not result.ok:
            log_error(session.user_id, f"Échec de la génération de réponse ({result.failure}): {result.detail}")
            return Reply(text=result.text_or(), menu=menus.stage_menu(stage))
        session.add_bot_message(result.text)

        if len(session.history) >= self._config.ADVANCE_MIN_HISTORY and await self._should_advance(session, cancel):
            previous = session.set_stage(stage.next())
            log_transition(session.user_id, previous.value, session.stage.value)
            message = TRANSITION_MESSAGES.get(session.stage, DEFAULT_TRANSITION)
            return Reply(text=message, menu=menus.stage_menu(session.stage))
        return Reply(text=result.text, menu=menus.stage_menu(stage))

    async def _should_advance(self, session: InterviewSession, cancel: Optional[asyncio.Event]) -> bool:
        result = await prompts.ask(
            self._llm,
            prompts.ADVANCE_CHECK,
            cancel=cancel,
            stage=session.stage.value,
            history=prompts.history_payload(session.recent_history(self._config.HISTORY_WINDOW)),
        )
        return result.ok and "OUI" in result.text.upper()


__all__ = ["APOLOGY", "DialogManager", "Reply", "WELCOME_MESSAGE", "last_question"]
