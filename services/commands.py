"""Decode raw user text into a routed command."""
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel

from agents.types import InterviewSession, Stage
from services import menus


class CommandKind(str, Enum):
    HOME = "home"
    MAIN_MENU = "main_menu"
    PREPARATION_MENU = "preparation_menu"
    SIMULATION_MENU = "simulation_menu"
    SIMULATION_CONTROL = "simulation_control"
    EVALUATION = "evaluation"
    PROFILE_FIELD = "profile_field"
    PROFILE_VALUE = "profile_value"
    FREE_TEXT = "free_text"


class Command(BaseModel):
    kind: CommandKind
    text: str


MAIN_MENU_GLYPHS: Tuple[str, ...] = ("👤", "📋", "💬", "📊", "❓", "⚙️")
PREPARATION_GLYPHS: Tuple[str, ...] = ("🔍", "🗣️", "👔", "📝")
SIMULATION_GLYPHS: Tuple[str, ...] = ("🚀", "⏱️", "⏳", "🎮")
SIMULATION_CONTROL_GLYPHS: Tuple[str, ...] = ("✅", "⏸️", "🔄")
HINT_GLYPH = "❓"

# Exact literals whose glyph would otherwise route them to the wrong level.
_LITERALS: Dict[str, Tuple[CommandKind, str]] = {
    "Commencer la préparation": (CommandKind.MAIN_MENU, menus.START_PREPARATION),
    "Simuler un entretien": (CommandKind.MAIN_MENU, menus.SIMULATE_INTERVIEW),
    "Conseils généraux": (CommandKind.MAIN_MENU, menus.GENERAL_ADVICE),
    menus.GENERAL_ADVICE: (CommandKind.MAIN_MENU, menus.GENERAL_ADVICE),
    menus.NEW_SIMULATION: (CommandKind.MAIN_MENU, menus.SIMULATE_INTERVIEW),
    menus.FIELD_SECTOR: (CommandKind.PROFILE_FIELD, menus.FIELD_SECTOR),
    menus.FIELD_EXPERIENCE: (CommandKind.PROFILE_FIELD, menus.FIELD_EXPERIENCE),
    menus.FIELD_LANGUAGE: (CommandKind.PROFILE_FIELD, menus.FIELD_LANGUAGE),
    menus.FIELD_DIGITAL: (CommandKind.PROFILE_FIELD, menus.FIELD_DIGITAL),
    menus.READY: (CommandKind.SIMULATION_CONTROL, menus.READY),
    menus.ONE_MINUTE: (CommandKind.SIMULATION_CONTROL, menus.ONE_MINUTE),
    menus.TIPS_BEFORE: (CommandKind.SIMULATION_CONTROL, menus.TIPS_BEFORE),
    menus.ASK_ADVICE: (CommandKind.SIMULATION_CONTROL, menus.ASK_ADVICE),
}


def is_home(text: str) -> bool:
    return "Menu principal" in text or text == "🏠"


def decode(text: str, session: InterviewSession) -> Command:
    """Map one inbound message to the handler that owns it.

    Precedence: home, in-progress evaluation or profile update, exact
    literals, stage-scoped menus, simulation controls, main-menu glyphs,
    free text. Stage-scoped controls win over the global ❓ glyph.
    """

    stage = session.stage
    state = session.profile.current_state

    if text == menus.BACK_TO_MAIN and stage == Stage.PREPARATION:
        return Command(kind=CommandKind.PREPARATION_MENU, text=text)
    if text == menus.BACK_TO_MAIN and stage == Stage.SIMULATION:
        return Command(kind=CommandKind.SIMULATION_MENU, text=text)
    if is_home(text) or text == menus.BACK_TO_MAIN:
        return Command(kind=CommandKind.HOME, text=text)

    if state == "evaluation":
        return Command(kind=CommandKind.EVALUATION, text=text)
    if state.startswith("update:"):
        return Command(kind=CommandKind.PROFILE_VALUE, text=text)

    literal = _LITERALS.get(text.strip())
    if literal is not None:
        kind, canonical = literal
        return Command(kind=kind, text=canonical)

    if stage == Stage.PREPARATION and (text.startswith(PREPARATION_GLYPHS) or "Retour préparation" in text):
        return Command(kind=CommandKind.PREPARATION_MENU, text=text)
    if stage == Stage.SIMULATION and text.startswith(SIMULATION_GLYPHS):
        return Command(kind=CommandKind.SIMULATION_MENU, text=text)

    if text.startswith(SIMULATION_CONTROL_GLYPHS):
        return Command(kind=CommandKind.SIMULATION_CONTROL, text=text)
    if stage == Stage.SIMULATION and text.startswith(HINT_GLYPH):
        return Command(kind=CommandKind.SIMULATION_CONTROL, text=text)

    if text.startswith(MAIN_MENU_GLYPHS):
        return Command(kind=CommandKind.MAIN_MENU, text=text)

    return Command(kind=CommandKind.FREE_TEXT, text=text)


__all__ = ["Command", "CommandKind", "decode", "is_home"]
