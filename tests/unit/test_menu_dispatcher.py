import asyncio

from conftest import FakeLlm

from agents.feedback import SUMMARY_HEADER
from agents.menu_dispatcher import (
    NOT_ENOUGH_HISTORY,
    NOT_UNDERSTOOD_MAIN,
    NOT_UNDERSTOOD_PREPARATION,
    NOT_UNDERSTOOD_SIMULATION,
    MenuDispatcher,
)
from agents.profile_evaluator import ProfileEvaluator
from agents.question_generator import QuestionGenerator
from agents.types import Stage
from services import menus
from services.sessions import new_session


def _dispatcher(llm):
    return MenuDispatcher(llm, ProfileEvaluator(llm), QuestionGenerator(llm))


def _question_llm():
    return FakeLlm(responder=lambda system, messages: "QUESTION: Parlez-moi de vous. CONSEIL: Soyez bref.")


def test_unknown_selection_keeps_level_menu():
    dispatcher = _dispatcher(FakeLlm())
    session = new_session("u1")
    session.stage = Stage.PREPARATION

    first = asyncio.run(dispatcher.preparation_menu("🔙 Retour préparation", session))
    second = asyncio.run(dispatcher.preparation_menu("🔙 Retour préparation", session))

    assert first == (NOT_UNDERSTOOD_PREPARATION, menus.PREPARATION)
    assert second == first
    assert asyncio.run(dispatcher.simulation_menu("🎮 inconnu", session)) == (NOT_UNDERSTOOD_SIMULATION, menus.SIMULATION)
    assert asyncio.run(dispatcher.main_menu("📋 inconnu", session)) == (NOT_UNDERSTOOD_MAIN, menus.MAIN)


def test_start_preparation_adapts_to_evaluated_profile():
    dispatcher = _dispatcher(FakeLlm())
    session = new_session("u1")
    session.profile.is_profile_evaluated = True
    session.profile.anxiety_level = "élevé"
    session.profile.experience_level = "débutant"

    text, menu = asyncio.run(dispatcher.main_menu(menus.START_PREPARATION, session))

    assert session.stage is Stage.PREPARATION
    assert menu is menus.PREPARATION
    assert "étape par étape" in text
    assert "par les bases" in text
    assert text.endswith("Voici quelques options pour vous aider :")


def test_simulate_interview_plain_profile():
    dispatcher = _dispatcher(FakeLlm())
    session = new_session("u1")

    text, menu = asyncio.run(dispatcher.main_menu(menus.SIMULATE_INTERVIEW, session))

    assert text == "C'est parti pour une simulation d'entretien ! Quel type de simulation souhaitez-vous ?"
    assert menu is menus.SIMULATION
    assert session.stage is Stage.SIMULATION


def test_feedback_without_history():
    dispatcher = _dispatcher(FakeLlm())
    session = new_session("u1")

    text, menu = asyncio.run(dispatcher.main_menu(menus.VIEW_FEEDBACK, session))

    assert text == NOT_ENOUGH_HISTORY
    assert menu is menus.MAIN
    assert session.stage is Stage.FEEDBACK


def test_full_simulation_then_feedback_uses_stored_summary():
    llm = _question_llm()
    dispatcher = _dispatcher(llm)
    session = new_session("u1")
    session.stage = Stage.SIMULATION

    text, menu = asyncio.run(dispatcher.simulation_menu(menus.FULL_SIMULATION, session))
    assert menu is menus.READY_OPTIONS
    assert "8 questions" in text
    assert len(session.prepared_questions) >= 8
    assert session.prepared_cursor == 0
    assert session.history[-1].role == "system"
    assert session.history[-1].content.startswith("Configuration: simulation complète")

    calls_before = len(llm.calls)
    summary, follow_up = asyncio.run(dispatcher.main_menu(menus.VIEW_FEEDBACK, session))

    assert len(llm.calls) == calls_before
    assert summary.startswith(SUMMARY_HEADER)
    assert 'Pour la question "Parlez-moi de vous."' in summary
    assert follow_up is menus.FEEDBACK_OPTIONS


def test_short_simulation_prepares_three_questions():
    dispatcher = _dispatcher(_question_llm())
    session = new_session("u1")

    text, menu = asyncio.run(dispatcher.simulation_menu(menus.SHORT_SIMULATION, session))

    assert len(session.prepared_questions) == 3
    assert menu is menus.READY_OPTIONS
    assert text.startswith("Parfait, nous allons faire une simulation courte")


def test_start_simulation_appends_intro_and_question():
    dispatcher = _dispatcher(_question_llm())
    session = new_session("u1")

    text, menu = asyncio.run(dispatcher.simulation_menu(menus.START_SIMULATION, session))

    assert menu is menus.SIMULATION_RESPONSE
    assert text.endswith("\n\nParlez-moi de vous.")
    assert [m.role for m in session.history] == ["assistant", "assistant"]
    assert session.feedback["dernière_question_conseil"] == "Soyez bref."


def test_llm_backed_preparation_options():
    llm = FakeLlm(responder=lambda system, messages: f"réponse pour: {messages[-1]['content']}")
    dispatcher = _dispatcher(llm)
    session = new_session("u1")
    session.profile.job_sector = "Logistique"

    text, menu = asyncio.run(dispatcher.preparation_menu(menus.FREQUENT_QUESTIONS, session))
    assert "secteur Logistique" in text
    assert menu is menus.FAQ_FOLLOW_UP

    text, menu = asyncio.run(dispatcher.preparation_menu(menus.RESEARCH_COMPANY, session))
    assert menu is menus.RESEARCH_FOLLOW_UP

    text, menu = asyncio.run(dispatcher.preparation_menu(menus.PRESENTATION_TIPS, session))
    assert "Logistique" in llm.calls[-1]["system"]
    assert menu is menus.PREPARATION


def test_evaluate_profile_and_update_profile():
    dispatcher = _dispatcher(FakeLlm())
    session = new_session("u1")

    text, menu = asyncio.run(dispatcher.main_menu(menus.EVALUATE_PROFILE, session))
    assert session.profile.current_state == "evaluation"
    assert menu is menus.EVALUATION_START

    text, menu = asyncio.run(dispatcher.main_menu(menus.UPDATE_PROFILE, session))
    assert text == "Mettons à jour votre profil. Qu'aimeriez-vous modifier ?"
    assert menu is menus.PROFILE_UPDATE


def test_general_advice_failure_returns_apology():
    from llm_gateway import TECHNICAL_APOLOGY, LlmResult

    dispatcher = _dispatcher(FakeLlm(responder=lambda system, messages: LlmResult.failed("transport", "down")))
    session = new_session("u1")

    text, menu = asyncio.run(dispatcher.main_menu(menus.GENERAL_ADVICE, session))

    assert text == TECHNICAL_APOLOGY
    assert menu is menus.MAIN
