import asyncio

from conftest import FakeLlm

from agents.feedback import SUMMARY_HEADER, generate_feedback
from agents.types import PreparedQuestion
from services.sessions import new_session


def test_stored_summary_lists_notes_then_question_tips():
    session = new_session("u1")
    session.feedback["dernière_question_conseil"] = "Respirez"
    session.prepared_questions = [
        PreparedQuestion(id="a", question="Pourquoi nous ?", tips="Parlez de l'entreprise."),
        PreparedQuestion(id="b", question="Vos qualités ?", tips="Donnez un exemple."),
    ]
    llm = FakeLlm()

    text = asyncio.run(generate_feedback(session, llm))

    assert text.startswith(SUMMARY_HEADER)
    assert "• dernière_question_conseil : Respirez\n" in text
    assert "Conseils pour améliorer vos réponses :" in text
    assert text.index('• Pour la question "Pourquoi nous ?" : Parlez de l\'entreprise.') < text.index(
        '• Pour la question "Vos qualités ?"'
    )
    assert llm.calls == []


def test_narrative_uses_last_ten_messages_and_profile_context():
    session = new_session("u1")
    session.profile.is_profile_evaluated = True
    session.profile.anxiety_level = "élevé"
    for i in range(14):
        session.add_message("user" if i % 2 == 0 else "assistant", f"tour {i}")
    snapshot = session.model_dump()
    llm = FakeLlm(replies=["1. Points forts..."])

    text = asyncio.run(generate_feedback(session, llm))

    assert text == "1. Points forts..."
    call = llm.calls[0]
    assert "Niveau d'anxiété: élevé" in call["system"]
    assert [m["content"] for m in call["messages"][:-1]] == [f"tour {i}" for i in range(4, 14)]
    assert call["messages"][-1]["content"] == "Pouvez-vous me donner un feedback sur mes réponses en entretien ?"
    assert session.model_dump() == snapshot
