from conftest import FakeLlm
from fastapi.testclient import TestClient

from agents.dialog_manager import WELCOME_MESSAGE
from api_server import create_app
from services import menus
from services.sessions import InMemorySessionStore

BOT = {"id": "coach-bot", "name": "Coach"}
CONVERSATION = {"id": "conv-1"}


def _client(store):
    app = create_app(llm=FakeLlm(), store=store, knowledge_base="Guide de test")
    return TestClient(app)


def test_conversation_update_welcomes_new_members_only():
    store = InMemorySessionStore()
    activity = {
        "type": "conversationUpdate",
        "channelId": "emulator",
        "recipient": BOT,
        "conversation": CONVERSATION,
        "membersAdded": [BOT, {"id": "alice"}],
    }
    with _client(store) as client:
        resp = client.post("/api/messages", json=activity)

    assert resp.status_code == 200
    replies = resp.json()["activities"]
    assert [r["text"] for r in replies] == [WELCOME_MESSAGE, menus.MAIN.prompt]
    assert replies[0]["recipient"]["id"] == "alice"
    assert replies[0]["from"]["id"] == "coach-bot"
    assert "suggestedActions" not in replies[0]
    assert [a["title"] for a in replies[1]["suggestedActions"]["actions"]] == menus.MAIN.options
    assert store.get("alice") is not None
    assert store.get("coach-bot") is None


def test_message_activity_is_answered_inline():
    store = InMemorySessionStore()
    activity = {
        "type": "message",
        "id": "act-7",
        "text": "🏠",
        "channelId": "webchat",
        "from": {"id": "bob"},
        "recipient": BOT,
        "conversation": CONVERSATION,
    }
    with _client(store) as client:
        resp = client.post("/api/messages", json=activity)

    replies = resp.json()["activities"]
    assert replies[0]["text"] == menus.MAIN_MENU_REPLY
    assert replies[0]["replyToId"] == "act-7"
    assert replies[0]["channelId"] == "webchat"
    assert replies[1]["suggestedActions"]["actions"][0] == {
        "title": menus.EVALUATE_PROFILE,
        "type": "imBack",
        "value": menus.EVALUATE_PROFILE,
    }


def test_empty_message_and_other_activities_get_no_reply():
    with _client(InMemorySessionStore()) as client:
        empty = client.post("/api/messages", json={"type": "message", "text": "", "from": {"id": "bob"}})
        typing = client.post("/api/messages", json={"type": "typing", "from": {"id": "bob"}})

    assert empty.json() == {"activities": []}
    assert typing.json() == {"activities": []}


def test_each_new_member_is_addressed_in_its_own_welcome():
    activity = {
        "type": "conversationUpdate",
        "recipient": BOT,
        "conversation": CONVERSATION,
        "membersAdded": [{"id": "alice"}, {"id": "carol", "name": "Carol"}],
    }
    with _client(InMemorySessionStore()) as client:
        replies = client.post("/api/messages", json=activity).json()["activities"]

    assert [r["recipient"]["id"] for r in replies] == ["alice", "alice", "carol", "carol"]
    assert replies[2]["recipient"]["name"] == "Carol"
    assert all(r["from"]["id"] == "coach-bot" for r in replies)
