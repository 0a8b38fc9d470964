import pytest
from fastapi.testclient import TestClient

from kbcopilot.api.deps import get_orchestrator
from kbcopilot.api.main import create_app
from kbcopilot.core.conversation import ConversationOrchestrator


@pytest.fixture
def client():
    app = create_app()
    return TestClient(app)


@pytest.fixture
def model(client, scripted_chat_model, text_chunks, embedder, memory_store, session_store):
    model = scripted_chat_model([text_chunks("Hi", "!"), text_chunks("Again")])
    orchestrator = ConversationOrchestrator(
        chat_model=model,
        embedder=embedder,
        vector_store=memory_store,
        session_store=session_store,
    )
    client.app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return model


def _receive_exchange(websocket):
    events = []
    while True:
        event = websocket.receive_json()
        events.append(event)
        if event["event"] in ("end", "error"):
            return events


def test_ping_pong(client, model):
    with client.websocket_connect("/api/v1/ws/sessions/s-1/chat") as websocket:
        websocket.send_json({"event": "ping"})
        assert websocket.receive_json() == {"event": "pong"}


def test_chat_exchange_events(client, model):
    with client.websocket_connect("/api/v1/ws/sessions/s-1/chat") as websocket:
        websocket.send_json({"event": "chat", "data": {"message": "hello"}})
        events = _receive_exchange(websocket)

    assert events == [
        {"event": "token", "data": {"token": "Hi", "index": 0}},
        {"event": "token", "data": {"token": "!", "index": 1}},
        {"event": "initial_end", "data": {"tool_call": False}},
        {"event": "end", "data": {}},
    ]


def test_history_carries_across_exchanges(client, model):
    with client.websocket_connect("/api/v1/ws/sessions/s-1/chat") as websocket:
        websocket.send_json({"event": "chat", "data": {"message": "hello"}})
        _receive_exchange(websocket)
        websocket.send_json({"event": "chat", "data": {"message": "and again"}})
        _receive_exchange(websocket)

    second_turns = model.calls[1]["turns"]
    assert [type(m).__name__ for m in second_turns] == [
        "SystemMessage",
        "HumanMessage",
        "AIMessage",
        "HumanMessage",
    ]
    assert second_turns[2].content == "Hi!"


def test_invalid_json(client, model):
    with client.websocket_connect("/api/v1/ws/sessions/s-1/chat") as websocket:
        websocket.send_text("{not json")
        event = websocket.receive_json()

    assert event["event"] == "error"
    assert event["data"]["code"] == "INVALID_JSON"


def test_unknown_event(client, model):
    with client.websocket_connect("/api/v1/ws/sessions/s-1/chat") as websocket:
        websocket.send_json({"event": "subscribe"})
        event = websocket.receive_json()

    assert event["data"]["code"] == "UNKNOWN_EVENT"


def test_missing_message(client, model):
    with client.websocket_connect("/api/v1/ws/sessions/s-1/chat") as websocket:
        websocket.send_json({"event": "chat", "data": {}})
        event = websocket.receive_json()

    assert event["data"] == {"code": "MISSING_MESSAGE", "message": "Message is required"}
