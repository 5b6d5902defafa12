"""Integration tests for the conversation HTTP endpoints."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, Mock
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from models.generation import FailureKind, GenerationFailure, GenerationSuccess
from services.conversation_manager import ConversationManager
from services.personas import LINKEDIN
from services.turn_orchestrator import SubmitResult, SubmitStatus


class QueueCompletionClient:
    """Completion client stub returning queued results."""

    def __init__(self):
        self.results = []
        self.calls = 0

    async def complete(self, request):
        self.calls += 1
        return self.results.pop(0)


@pytest.fixture
def completion_client():
    return QueueCompletionClient()


@pytest.fixture
def client(completion_client):
    """Create a test client with a real manager and a stubbed completion client."""
    import main

    # TestClient used without a context manager does not fire startup events
    main.conversation_manager = ConversationManager({"linkedin": completion_client})
    yield TestClient(main.app)
    main.conversation_manager = None


def create_conversation(client, persona="linkedin"):
    response = client.post("/conversations", json={"persona": persona})
    assert response.status_code == 201
    return response.json()


def test_health_endpoints(client):
    """Test root and health endpoints report status."""
    assert client.get("/").json()["status"] == "ok"
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["version"] == "1.0.0"


def test_list_personas(client):
    """Test the personas endpoint lists both assistants."""
    personas = {p["key"]: p for p in client.get("/personas").json()}
    assert set(personas) == {"linkedin", "qwixai"}
    assert personas["linkedin"]["greeting_suggestions"] == list(LINKEDIN.greeting_suggestions)


def test_create_conversation_seeds_greeting(client):
    """Test a new conversation starts with the persona greeting."""
    data = create_conversation(client)

    assert data["conversation_id"].startswith("conv_")
    assert data["persona"] == "linkedin"
    assert data["state"] == "idle"
    assert len(data["turns"]) == 1
    assert data["turns"][0]["role"] == "assistant"
    assert data["turns"][0]["content"] == LINKEDIN.greeting


def test_create_conversation_unknown_persona(client):
    """Test an unknown persona key returns 404."""
    response = client.post("/conversations", json={"persona": "recruiter"})
    assert response.status_code == 404


def test_create_conversation_unconfigured_persona(client):
    """Test a persona without a client returns 503."""
    response = client.post("/conversations", json={"persona": "qwixai"})
    assert response.status_code == 503


def test_send_message_success(client, completion_client):
    """Test a successful message returns both new turns."""
    completion_client.results.append(
        GenerationSuccess('Use action verbs. SUGGESTIONS: ["Try X", "Try Y"]')
    )
    conversation_id = create_conversation(client)["conversation_id"]

    response = client.post(
        f"/conversations/{conversation_id}/messages",
        json={"text": "Improve my headline"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert [t["role"] for t in data["turns"]] == ["user", "assistant"]
    assert data["turns"][1]["content"] == "Use action verbs."
    assert data["turns"][1]["suggestions"] == ["Try X", "Try Y"]
    assert data["notification"] is None

    transcript = client.get(f"/conversations/{conversation_id}").json()
    assert len(transcript["turns"]) == 3


def test_send_message_failure_returns_error_turn(client, completion_client):
    """Test a failed completion returns an error turn and notification."""
    completion_client.results.append(GenerationFailure(FailureKind.RATE_LIMITED, "quota exceeded"))
    conversation_id = create_conversation(client)["conversation_id"]

    response = client.post(
        f"/conversations/{conversation_id}/messages",
        json={"text": "Improve my headline"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "failed"
    assistant = data["turns"][-1]
    assert assistant["is_error"] is True
    assert "quota exceeded" in assistant["content"]
    assert data["notification"]["level"] == "error"


@pytest.mark.parametrize("text", ["", "   "])
def test_send_empty_message_is_ignored(client, completion_client, text):
    """Test blank messages are ignored without a completion call."""
    conversation_id = create_conversation(client)["conversation_id"]

    response = client.post(f"/conversations/{conversation_id}/messages", json={"text": text})

    assert response.status_code == 200
    assert response.json() == {"status": "ignored", "turns": [], "notification": None}
    assert completion_client.calls == 0
    assert len(client.get(f"/conversations/{conversation_id}").json()["turns"]) == 1


def test_select_suggestion(client, completion_client):
    """Test selecting a suggestion chip runs an exchange."""
    completion_client.results.append(GenerationSuccess("Here is a summary draft."))
    conversation_id = create_conversation(client)["conversation_id"]

    response = client.post(
        f"/conversations/{conversation_id}/suggestions",
        json={"text": "Write a better summary"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["turns"][0]["content"] == "Write a better summary"
    assert data["turns"][1]["suggestions"] == list(LINKEDIN.default_suggestions)


def test_send_message_while_busy_returns_409(client):
    """Test a submit during an in-flight completion returns 409."""
    import main

    orchestrator = Mock()
    orchestrator.submit = AsyncMock(return_value=SubmitResult(status=SubmitStatus.BUSY))
    main.conversation_manager = Mock()
    main.conversation_manager.get.return_value = orchestrator

    response = client.post("/conversations/conv_busy/messages", json={"text": "Again"})

    assert response.status_code == 409


def test_unknown_conversation_returns_404(client):
    """Test unknown conversation ids return 404."""
    assert client.get("/conversations/conv_missing").status_code == 404
    response = client.post("/conversations/conv_missing/messages", json={"text": "Hi"})
    assert response.status_code == 404


def test_delete_conversation(client):
    """Test deleting a conversation removes it."""
    conversation_id = create_conversation(client)["conversation_id"]

    response = client.delete(f"/conversations/{conversation_id}")

    assert response.status_code == 204
    assert client.get(f"/conversations/{conversation_id}").status_code == 404
    assert client.delete(f"/conversations/{conversation_id}").status_code == 404
