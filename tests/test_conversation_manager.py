"""Unit tests for ConversationManager."""
import sys
sys.path.insert(0, 'backend')

import asyncio
import pytest
from unittest.mock import Mock
from models.conversation import Role
from models.generation import GenerationSuccess
from services.conversation_manager import (
    ConversationManager,
    ConversationNotFoundError,
    PersonaUnavailableError,
)
from services.personas import LINKEDIN, UnknownPersonaError
from services.turn_orchestrator import OrchestratorState, SubmitStatus


class StubCompletionClient:
    async def complete(self, request):
        return GenerationSuccess("Lead with outcomes. SUGGESTIONS: [\"Show me examples\"]")


class TestConversationManager:
    """Test suite for ConversationManager."""

    @pytest.fixture
    def manager(self):
        """Create a ConversationManager with only the LinkedIn persona configured."""
        return ConversationManager({"linkedin": StubCompletionClient()})

    def test_create_new_conversation(self, manager):
        """Test creating a conversation returns an initialized orchestrator."""
        orchestrator = manager.create_conversation("linkedin")
        conversation = orchestrator.conversation

        assert conversation.conversation_id.startswith("conv_")
        assert conversation.persona_key == "linkedin"
        assert len(conversation.turns) == 1
        greeting = conversation.turns[0]
        assert greeting.role is Role.ASSISTANT
        assert greeting.content == LINKEDIN.greeting
        assert greeting.suggestions == LINKEDIN.greeting_suggestions
        assert orchestrator.state is OrchestratorState.IDLE

    def test_conversation_id_uniqueness(self, manager):
        """Test conversation IDs are unique."""
        first = manager.create_conversation("linkedin")
        second = manager.create_conversation("linkedin")
        assert first.conversation_id != second.conversation_id
        assert len(manager) == 2

    def test_get_existing_conversation(self, manager):
        """Test retrieving a conversation by ID."""
        orchestrator = manager.create_conversation("linkedin")
        assert manager.get(orchestrator.conversation_id) is orchestrator

    def test_get_unknown_conversation_raises(self, manager):
        """Test retrieving an unknown ID raises."""
        with pytest.raises(ConversationNotFoundError):
            manager.get("conv_missing")

    def test_unknown_persona_raises(self, manager):
        """Test creating a conversation for an unknown persona raises."""
        with pytest.raises(UnknownPersonaError):
            manager.create_conversation("recruiter")

    def test_persona_without_client_is_unavailable(self, manager):
        """Test a persona without a client is reported unavailable."""
        with pytest.raises(PersonaUnavailableError, match="qwixai"):
            manager.create_conversation("qwixai")

    def test_sessions_are_isolated(self, manager):
        """Test turns in one conversation do not leak into another."""
        first = manager.create_conversation("linkedin")
        second = manager.create_conversation("linkedin")

        asyncio.run(first.submit("Improve my headline"))

        assert len(first.conversation.turns) == 3
        assert len(second.conversation.turns) == 1

    def test_close_removes_and_closes_session(self, manager):
        """Test close removes the session and closes its orchestrator."""
        orchestrator = manager.create_conversation("linkedin")
        manager.close(orchestrator.conversation_id)

        assert orchestrator.closed
        with pytest.raises(ConversationNotFoundError):
            manager.get(orchestrator.conversation_id)
        assert asyncio.run(orchestrator.submit("Hello")).status is SubmitStatus.CLOSED

    def test_close_unknown_raises(self, manager):
        """Test closing an unknown ID raises."""
        with pytest.raises(ConversationNotFoundError):
            manager.close("conv_missing")

    def test_close_all(self, manager):
        """Test close_all tears down every session."""
        sessions = [manager.create_conversation("linkedin") for _ in range(3)]
        manager.close_all()
        assert len(manager) == 0
        assert all(s.closed for s in sessions)

    def test_shares_exchange_logger(self):
        """Test every orchestrator gets the manager's exchange logger."""
        exchange_logger = Mock()
        manager = ConversationManager({"linkedin": StubCompletionClient()}, exchange_logger=exchange_logger)
        orchestrator = manager.create_conversation("linkedin")
        assert orchestrator.exchange_logger is exchange_logger
