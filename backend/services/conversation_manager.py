"""In-memory registry of live chat sessions."""
import logging
from typing import Dict, Mapping, Optional

from models.conversation import Conversation
from models.persona import Persona
from services.completion_client import CompletionClient
from services.exchange_logger import ExchangeLogger
from services.personas import PERSONAS, UnknownPersonaError
from services.turn_orchestrator import Notifier, TurnOrchestrator

logger = logging.getLogger(__name__)


class ConversationNotFoundError(KeyError):
    """Raised when a conversation id is not (or no longer) registered."""


class PersonaUnavailableError(RuntimeError):
    """Raised when a persona has no configured completion client."""


class ConversationManager:
    """
    Owns every live conversation and its orchestrator.

    Nothing is persisted: closing a conversation (or the process) discards
    its transcript.
    """

    def __init__(
        self,
        completion_clients: Mapping[str, CompletionClient],
        exchange_logger: Optional[ExchangeLogger] = None,
        personas: Optional[Mapping[str, Persona]] = None
    ):
        """
        Initialize the conversation manager.

        Args:
            completion_clients: Completion client per persona key
            exchange_logger: Optional JSONL exchange log shared by all sessions
            personas: Persona registry (defaults to the built-in personas)
        """
        self.completion_clients = dict(completion_clients)
        self.exchange_logger = exchange_logger
        self.personas = dict(personas) if personas is not None else dict(PERSONAS)
        self._sessions: Dict[str, TurnOrchestrator] = {}
        logger.info(
            f"ConversationManager initialized with personas: {sorted(self.completion_clients)}"
        )

    def create_conversation(self, persona_key: str, notifier: Optional[Notifier] = None) -> TurnOrchestrator:
        """
        Start a new session seeded with the persona greeting.

        Args:
            persona_key: Key of a registered persona
            notifier: Optional callback for transient notifications

        Returns:
            The orchestrator that owns the new conversation

        Raises:
            UnknownPersonaError: If the persona is not registered
            PersonaUnavailableError: If the persona has no completion client
        """
        persona = self.personas.get(persona_key)
        if persona is None:
            raise UnknownPersonaError(persona_key)

        client = self.completion_clients.get(persona_key)
        if client is None:
            raise PersonaUnavailableError(
                f"Persona '{persona_key}' has no API key configured"
            )

        conversation = Conversation(persona_key=persona.key)
        conversation.initialize(persona.greeting, persona.greeting_suggestions)

        orchestrator = TurnOrchestrator(
            conversation=conversation,
            persona=persona,
            completion_client=client,
            notifier=notifier,
            exchange_logger=self.exchange_logger
        )
        self._sessions[conversation.conversation_id] = orchestrator

        logger.info(
            f"Created new conversation: {conversation.conversation_id}",
            extra={"conversation_id": conversation.conversation_id, "persona": persona.key}
        )
        return orchestrator

    def get(self, conversation_id: str) -> TurnOrchestrator:
        """
        Look up a live session.

        Raises:
            ConversationNotFoundError: If the id is unknown or was closed
        """
        try:
            return self._sessions[conversation_id]
        except KeyError:
            raise ConversationNotFoundError(conversation_id) from None

    def close(self, conversation_id: str) -> None:
        """
        Tear down a session, cancelling any in-flight completion.

        Raises:
            ConversationNotFoundError: If the id is unknown or was closed
        """
        orchestrator = self._sessions.pop(conversation_id, None)
        if orchestrator is None:
            raise ConversationNotFoundError(conversation_id)
        orchestrator.close()
        logger.info(
            f"Closed conversation: {conversation_id}",
            extra={"conversation_id": conversation_id}
        )

    def close_all(self) -> None:
        """Tear down every live session."""
        for conversation_id in list(self._sessions):
            self.close(conversation_id)

    def __len__(self) -> int:
        return len(self._sessions)
