"""Conversation data models."""
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Tuple


class Role(str, Enum):
    """Author of a turn."""
    USER = "user"
    ASSISTANT = "assistant"


class ConversationStateError(Exception):
    """Raised when a conversation operation is called out of order."""


@dataclass(frozen=True)
class Turn:
    """Represents a single message in a conversation."""
    id: str
    role: Role
    content: str
    timestamp: datetime
    suggestions: Optional[Tuple[str, ...]] = None
    is_error: bool = False


@dataclass
class Conversation:
    """
    Append-only log of turns owned by one chat session.

    Turns are frozen and the log is only ever extended, so insertion order
    is also temporal order.
    """
    persona_key: str
    conversation_id: str = field(default_factory=lambda: f"conv_{uuid.uuid4().hex[:12]}")
    created_at: datetime = field(default_factory=datetime.now)
    _turns: List[Turn] = field(default_factory=list, repr=False)
    _initialized: bool = field(default=False, repr=False)
    _last_id: int = field(default=0, repr=False)

    @property
    def turns(self) -> Tuple[Turn, ...]:
        """Read-only view of the transcript."""
        return tuple(self._turns)

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self, greeting: str, suggestions: Optional[Sequence[str]] = None) -> Turn:
        """
        Seed the conversation with the assistant greeting.

        Raises:
            ConversationStateError: If the conversation was already initialized
        """
        if self._initialized:
            raise ConversationStateError(
                f"Conversation {self.conversation_id} is already initialized"
            )
        self._initialized = True
        return self._append(Role.ASSISTANT, greeting, suggestions, False)

    def append_user_turn(self, content: str) -> Turn:
        """Append a user turn and return it."""
        return self._append(Role.USER, content, None, False)

    def append_assistant_turn(
        self,
        content: str,
        suggestions: Optional[Sequence[str]] = None,
        is_error: bool = False
    ) -> Turn:
        """Append an assistant turn and return it."""
        return self._append(Role.ASSISTANT, content, suggestions, is_error)

    def _append(
        self,
        role: Role,
        content: str,
        suggestions: Optional[Sequence[str]],
        is_error: bool
    ) -> Turn:
        if not self._initialized:
            raise ConversationStateError(
                f"Conversation {self.conversation_id} must be initialized before appending turns"
            )
        turn = Turn(
            id=self._next_id(),
            role=role,
            content=content,
            timestamp=datetime.now(),
            suggestions=tuple(suggestions) if suggestions is not None else None,
            is_error=is_error
        )
        self._turns.append(turn)
        return turn

    def _next_id(self) -> str:
        # Nanosecond clock, bumped when two turns land on the same tick
        now = time.time_ns()
        self._last_id = now if now > self._last_id else self._last_id + 1
        return str(self._last_id)
