"""Request/response schemas for the HTTP API."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from models.conversation import Turn


class CreateConversationRequest(BaseModel):
    """Request body for starting a conversation with a persona."""
    persona: str = Field(..., description="Persona key, e.g. 'linkedin' or 'qwixai'")


class MessageRequest(BaseModel):
    """Request body for a message or a selected suggestion chip."""
    text: str = Field("", description="User utterance or selected suggestion")


class TurnOut(BaseModel):
    """One transcript entry as returned to clients."""
    id: str = Field(..., description="Time-based turn ID, increasing within a conversation")
    role: str = Field(..., description="'user' or 'assistant'")
    content: str
    timestamp: datetime
    suggestions: Optional[List[str]] = Field(None, description="Suggestion chips; assistant turns only")
    is_error: bool = Field(False, description="True when the turn reports a failed completion")

    @classmethod
    def from_turn(cls, turn: Turn) -> "TurnOut":
        return cls(
            id=turn.id,
            role=turn.role.value,
            content=turn.content,
            timestamp=turn.timestamp,
            suggestions=list(turn.suggestions) if turn.suggestions is not None else None,
            is_error=turn.is_error
        )


class NotificationOut(BaseModel):
    """Toast-style message raised by an exchange."""
    level: str = Field(..., description="'info' or 'error'")
    title: str
    description: str


class ConversationOut(BaseModel):
    """Full conversation transcript."""
    conversation_id: str
    persona: str
    state: str = Field(..., description="'idle' or 'awaiting_completion'")
    created_at: datetime
    turns: List[TurnOut]


class MessageResponse(BaseModel):
    """Outcome of one submit and the turns it appended."""
    status: str = Field(..., description="completed, failed, ignored or cancelled")
    turns: List[TurnOut]
    notification: Optional[NotificationOut] = None


class PersonaOut(BaseModel):
    """Public view of a persona for the assistant picker."""
    key: str
    display_name: str
    greeting_suggestions: List[str]
