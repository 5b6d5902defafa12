"""Data models for the CareerChat backend."""
from .conversation import Conversation, ConversationStateError, Role, Turn
from .generation import (
    FailureKind,
    GenerationFailure,
    GenerationRequest,
    GenerationResult,
    GenerationSuccess,
)
from .persona import Persona, SuggestionRule

__all__ = [
    "Conversation",
    "ConversationStateError",
    "Role",
    "Turn",
    "FailureKind",
    "GenerationFailure",
    "GenerationRequest",
    "GenerationResult",
    "GenerationSuccess",
    "Persona",
    "SuggestionRule",
]
