"""Services for the CareerChat backend."""
from .completion_client import CompletionClient
from .conversation_manager import ConversationManager, ConversationNotFoundError, PersonaUnavailableError
from .exchange_logger import ExchangeLogger
from .personas import PERSONAS, UnknownPersonaError, fallback_suggestions, get_persona
from .prompt_builder import build_generation_request, build_prompt
from .response_parser import ParsedResponse, parse_response
from .turn_orchestrator import Notification, OrchestratorState, SubmitResult, SubmitStatus, TurnOrchestrator

__all__ = [
    'CompletionClient',
    'ConversationManager',
    'ConversationNotFoundError',
    'PersonaUnavailableError',
    'ExchangeLogger',
    'PERSONAS',
    'UnknownPersonaError',
    'fallback_suggestions',
    'get_persona',
    'build_generation_request',
    'build_prompt',
    'ParsedResponse',
    'parse_response',
    'Notification',
    'OrchestratorState',
    'SubmitResult',
    'SubmitStatus',
    'TurnOrchestrator',
]
