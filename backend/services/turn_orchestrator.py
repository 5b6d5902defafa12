"""
Turn orchestration for persona chat sessions.

One orchestrator drives one conversation through a two-state machine:

    IDLE --submit(text)--> AWAITING_COMPLETION --success/failure--> IDLE

A submit that arrives while a completion is in flight is rejected without
touching the transcript. Completion failures never escape; they become an
assistant turn flagged is_error plus an error notification.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

from models.conversation import Conversation, Turn
from models.generation import (
    FailureKind,
    GenerationFailure,
    GenerationSuccess,
)
from models.persona import Persona
from services.completion_client import CompletionClient
from services.exchange_logger import ExchangeLogger
from services.personas import fallback_suggestions
from services.prompt_builder import build_generation_request
from services.response_parser import parse_response

logger = logging.getLogger(__name__)


class OrchestratorState(str, Enum):
    IDLE = "idle"
    AWAITING_COMPLETION = "awaiting_completion"


class SubmitStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    IGNORED = "ignored"
    BUSY = "busy"
    CLOSED = "closed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Notification:
    """Transient, toast-style message for the UI."""
    level: str
    title: str
    description: str


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of one submit call and the turns it appended."""
    status: SubmitStatus
    user_turn: Optional[Turn] = None
    assistant_turn: Optional[Turn] = None
    notification: Optional[Notification] = None

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(t for t in (self.user_turn, self.assistant_turn) if t is not None)


FAILURE_SUMMARIES = {
    FailureKind.UNAUTHORIZED: "Invalid API key. Please check your AI configuration.",
    FailureKind.RATE_LIMITED: "API quota exceeded. Please try again later.",
    FailureKind.NETWORK: "Network error. Please check your internet connection.",
    FailureKind.MALFORMED_RESPONSE: "The AI service returned an unexpected response. Please try again.",
    FailureKind.UNKNOWN: "Failed to generate response. Please try again.",
}

Notifier = Callable[[Notification], None]


class TurnOrchestrator:
    """Sequences one user turn into at most one assistant turn."""

    def __init__(
        self,
        conversation: Conversation,
        persona: Persona,
        completion_client: CompletionClient,
        notifier: Optional[Notifier] = None,
        exchange_logger: Optional[ExchangeLogger] = None
    ):
        self.conversation = conversation
        self.persona = persona
        self.completion_client = completion_client
        self.notifier = notifier
        self.exchange_logger = exchange_logger
        self.state = OrchestratorState.IDLE
        self.input_buffer = ""
        self._inflight: Optional[asyncio.Future] = None
        self._closed = False

    @property
    def conversation_id(self) -> str:
        return self.conversation.conversation_id

    @property
    def closed(self) -> bool:
        return self._closed

    async def submit(self, text: Optional[str] = None) -> SubmitResult:
        """
        Run one exchange.

        Args:
            text: User text; when omitted the current input_buffer is sent

        Returns:
            SubmitResult describing what happened and which turns were appended
        """
        if self._closed:
            return SubmitResult(status=SubmitStatus.CLOSED)

        message = (self.input_buffer if text is None else text).strip()
        if not message:
            return SubmitResult(status=SubmitStatus.IGNORED)

        if self.state is OrchestratorState.AWAITING_COMPLETION:
            logger.info(
                "Submit rejected while a completion is in flight",
                extra={"conversation_id": self.conversation_id, "persona": self.persona.key}
            )
            return SubmitResult(status=SubmitStatus.BUSY)

        # State flips before the first await so a concurrent submit sees BUSY
        self.state = OrchestratorState.AWAITING_COMPLETION
        try:
            user_turn = self.conversation.append_user_turn(message)
            self.input_buffer = ""
            request = build_generation_request(message, self.persona)
            prompt_tokens = (
                self.exchange_logger.count_tokens(request.prompt_text)
                if self.exchange_logger else 0
            )

            self._inflight = asyncio.ensure_future(self.completion_client.complete(request))
            try:
                result = await self._inflight
            except asyncio.CancelledError:
                if not self._closed:
                    raise
                logger.info(
                    "In-flight completion cancelled by conversation teardown",
                    extra={"conversation_id": self.conversation_id, "persona": self.persona.key}
                )
                self._log_exchange(message, prompt_tokens, SubmitStatus.CANCELLED, 0)
                return SubmitResult(status=SubmitStatus.CANCELLED, user_turn=user_turn)
            except Exception as e:
                logger.error(f"Completion client raised unexpectedly: {e}", exc_info=True)
                result = GenerationFailure(kind=FailureKind.UNKNOWN, message=str(e))

            if isinstance(result, GenerationSuccess):
                outcome = self._handle_success(message, result, prompt_tokens)
            else:
                outcome = self._handle_failure(message, result, prompt_tokens)
        finally:
            self._inflight = None
            self.state = OrchestratorState.IDLE

        status, assistant_turn, notification = outcome
        if notification is not None:
            self._notify(notification)
        return SubmitResult(
            status=status,
            user_turn=user_turn,
            assistant_turn=assistant_turn,
            notification=notification
        )

    async def select_suggestion(self, suggestion: str) -> SubmitResult:
        """A suggestion chip is a submit with the chip's text."""
        return await self.submit(suggestion)

    def close(self) -> None:
        """Reject further submits and cancel any in-flight completion."""
        self._closed = True
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

    def _handle_success(
        self,
        message: str,
        result: GenerationSuccess,
        prompt_tokens: int
    ) -> Tuple[SubmitStatus, Turn, Optional[Notification]]:
        parsed = parse_response(result.text)
        suggestions: Sequence[str]
        if parsed.suggestions is None:
            suggestions = fallback_suggestions(self.persona, message)
        else:
            suggestions = parsed.suggestions

        content = parsed.content if parsed.content.strip() else self.persona.empty_response_text
        turn = self.conversation.append_assistant_turn(content, suggestions)

        logger.info(
            f"Exchange completed: suggestions={len(suggestions)}, parsed={parsed.has_suggestions}",
            extra={
                "conversation_id": self.conversation_id,
                "persona": self.persona.key,
                "latency_ms": result.latency_ms,
            }
        )
        self._log_exchange(
            message,
            prompt_tokens,
            SubmitStatus.COMPLETED,
            result.latency_ms,
            suggestion_count=len(suggestions),
            suggestions_parsed=parsed.has_suggestions
        )

        notification = None
        if self.persona.notify_on_success:
            notification = Notification(
                level="info",
                title="Response generated!",
                description=f"{self.persona.display_name} is ready to help you further."
            )
        return SubmitStatus.COMPLETED, turn, notification

    def _handle_failure(
        self,
        message: str,
        failure: GenerationFailure,
        prompt_tokens: int
    ) -> Tuple[SubmitStatus, Turn, Notification]:
        content = self.persona.error_template.format(message=failure.message)
        turn = self.conversation.append_assistant_turn(
            content,
            self.persona.error_suggestions or None,
            is_error=True
        )

        logger.warning(
            f"Exchange failed: {failure.message}",
            extra={
                "conversation_id": self.conversation_id,
                "persona": self.persona.key,
                "failure_kind": failure.kind.value,
                "latency_ms": failure.latency_ms,
            }
        )
        self._log_exchange(
            message,
            prompt_tokens,
            SubmitStatus.FAILED,
            failure.latency_ms,
            failure_kind=failure.kind.value,
            suggestion_count=len(self.persona.error_suggestions)
        )

        notification = Notification(
            level="error",
            title="Error",
            description=FAILURE_SUMMARIES[failure.kind]
        )
        return SubmitStatus.FAILED, turn, notification

    def _notify(self, notification: Notification) -> None:
        if self.notifier is not None:
            self.notifier(notification)

    def _log_exchange(
        self,
        message: str,
        prompt_tokens: int,
        status: SubmitStatus,
        latency_ms: int,
        failure_kind: Optional[str] = None,
        suggestion_count: int = 0,
        suggestions_parsed: bool = False
    ) -> None:
        if self.exchange_logger is None:
            return
        # Runs after the turn is committed; write errors are logged, never raised
        try:
            self.exchange_logger.log_exchange(
                conversation_id=self.conversation_id,
                persona=self.persona.key,
                user_text=message,
                prompt_tokens=prompt_tokens,
                outcome=status.value,
                latency_ms=latency_ms,
                failure_kind=failure_kind,
                suggestion_count=suggestion_count,
                suggestions_parsed=suggestions_parsed
            )
        except (OSError, ValueError) as e:
            logger.error(
                f"Failed to write exchange log: {e}",
                exc_info=True,
                extra={"conversation_id": self.conversation_id, "persona": self.persona.key}
            )
