"""JSON Lines log of orchestrated chat exchanges."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import tiktoken

from config import TOKEN_ENCODING

logger = logging.getLogger(__name__)


class ExchangeLogger:
    """Appends one JSON record per user→assistant exchange."""

    def __init__(self, log_file_path: str = "logs/exchanges.jsonl", encoder: Optional[Any] = None):
        """
        Open the log file for appending.

        Args:
            log_file_path: Destination JSONL file (parent directories are created)
            encoder: Object with encode(text) -> tokens; defaults to tiktoken o200k_base
        """
        self.log_file_path = Path(log_file_path)
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self.encoder = encoder if encoder is not None else tiktoken.get_encoding(TOKEN_ENCODING)
        self._file = open(self.log_file_path, "a", encoding="utf-8")
        logger.info(f"ExchangeLogger writing to {self.log_file_path}")

    def count_tokens(self, text: str) -> int:
        """Estimate prompt size in tokens."""
        return len(self.encoder.encode(text))

    def log_exchange(
        self,
        conversation_id: str,
        persona: str,
        user_text: str,
        prompt_tokens: int,
        outcome: str,
        latency_ms: int,
        failure_kind: Optional[str] = None,
        suggestion_count: int = 0,
        suggestions_parsed: bool = False
    ) -> None:
        """
        Write one exchange record.

        Args:
            conversation_id: Conversation the exchange belongs to
            persona: Persona key
            user_text: Submitted user text
            prompt_tokens: Estimated prompt tokens
            outcome: SubmitStatus value ("completed", "failed", "cancelled")
            latency_ms: Completion call latency
            failure_kind: FailureKind value when the call failed
            suggestion_count: Number of chips attached to the assistant turn
            suggestions_parsed: Whether the chips came from the reply marker
        """
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "conversation_id": conversation_id,
            "persona": persona,
            "user_text": user_text,
            "prompt_tokens": prompt_tokens,
            "outcome": outcome,
            "latency_ms": latency_ms,
            "failure_kind": failure_kind,
            "suggestion_count": suggestion_count,
            "suggestions_parsed": suggestions_parsed,
        }
        self._file.write(json.dumps(entry) + "\n")
        self._file.flush()

    def close(self) -> None:
        """Flush and close the log file."""
        if not self._file.closed:
            self._file.close()
