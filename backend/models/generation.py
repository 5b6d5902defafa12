"""Request and result types for the completion endpoint."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class FailureKind(str, Enum):
    """Classification of a failed completion call."""
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class GenerationRequest:
    """
    One prompt plus its sampling parameters.

    Attributes:
        prompt_text: Complete prompt sent as the single content part
        temperature: Sampling temperature
        max_output_tokens: Cap on generated tokens
        top_p: Optional nucleus-sampling threshold
        top_k: Optional top-k sampling cutoff
    """
    prompt_text: str
    temperature: float = 0.7
    max_output_tokens: int = 1024
    top_p: Optional[float] = None
    top_k: Optional[int] = None

    def __post_init__(self):
        if not self.prompt_text or not self.prompt_text.strip():
            raise ValueError("prompt_text must be a non-empty string")

    def to_payload(self) -> Dict[str, Any]:
        """Build the generateContent JSON body."""
        generation_config: Dict[str, Any] = {
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
        }
        if self.top_p is not None:
            generation_config["topP"] = self.top_p
        if self.top_k is not None:
            generation_config["topK"] = self.top_k

        return {
            "contents": [{"parts": [{"text": self.prompt_text}]}],
            "generationConfig": generation_config,
        }


@dataclass(frozen=True)
class GenerationSuccess:
    """Raw text of the first candidate."""
    text: str
    latency_ms: int = 0


@dataclass(frozen=True)
class GenerationFailure:
    """Classified failure from the completion endpoint."""
    kind: FailureKind
    message: str
    status_code: Optional[int] = None
    latency_ms: int = 0


GenerationResult = Union[GenerationSuccess, GenerationFailure]
