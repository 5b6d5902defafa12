"""Assistant persona data models."""
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class SuggestionRule:
    """Fallback suggestions chosen when the user text mentions any keyword."""
    keywords: Tuple[str, ...]
    suggestions: Tuple[str, ...]


@dataclass(frozen=True)
class Persona:
    """
    Fixed framing and defaults for one chat assistant.

    Attributes:
        key: Stable identifier used by the API ("linkedin", "qwixai")
        display_name: Human readable assistant name
        framing: Opening instruction that sets the assistant's voice
        topics: Focus areas listed in the prompt
        length_guidance: Instruction bounding the answer length
        greeting: Content of the seeded first assistant turn
        greeting_suggestions: Chips offered with the greeting
        default_suggestions: Fallback when the reply carries no marker
        error_template: Apology shown on failure, with a {message} slot
        error_suggestions: Chips offered with an error turn
        empty_response_text: Shown when the reply is empty once the marker is removed
        suggestion_rules: Keyword routed fallbacks, checked in order
        api_key_env: Environment variable holding this persona's key
        notify_on_success: Emit an info notification after each reply
    """
    key: str
    display_name: str
    framing: str
    topics: Tuple[str, ...]
    length_guidance: str
    greeting: str
    greeting_suggestions: Tuple[str, ...]
    default_suggestions: Tuple[str, ...]
    error_template: str
    error_suggestions: Tuple[str, ...] = ()
    empty_response_text: str = "Could you tell me a bit more about what you need?"
    suggestion_rules: Tuple[SuggestionRule, ...] = field(default_factory=tuple)
    temperature: float = 0.7
    max_output_tokens: int = 1024
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    api_key_env: Optional[str] = None
    notify_on_success: bool = False

    def __post_init__(self):
        if not self.default_suggestions:
            raise ValueError(f"Persona '{self.key}' needs at least one default suggestion")
        if "{message}" not in self.error_template:
            raise ValueError(f"Persona '{self.key}' error_template must contain {{message}}")
