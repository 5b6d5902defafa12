"""Prompt construction for persona chat turns."""
from models.generation import GenerationRequest
from models.persona import Persona

SUGGESTION_MARKER = "SUGGESTIONS:"

SUGGESTION_DIRECTIVE = (
    "Also, based on the user's query, suggest 2-4 short follow-up questions or topics they "
    "might want to explore, formatted as a JSON array on the last line of your response like this:\n"
    "\n"
    f'{SUGGESTION_MARKER} ["suggestion 1", "suggestion 2", "suggestion 3"]'
)


def build_prompt(utterance: str, persona: Persona) -> str:
    """
    Build the single-text prompt for one user turn.

    Args:
        utterance: Trimmed, non-empty user text (embedded verbatim)
        persona: Persona providing framing, topics and length guidance

    Returns:
        Complete prompt string
    """
    topics = "\n".join(f"- {topic}" for topic in persona.topics)

    prompt = f"""{persona.framing}

You can help with:
{topics}

User query: "{utterance}"

Instructions:
- Provide helpful, specific, and actionable advice
- {persona.length_guidance}

{SUGGESTION_DIRECTIVE}"""

    return prompt


def build_generation_request(utterance: str, persona: Persona) -> GenerationRequest:
    """Wrap the prompt with the persona's sampling parameters."""
    return GenerationRequest(
        prompt_text=build_prompt(utterance, persona),
        temperature=persona.temperature,
        max_output_tokens=persona.max_output_tokens,
        top_p=persona.top_p,
        top_k=persona.top_k
    )
