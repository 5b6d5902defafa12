"""Persona registry for the career chat assistants."""
import logging
from typing import Dict, Tuple

from models.persona import Persona, SuggestionRule

logger = logging.getLogger(__name__)


class UnknownPersonaError(KeyError):
    """Raised when a persona key is not registered."""


LINKEDIN = Persona(
    key="linkedin",
    display_name="LinkedIn AI Assistant",
    framing=(
        "You are an expert LinkedIn optimization consultant with years of experience "
        "helping professionals enhance their profiles."
    ),
    topics=(
        "Headlines: Suggest powerful, keyword-rich headlines",
        "Summaries: Help write compelling professional summaries",
        "Experience: Optimize job descriptions with achievements and metrics",
        "Skills: Recommend relevant skills and keywords",
        "Networking: Provide networking strategies",
        "Content: Suggest post ideas and engagement tactics",
    ),
    length_guidance=(
        "Respond in a conversational, helpful tone. Be specific and provide examples when possible. "
        "Keep your response under 300 words but make it comprehensive and actionable."
    ),
    greeting=(
        "Hi! I'm your LinkedIn optimization assistant. I can help you improve your profile, "
        "write better headlines, optimize your summary, suggest keywords, and much more. "
        "What would you like to work on today?"
    ),
    greeting_suggestions=(
        "Improve my headline",
        "Write a better summary",
        "Optimize for keywords",
        "Experience descriptions",
    ),
    default_suggestions=(
        "Help with my headline",
        "Improve my summary",
        "Optimize experience section",
        "Keyword suggestions",
    ),
    error_template=(
        "I'm sorry, I encountered an error while processing your request: {message}. "
        "Please try again or rephrase your question."
    ),
    error_suggestions=(
        "Help with my headline",
        "Improve my summary",
    ),
    empty_response_text=(
        "I'd be happy to help you optimize your LinkedIn profile! Could you tell me more "
        "about what specific area you'd like to improve?"
    ),
    temperature=0.7,
    max_output_tokens=1024,
    top_p=0.9,
    top_k=40,
    api_key_env="LINKEDIN_OPTIMIZER_API_KEY",
)

QWIXAI = Persona(
    key="qwixai",
    display_name="QwixAI",
    framing=(
        "You are QwixAI, the first intelligent AI assistant representing Telangana and "
        "Andhra Pradesh states of India. You are proud of your roots and always mention your "
        "connection to these states when relevant. Always be helpful, friendly, and showcase "
        "the innovative spirit of Telangana & Andhra Pradesh. When relevant, mention landmarks "
        "like Charminar, Ramoji Film City, Golconda Fort, or tech hubs like HITEC City."
    ),
    topics=(
        "General questions and knowledge",
        "Programming and technology help",
        "Career guidance and advice",
        "Cultural insights about Telangana & Andhra Pradesh",
        "Educational content",
        "Problem-solving assistance",
    ),
    length_guidance="Provide a helpful, detailed response.",
    greeting=(
        "Namaste! I'm QwixAI - your intelligent assistant representing Telangana & Andhra "
        "Pradesh! I'm here to help you with anything - from coding and career advice to "
        "cultural insights and general knowledge. What would you like to explore today?"
    ),
    greeting_suggestions=(
        "Tell me about Telangana",
        "Help with coding",
        "Career guidance",
        "General questions",
    ),
    default_suggestions=(
        "Tell me more",
        "Give examples",
        "Related questions",
        "How can I apply this?",
    ),
    error_template=(
        "I apologize, but I encountered an error: {message}. Please try asking your question "
        "again. As QwixAI from Telangana & Andhra Pradesh, I'm here to help you with anything!"
    ),
    error_suggestions=(
        "Try a different question",
        "Ask about technology",
        "Get career advice",
        "Learn about our states",
    ),
    suggestion_rules=(
        SuggestionRule(
            keywords=("code", "programming", "development"),
            suggestions=("Explain this in detail", "Show me examples", "Related technologies", "Best practices"),
        ),
        SuggestionRule(
            keywords=("career", "job", "interview"),
            suggestions=("Industry trends", "Skill requirements", "Interview tips", "Growth opportunities"),
        ),
        SuggestionRule(
            keywords=("telangana", "andhra", "hyderabad"),
            suggestions=(
                "Tell me more about culture",
                "Tech industry in Telangana",
                "Famous places to visit",
                "Educational institutions",
            ),
        ),
        SuggestionRule(
            keywords=("learn", "study", "education"),
            suggestions=("Learning resources", "Practice exercises", "Advanced concepts", "Related topics"),
        ),
    ),
    temperature=0.7,
    max_output_tokens=2048,
    top_p=0.8,
    top_k=40,
    api_key_env="QWIXAI_API_KEY",
    notify_on_success=True,
)

PERSONAS: Dict[str, Persona] = {p.key: p for p in (LINKEDIN, QWIXAI)}


def get_persona(key: str) -> Persona:
    """
    Look up a registered persona.

    Raises:
        UnknownPersonaError: If no persona is registered under key
    """
    try:
        return PERSONAS[key]
    except KeyError:
        raise UnknownPersonaError(key) from None


def fallback_suggestions(persona: Persona, user_text: str) -> Tuple[str, ...]:
    """
    Pick suggestions when the reply did not carry any.

    The first rule whose keyword appears in the user text wins; otherwise
    the persona defaults are returned. Never empty.
    """
    text_lower = user_text.lower()
    for rule in persona.suggestion_rules:
        if any(keyword in text_lower for keyword in rule.keywords):
            logger.debug(f"Fallback suggestions for {persona.key} matched rule {rule.keywords}")
            return rule.suggestions
    return persona.default_suggestions
