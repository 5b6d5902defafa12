"""Configuration management for the CareerChat backend."""
import os
import logging
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys (persona-specific keys fall back to GEMINI_API_KEY)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
LINKEDIN_OPTIMIZER_API_KEY = os.getenv("LINKEDIN_OPTIMIZER_API_KEY")
QWIXAI_API_KEY = os.getenv("QWIXAI_API_KEY")

# Completion endpoint
GEMINI_API_URL = os.getenv(
    "GEMINI_API_URL",
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash-exp:generateContent"
)
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173"
).split(",")

# Exchange log (JSON Lines, one record per orchestrated exchange)
EXCHANGE_LOG_PATH = os.getenv("EXCHANGE_LOG_PATH", "logs/exchanges.jsonl")

# Tokenizer used for prompt size estimates in the exchange log
TOKEN_ENCODING = "o200k_base"


def get_api_key(env_name: Optional[str]) -> Optional[str]:
    """
    Resolve the credential for a persona.

    Args:
        env_name: Name of the persona-specific environment variable

    Returns:
        The persona key if set, otherwise GEMINI_API_KEY (may be None)
    """
    if env_name:
        value = os.getenv(env_name)
        if value:
            return value
    return GEMINI_API_KEY


# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# httpx logs full request URLs at INFO, which would include the ?key= credential
logging.getLogger("httpx").setLevel(logging.WARNING)
