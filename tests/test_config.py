"""Unit tests for persona credential resolution."""
import sys
sys.path.insert(0, 'backend')

from unittest.mock import patch
import config


def test_persona_key_takes_precedence(monkeypatch):
    """Test a persona-specific key overrides the shared key."""
    monkeypatch.setenv("LINKEDIN_OPTIMIZER_API_KEY", "linkedin-key")
    with patch.object(config, "GEMINI_API_KEY", "shared-key"):
        assert config.get_api_key("LINKEDIN_OPTIMIZER_API_KEY") == "linkedin-key"


def test_falls_back_to_shared_key(monkeypatch):
    """Test the shared key is used when no persona key is set."""
    monkeypatch.delenv("QWIXAI_API_KEY", raising=False)
    with patch.object(config, "GEMINI_API_KEY", "shared-key"):
        assert config.get_api_key("QWIXAI_API_KEY") == "shared-key"
        assert config.get_api_key(None) == "shared-key"


def test_no_key_configured(monkeypatch):
    """Test None is returned when no key is configured."""
    monkeypatch.delenv("QWIXAI_API_KEY", raising=False)
    with patch.object(config, "GEMINI_API_KEY", None):
        assert config.get_api_key("QWIXAI_API_KEY") is None
