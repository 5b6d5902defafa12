"""Unit tests for ExchangeLogger."""
import sys
sys.path.insert(0, 'backend')

import json
import pytest
from pathlib import Path
from unittest.mock import Mock
from services.exchange_logger import ExchangeLogger


@pytest.fixture
def temp_log_file(tmp_path):
    """Create a temporary log file path in a directory that does not exist yet."""
    return str(tmp_path / "nested" / "test_exchanges.jsonl")


@pytest.fixture
def encoder():
    """Fake tokenizer: one token per whitespace separated word."""
    fake = Mock()
    fake.encode.side_effect = lambda text: text.split()
    return fake


@pytest.fixture
def exchange_logger(temp_log_file, encoder):
    """Create an ExchangeLogger instance with temporary log file."""
    logger = ExchangeLogger(log_file_path=temp_log_file, encoder=encoder)
    yield logger
    logger.close()


def read_entries(path):
    with open(path, 'r') as f:
        return [json.loads(line) for line in f]


def test_creates_parent_directory_and_file(exchange_logger, temp_log_file):
    """Test the log directory and file are created."""
    assert Path(temp_log_file).exists()


def test_count_tokens_uses_encoder(exchange_logger, encoder):
    """Test token counting goes through the encoder."""
    assert exchange_logger.count_tokens("three word prompt") == 3
    encoder.encode.assert_called_once_with("three word prompt")


def test_log_exchange_json_format(exchange_logger, temp_log_file):
    """Test a completed exchange is written as one JSON line."""
    exchange_logger.log_exchange(
        conversation_id="conv_abc123def456",
        persona="linkedin",
        user_text="Improve my headline",
        prompt_tokens=210,
        outcome="completed",
        latency_ms=842,
        suggestion_count=3,
        suggestions_parsed=True
    )

    entries = read_entries(temp_log_file)
    assert len(entries) == 1
    entry = entries[0]
    assert entry["timestamp"].endswith("Z")
    assert entry["conversation_id"] == "conv_abc123def456"
    assert entry["persona"] == "linkedin"
    assert entry["user_text"] == "Improve my headline"
    assert entry["prompt_tokens"] == 210
    assert entry["outcome"] == "completed"
    assert entry["latency_ms"] == 842
    assert entry["failure_kind"] is None
    assert entry["suggestion_count"] == 3
    assert entry["suggestions_parsed"] is True


def test_log_failed_exchange(exchange_logger, temp_log_file):
    """Test a failed exchange records its failure kind."""
    exchange_logger.log_exchange(
        conversation_id="conv_1",
        persona="qwixai",
        user_text="Hi",
        prompt_tokens=150,
        outcome="failed",
        latency_ms=12,
        failure_kind="network"
    )
    entry = read_entries(temp_log_file)[0]
    assert entry["outcome"] == "failed"
    assert entry["failure_kind"] == "network"
    assert entry["suggestions_parsed"] is False


def test_appends_across_instances(temp_log_file, encoder):
    """Test a new logger appends to an existing file."""
    for i in range(2):
        logger = ExchangeLogger(log_file_path=temp_log_file, encoder=encoder)
        logger.log_exchange("conv_1", "linkedin", f"message {i}", 10, "completed", 5)
        logger.close()

    entries = read_entries(temp_log_file)
    assert [e["user_text"] for e in entries] == ["message 0", "message 1"]


def test_close_is_idempotent(exchange_logger):
    """Test close can be called twice."""
    exchange_logger.close()
    exchange_logger.close()
