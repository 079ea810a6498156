"""
Tests for structured logging utilities
"""

import json
import logging
import pytest
from unittest.mock import Mock

from utils.logging_config import (
    ErrorTracker,
    StructuredFormatter,
    log_conversation_event,
    log_execution_time,
    log_user_interaction,
)


def make_record(message="hello", **extra):
    record = logging.LogRecord("suporte_offshore.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_outputs_json_with_extra_fields(self):
        output = StructuredFormatter().format(make_record("Conversa criada", conversation_id="c1"))

        data = json.loads(output)
        assert data["msg"] == "Conversa criada"
        assert data["level"] == "INFO"
        assert data["context"] == {"conversation_id": "c1"}

    def test_keeps_non_ascii(self):
        output = StructuredFormatter().format(make_record("Conversa excluída"))

        assert "excluída" in output


class TestLogHelpers:
    def test_log_user_interaction(self):
        logger = Mock()

        log_user_interaction(logger, "login", user_id="user-1")

        _, kwargs = logger.info.call_args
        assert kwargs["extra"]["interaction_type"] == "login"
        assert kwargs["extra"]["user_id"] == "user-1"

    def test_log_conversation_event(self):
        logger = Mock()

        log_conversation_event(logger, "created", "conv-1", title="Oi")

        _, kwargs = logger.info.call_args
        assert kwargs["extra"]["conversation_event_type"] == "created"
        assert kwargs["extra"]["conversation_id"] == "conv-1"

    def test_execution_time_success(self):
        logger = Mock()

        with log_execution_time(logger, "reply_webhook_request"):
            pass

        _, kwargs = logger.info.call_args
        assert kwargs["extra"]["status"] == "success"

    def test_execution_time_reraises(self):
        logger = Mock()

        with pytest.raises(ValueError):
            with log_execution_time(logger, "reply_webhook_request"):
                raise ValueError("boom")

        _, kwargs = logger.error.call_args
        assert kwargs["extra"]["status"] == "error"
        assert kwargs["extra"]["error_type"] == "ValueError"


class TestErrorTracker:
    def test_counts_errors_by_type_and_context(self):
        tracker = ErrorTracker(Mock())

        tracker.track_error(ValueError("a"), "supabase_client_initialization")
        tracker.track_error(ValueError("b"), "supabase_client_initialization")
        tracker.track_error(KeyError("c"), "render")

        summary = tracker.get_error_summary()
        assert summary["total_errors"] == 3
        assert summary["unique_errors"] == 2
        assert summary["error_breakdown"]["ValueError:supabase_client_initialization"] == 2
        assert summary["most_common"] == "ValueError:supabase_client_initialization"
