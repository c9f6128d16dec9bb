"""
Tests for error classification and the recent-errors buffer.
"""
from datetime import datetime

import pytest
import requests

from inventory_app.core.errors import (
    CATEGORY_MESSAGES,
    UNKNOWN_ERROR_MESSAGE,
    ErrorCategory,
    ErrorHandler,
    classify_error,
)
from inventory_app.core.exceptions import AuthenticationError, BackendError, ValidationError


class TestClassification:
    """Test suite for classify_error"""

    @pytest.mark.parametrize("message,category", [
        ("Invalid login credentials", ErrorCategory.AUTH),
        ("JWT expired", ErrorCategory.AUTH),
        ("SQL syntax error near WHERE", ErrorCategory.DATABASE),
        ("violates constraint items_sku_key", ErrorCategory.DATABASE),
        ("network request failed", ErrorCategory.NETWORK),
        ("request timeout", ErrorCategory.NETWORK),
        ("Name is required", ErrorCategory.VALIDATION),
        ("upload rejected", ErrorCategory.STORAGE),
        ("something odd", ErrorCategory.UNKNOWN),
    ])
    def test_keyword_rules(self, message, category):
        """Test: Messages are bucketed by keyword"""
        assert classify_error(Exception(message)) == category

    def test_first_matching_rule_wins(self):
        """Test: A message with auth and database keywords is an auth error"""
        assert classify_error(Exception("token lookup query failed")) == ErrorCategory.AUTH

    def test_matching_is_case_sensitive(self):
        """Test: 'NETWORK' does not match the lowercase keyword"""
        assert classify_error(Exception("NETWORK DOWN")) == ErrorCategory.UNKNOWN

    def test_exception_types(self):
        """Test: Without a keyword, connection errors and domain exceptions classify by type"""
        assert classify_error(requests.exceptions.ConnectionError("refused")) == ErrorCategory.NETWORK
        assert classify_error(BackendError("boom")) == ErrorCategory.DATABASE
        assert classify_error(ValidationError("Please enter a valid email address")) == ErrorCategory.VALIDATION

    def test_keywords_win_over_exception_types(self):
        """Test: A keyword in the message decides even when the type belongs to another rule"""
        assert classify_error(BackendError("network unreachable")) == ErrorCategory.NETWORK
        assert classify_error(ValidationError("token expired")) == ErrorCategory.AUTH
        assert classify_error(AuthenticationError("upload quota exceeded")) == ErrorCategory.STORAGE

    def test_none_is_unknown(self):
        assert classify_error(None) == ErrorCategory.UNKNOWN

    def test_dict_errors(self):
        """Test: Error payloads shaped like {"message": ...} are classified"""
        assert classify_error({"message": "permission denied for table items"}) == ErrorCategory.AUTH


class TestErrorHandler:
    """Test suite for ErrorHandler"""

    def test_handle_records_entry(self):
        """Test: handle() returns the entry and keeps it at the front"""
        handler = ErrorHandler(clock=lambda: datetime(2026, 10, 18))

        entry = handler.handle(Exception("Invalid login credentials"), {"operation": "login"})

        assert entry.category == ErrorCategory.AUTH
        assert entry.message == "Invalid login credentials"
        assert entry.context == {"operation": "login"}
        assert handler.get_recent(1) == [entry]

    def test_none_error_message(self):
        """Test: A None error gets the generic unknown message"""
        entry = ErrorHandler().handle(None)

        assert entry.category == ErrorCategory.UNKNOWN
        assert entry.message == UNKNOWN_ERROR_MESSAGE

    def test_empty_message_uses_category_template(self):
        """Test: An error without a message falls back to the category template"""
        entry = ErrorHandler().handle(ConnectionError())

        assert entry.category == ErrorCategory.NETWORK
        assert entry.message == CATEGORY_MESSAGES[ErrorCategory.NETWORK]

    def test_ring_buffer_keeps_newest_fifty(self):
        """Test: After 51 errors only 50 remain, newest first"""
        handler = ErrorHandler(capacity=50)
        for i in range(51):
            handler.handle(Exception(f"error {i}"), show_notification=False)

        assert len(handler) == 50
        recent = handler.get_recent(50)
        assert recent[0].message == "error 50"
        assert recent[-1].message == "error 1"

    def test_get_recent_default_limit(self):
        handler = ErrorHandler()
        for i in range(15):
            handler.handle(Exception(f"error {i}"))

        assert len(handler.get_recent()) == 10

    def test_notifier_only_when_requested(self):
        """Test: The notifier runs unless show_notification is False"""
        seen = []
        handler = ErrorHandler(notifier=seen.append)

        handler.handle(Exception("shown"))
        handler.handle(Exception("hidden"), show_notification=False)

        assert [entry.message for entry in seen] == ["shown"]

    def test_clear(self):
        handler = ErrorHandler()
        handler.handle(Exception("x"))
        handler.clear()
        assert handler.get_recent() == []

    def test_try_catch(self):
        """Test: try_catch returns (result, None) or (None, entry)"""
        handler = ErrorHandler()

        assert handler.try_catch(lambda: 42) == (42, None)

        def fail():
            raise RuntimeError("database unavailable")

        result, entry = handler.try_catch(fail, {"operation": "fetch"})
        assert result is None
        assert entry.category == ErrorCategory.DATABASE
        assert entry.to_dict()["error_type"] == "RuntimeError"
