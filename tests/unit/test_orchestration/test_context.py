"""
Unit tests for correlation context propagation.
"""

import threading

import pytest

from buildconnector.orchestration.context import (
    context_scope,
    get_current_context_id,
    reset_current_context_id,
    set_current_context_id,
)


@pytest.mark.unit
class TestCorrelationContext:
    """Test cases for the correlation id helpers."""

    def test_default_is_none(self):
        assert get_current_context_id() is None

    def test_set_and_reset(self):
        token = set_current_context_id("request-1")
        assert get_current_context_id() == "request-1"

        reset_current_context_id(token)
        assert get_current_context_id() is None

    def test_context_scope_restores_previous_value(self):
        """Test that nested scopes restore the outer id on exit."""
        with context_scope("outer"):
            with context_scope("inner") as current:
                assert current == "inner"
                assert get_current_context_id() == "inner"
            assert get_current_context_id() == "outer"
        assert get_current_context_id() is None

    def test_context_scope_restores_on_error(self):
        with pytest.raises(ValueError):
            with context_scope("failing"):
                raise ValueError("boom")
        assert get_current_context_id() is None

    def test_context_is_thread_local(self):
        """Test that a new thread does not see the caller's id."""
        seen = []

        with context_scope("caller"):
            thread = threading.Thread(target=lambda: seen.append(get_current_context_id()))
            thread.start()
            thread.join()

        assert seen == [None]
