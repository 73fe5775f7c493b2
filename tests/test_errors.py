"""
Tests for Commandless error taxonomy.

Copyright (c) 2025 Graziano Labs Corp.
"""

import pytest
from commandless.errors import (
    AnalysisError,
    CatalogError,
    CommandlessError,
    TemplateError,
)


def test_error_has_code():
    """Error has code attribute and includes it in string representation."""
    err = TemplateError("E001", "test message")
    assert err.code == "E001"
    assert "[E001]" in str(err)


def test_error_has_message():
    """Error has message attribute."""
    err = CatalogError("E101", "test message")
    assert err.message == "test message"
    assert "test message" in str(err)


def test_error_with_hint():
    """Error can store hint for fixing."""
    err = TemplateError("E001", "test", hint="Try this instead")
    assert err.hint == "Try this instead"


def test_error_hint_defaults_to_none():
    err = AnalysisError("E202", "timed out")
    assert err.hint is None


def test_error_inheritance():
    """Verify error class hierarchy."""
    assert issubclass(TemplateError, CommandlessError)
    assert issubclass(CatalogError, CommandlessError)
    assert issubclass(AnalysisError, CommandlessError)
    assert issubclass(CommandlessError, Exception)


def test_error_can_be_caught_as_base():
    with pytest.raises(CommandlessError) as exc_info:
        raise CatalogError("E102", "undeclared slot")
    assert exc_info.value.code == "E102"
