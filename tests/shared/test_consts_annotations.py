"""Tests for ``ErrName - <status>: <message>.`` annotation parsers."""

from __future__ import annotations

import logging

import pytest

from packages.siam_shared.consts import parse_err_external, parse_err_http_status


def test_http_status_is_third_field_before_colon() -> None:
    """The status is the third space-separated field before the colon."""
    assert parse_err_http_status("ErrUserNotFound - 404: User not found.\n") == "404"


def test_external_message_sits_between_colon_and_period() -> None:
    """The external message runs from ': ' to the first period."""
    assert parse_err_external("ErrUserNotFound - 404: User not found.\n") == "User not found"


@pytest.mark.parametrize("parse", [parse_err_http_status, parse_err_external])
def test_missing_prefix_logs_warning_and_returns_empty(
    parse, caplog: pytest.LogCaptureFixture
) -> None:
    """Comments that do not start with Err are rejected with a warning."""
    with caplog.at_level(logging.WARNING):
        assert parse("UserNotFound - 404: User not found.\n") == ""
    assert any("annotation prefix" in record.getMessage() for record in caplog.records)


def test_missing_status_field_returns_empty(caplog: pytest.LogCaptureFixture) -> None:
    """A comment with too few fields yields an empty status, not an error."""
    with caplog.at_level(logging.WARNING):
        assert parse_err_http_status("ErrShort 404\n") == ""
    assert any("status field" in record.getMessage() for record in caplog.records)


def test_missing_message_separator_returns_empty(caplog: pytest.LogCaptureFixture) -> None:
    """A comment without ': ' yields an empty external message."""
    with caplog.at_level(logging.WARNING):
        assert parse_err_external("ErrShort - 404 no separator.\n") == ""
    assert any("message separator" in record.getMessage() for record in caplog.records)


def test_non_numeric_status_is_returned_verbatim() -> None:
    """The status parser extracts text; numeric validation happens at assembly."""
    assert parse_err_http_status("ErrOdd - abc: Odd.\n") == "abc"
