"""Tests for error formatting."""

import pytest

from errkit import AppError, NotFoundError, format_error


def raised(error):
    try:
        raise error
    except Exception as exc:
        return exc


class TestFormatError:
    """Tests for format_error()."""

    def test_app_error(self, monkeypatch):
        monkeypatch.delenv("ERRKIT_ENV", raising=False)
        formatted = format_error(NotFoundError("no such user", details={"id": 7}))
        assert formatted == {
            "message": "no such user",
            "code": "NOT_FOUND",
            "status_code": 404,
            "details": {"id": 7},
            "stack": None,
        }

    def test_app_error_without_details(self):
        assert format_error(AppError("x"))["details"] == {}

    def test_foreign_error(self, monkeypatch):
        monkeypatch.delenv("ERRKIT_ENV", raising=False)
        formatted = format_error(RuntimeError("boom"))
        assert formatted == {
            "message": "boom",
            "code": "INTERNAL_ERROR",
            "status_code": 500,
            "stack": None,
        }

    def test_empty_message(self):
        assert format_error(RuntimeError())["message"] == "Unknown error occurred"

    def test_stack_in_development(self, monkeypatch):
        monkeypatch.setenv("ERRKIT_ENV", "development")
        formatted = format_error(raised(ValueError("bad input")))
        assert "ValueError: bad input" in formatted["stack"]
        assert "Traceback" in formatted["stack"]

    @pytest.mark.parametrize("env", ["production", ""])
    def test_no_stack_outside_development(self, monkeypatch, env):
        monkeypatch.setenv("ERRKIT_ENV", env)
        assert format_error(raised(ValueError("bad")))["stack"] is None

    def test_explicit_stack_flag_wins(self, monkeypatch):
        monkeypatch.setenv("ERRKIT_ENV", "development")
        assert format_error(raised(ValueError("bad")), include_stack=False)["stack"] is None
