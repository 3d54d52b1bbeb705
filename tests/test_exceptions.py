"""Tests for keyhound custom exception hierarchy.

This module contains tests for the exception classes defined in
keyhound.core.exceptions, verifying that each exception can be raised,
caught, and provides proper error context.
"""

from __future__ import annotations

import pytest

from keyhound.core.exceptions import (
    ConfigError,
    GitCommandError,
    KeyhoundError,
    OutputError,
    ScanError,
    TraversalError,
    ValidationInconclusive,
)


class TestKeyhoundError:
    """Tests for the base KeyhoundError exception."""

    def test_message_and_default_context(self) -> None:
        """Test that message is set and context defaults to empty dict."""
        error = KeyhoundError("Test message")
        assert error.message == "Test message"
        assert error.context == {}
        assert str(error) == "Test message"

    def test_str_with_context(self) -> None:
        """Test string representation includes context."""
        result = str(KeyhoundError("Test error", context={"key": "value"}))
        assert "Test error" in result
        assert "key='value'" in result

    @pytest.mark.parametrize(
        "error",
        [
            ScanError("x"),
            TraversalError("x"),
            GitCommandError("x"),
            ValidationInconclusive("x"),
            ConfigError("x"),
            OutputError("x"),
        ],
    )
    def test_all_errors_are_keyhound_errors(self, error: KeyhoundError) -> None:
        """Test that one except clause catches every keyhound error."""
        with pytest.raises(KeyhoundError):
            raise error


class TestScanError:
    """Tests for the ScanError exception."""

    def test_path_in_context(self) -> None:
        """Test that the path is stored as attribute and context."""
        error = ScanError("Not a git repository", path="/tmp/nothing")
        assert error.path == "/tmp/nothing"
        assert error.context["path"] == "/tmp/nothing"

    def test_without_path(self) -> None:
        """Test that path is optional."""
        error = ScanError("Git is not installed")
        assert error.path is None
        assert "path" not in error.context


class TestTraversalError:
    """Tests for TraversalError and GitCommandError."""

    def test_branch_and_commit(self) -> None:
        """Test that branch and commit are recorded."""
        error = TraversalError("Cannot read tree", branch="main", commit="abc123")
        assert error.branch == "main"
        assert error.commit == "abc123"
        assert error.context == {"branch": "main", "commit": "abc123"}

    def test_git_command_error_context(self) -> None:
        """Test that the failing command, return code and stderr are kept."""
        error = GitCommandError(
            "Git command failed",
            git_args=["diff", "a", "b"],
            returncode=128,
            stderr="fatal: bad object\n",
        )
        assert isinstance(error, TraversalError)
        assert error.returncode == 128
        assert error.context == {
            "command": "git diff a b",
            "returncode": 128,
            "stderr": "fatal: bad object",
        }


class TestOtherErrors:
    """Tests for the remaining exception classes."""

    def test_validation_inconclusive_code(self) -> None:
        """Test that the AWS error code is recorded."""
        error = ValidationInconclusive("Throttled", code="Throttling")
        assert error.code == "Throttling"
        assert error.context["code"] == "Throttling"

    def test_config_error_key(self) -> None:
        """Test that the offending config key is recorded."""
        error = ConfigError("Invalid format", config_key="format")
        assert error.config_key == "format"
        assert error.context["config_key"] == "format"

    def test_output_error_path(self) -> None:
        """Test that the output path is recorded."""
        error = OutputError("Cannot write", output_path="/read-only/report.txt")
        assert error.output_path == "/read-only/report.txt"
        assert error.context["output_path"] == "/read-only/report.txt"
