"""Tests for subprocess wrapper with rich error context."""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from jj_starship.core.errors import RepositoryError
from jj_starship.core.subprocess import run_subprocess_with_context


def test_success_case_returns_completed_process() -> None:
    """Test that successful subprocess execution returns CompletedProcess."""
    with patch("jj_starship.core.subprocess.subprocess.run") as mock_run:
        mock_result = Mock(spec=subprocess.CompletedProcess)
        mock_result.returncode = 0
        mock_result.stdout = "abc123\n"
        mock_result.stderr = ""
        mock_run.return_value = mock_result

        result = run_subprocess_with_context(
            ["git", "rev-parse", "HEAD"],
            operation_context="resolve HEAD",
            cwd=Path("/repo"),
        )

        assert result == mock_result
        mock_run.assert_called_once_with(
            ["git", "rev-parse", "HEAD"],
            cwd=Path("/repo"),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
            timeout=None,
        )


def test_timeout_and_check_are_forwarded() -> None:
    """Test that timeout and check reach subprocess.run unchanged."""
    with patch("jj_starship.core.subprocess.subprocess.run") as mock_run:
        mock_run.return_value = Mock(spec=subprocess.CompletedProcess)

        run_subprocess_with_context(
            ["jj", "log"],
            operation_context="read log",
            timeout=1.5,
            check=False,
        )

        kwargs = mock_run.call_args.kwargs
        assert kwargs["timeout"] == 1.5
        assert kwargs["check"] is False


def test_failure_with_stderr_includes_stderr_in_error() -> None:
    """Test that subprocess failure with stderr includes stderr in error message."""
    with patch("jj_starship.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=128,
            cmd=["git", "for-each-ref"],
            stderr="fatal: not a git repository\n",
        )

        with pytest.raises(RepositoryError) as exc_info:
            run_subprocess_with_context(
                ["git", "for-each-ref"],
                operation_context="list branches",
                cwd=Path("/repo"),
            )

        error_message = str(exc_info.value)
        assert "Failed to list branches" in error_message
        assert "Command: git for-each-ref" in error_message
        assert "Exit code: 128" in error_message
        assert "stderr: fatal: not a git repository" in error_message


def test_failure_without_stderr_handles_gracefully() -> None:
    """Test that subprocess failure without stderr still produces useful error."""
    with patch("jj_starship.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1, cmd=["jj", "bookmark", "list"], stderr=""
        )

        with pytest.raises(RepositoryError) as exc_info:
            run_subprocess_with_context(["jj", "bookmark", "list"], operation_context="list bookmarks")

        error_message = str(exc_info.value)
        assert "Failed to list bookmarks" in error_message
        assert "Exit code: 1" in error_message
        assert "stderr:" not in error_message


def test_timeout_raises_repository_error() -> None:
    """Test that a timed-out command reports the limit and the command."""
    with patch("jj_starship.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["jj", "log"], timeout=2.0)

        with pytest.raises(RepositoryError) as exc_info:
            run_subprocess_with_context(
                ["jj", "log"], operation_context="read commit graph", timeout=2.0
            )

        error_message = str(exc_info.value)
        assert "Timed out after 2.0s while trying to read commit graph" in error_message
        assert "Command: jj log" in error_message


def test_missing_executable_raises_repository_error() -> None:
    """Test that a missing executable names the command."""
    with patch("jj_starship.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

        with pytest.raises(RepositoryError) as exc_info:
            run_subprocess_with_context(["jj", "log"], operation_context="read log")

        error_message = str(exc_info.value)
        assert "Command not found while trying to read log: jj" in error_message


def test_exception_chaining_preserved() -> None:
    """Test that the original exception is preserved as __cause__."""
    with patch("jj_starship.core.subprocess.subprocess.run") as mock_run:
        original_error = subprocess.CalledProcessError(
            returncode=1, cmd=["git", "status"], stderr="boom"
        )
        mock_run.side_effect = original_error

        with pytest.raises(RepositoryError) as exc_info:
            run_subprocess_with_context(["git", "status"], operation_context="get file status")

        assert exc_info.value.__cause__ is original_error


@pytest.mark.skipif(shutil.which("printf") is None, reason="printf not installed")
def test_undecodable_output_is_replaced_not_raised() -> None:
    """Test that bytes which are not UTF-8 decode to U+FFFD instead of failing."""
    result = run_subprocess_with_context(["printf", "caf\\351"], operation_context="print name")

    assert result.stdout == "caf�"
