"""Subprocess execution with rich error context for backend queries."""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from jj_starship.core.errors import RepositoryError

logger = logging.getLogger(__name__)


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    timeout: float | None = None,
    check: bool = True,
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Execute subprocess with enriched error reporting for the backend layer.

    Wraps subprocess.run() to catch CalledProcessError, TimeoutExpired and a
    missing executable, and re-raise each as RepositoryError with operation
    context, stderr output, and command details.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description of operation
        cwd: Working directory for command execution
        timeout: Wall-clock limit in seconds (None for no limit)
        check: Whether to raise on non-zero exit (default: True)
        **kwargs: Additional arguments passed to subprocess.run()

    Returns:
        CompletedProcess instance from subprocess.run()

    Raises:
        RepositoryError: If command fails, times out, or is not installed
    """
    logger.debug("Running %s (%s)", " ".join(cmd), operation_context)
    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            # git ref names and paths are raw bytes, not necessarily UTF-8
            errors="replace",
            check=check,
            timeout=timeout,
            **kwargs,
        )

    except subprocess.CalledProcessError as e:
        cmd_str = " ".join(str(arg) for arg in cmd)
        error_msg = f"Failed to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        error_msg += f"\nExit code: {e.returncode}"

        if e.stderr:
            stderr_stripped = e.stderr.strip()
            if stderr_stripped:
                error_msg += f"\nstderr: {stderr_stripped}"

        raise RepositoryError(error_msg) from e

    except subprocess.TimeoutExpired as e:
        cmd_str = " ".join(str(arg) for arg in cmd)
        error_msg = f"Timed out after {timeout}s while trying to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        raise RepositoryError(error_msg) from e

    except FileNotFoundError as e:
        cmd_str = " ".join(str(arg) for arg in cmd)
        error_msg = f"Command not found while trying to {operation_context}: {cmd[0]}"
        error_msg += f"\nFull command: {cmd_str}"
        raise RepositoryError(error_msg) from e
