"""Helpers for running allow-listed executables without a shell."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Collection, Sequence
from pathlib import Path
from subprocess import CompletedProcess

__all__ = ["UnsafeSubprocessError", "normalize_command", "resolve_executable", "run_validated_command"]


class UnsafeSubprocessError(ValueError):
    """Raised when a command or executable fails validation."""


def normalize_command(command: Sequence[str]) -> tuple[str, ...]:
    """Return ``command`` as a tuple after rejecting empty or control-laden parts."""
    if not command:
        raise UnsafeSubprocessError("Command must contain at least one component.")

    for index, part in enumerate(command):
        if not isinstance(part, str) or not part:
            raise UnsafeSubprocessError(f"Command component at position {index} must be a non-empty string.")
        if any(char in part for char in ("\x00", "\r", "\n")):
            raise UnsafeSubprocessError(f"Command component at position {index} contains control characters.")

    return tuple(command)


def resolve_executable(executable: str, allowed_names: Collection[str]) -> str:
    """Resolve ``executable`` to an absolute path whose basename is allow-listed."""
    candidate = Path(executable)
    if not candidate.is_absolute():
        found = shutil.which(executable)
        if found is None:
            raise UnsafeSubprocessError(f"Executable '{executable}' was not found on PATH.")
        candidate = Path(found)

    if not candidate.is_file():
        raise UnsafeSubprocessError(f"Executable '{candidate}' does not reference a file.")
    if candidate.name.lower() not in {name.lower() for name in allowed_names}:
        raise UnsafeSubprocessError(f"Executable '{candidate}' is not permitted for execution.")

    return os.fspath(candidate)


def run_validated_command(
    command: Sequence[str],
    *,
    allowed_names: Collection[str],
    timeout: float | None = None,
) -> CompletedProcess[str]:
    """Run ``command`` with ``shell=False``, captured text output and a timeout.

    Raises:
        UnsafeSubprocessError: If validation fails.
        subprocess.TimeoutExpired: If the process outlives ``timeout``.
        OSError: If the process cannot be started.
    """
    normalized = normalize_command(command)
    if timeout is not None and timeout <= 0:
        raise UnsafeSubprocessError("Timeout must be greater than zero when provided.")

    executable = resolve_executable(normalized[0], allowed_names)
    return subprocess.run(
        (executable, *normalized[1:]),
        shell=False,
        check=False,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
