# /*
# Copyright 2026 The ARK Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Utility functions for command execution, status output, and value encoding."""

from __future__ import annotations

import base64
import os
import subprocess
from pathlib import Path

import sh

from quickstart_manager import console, logger


# ============================================================================
# Status output
# ============================================================================

def _print_details(details: str | None, style: str | None = None) -> None:
    if not details:
        return
    for line in details.rstrip("\n").splitlines():
        console.print(f"        {line}", style=style, markup=False)


def print_info(message: str, details: str | None = None) -> None:
    console.print(f"[blue]ℹ️  {message}[/blue]")
    _print_details(details, style="dim")


def print_ok(message: str, details: str | None = None) -> None:
    console.print(f"[green]✅ {message}[/green]")
    _print_details(details)


def print_warn(message: str, details: str | None = None) -> None:
    console.print(f"[yellow]⚠️  {message}[/yellow]")
    _print_details(details)


def print_error(message: str, details: str | None = None) -> None:
    console.print(f"[bold red]❌ {message}[/bold red]")
    _print_details(details)


# ============================================================================
# Command execution
# ============================================================================

def which(cmd: str) -> str | None:
    """Resolve a command on the system PATH.

    Args:
        cmd: Name of the CLI command to look up.

    Returns:
        Absolute path of the executable, or None if it is not installed.
    """
    try:
        return str(sh.which(cmd)).strip() or None
    except sh.ErrorReturnCode:
        return None


def run_quiet(command: str, cwd: Path | None = None, env: dict[str, str] | None = None) -> bool:
    """Run a shell command with its output suppressed.

    Args:
        command: Command line passed to ``bash -c``.
        cwd: Working directory, or None for the current one.
        env: Extra environment variables layered over the process environment.

    Returns:
        True if the command exited with status 0.
    """
    logger.debug("Running quietly: %s", command)
    try:
        sh.bash(
            "-c", command,
            _out=os.devnull,
            _err=os.devnull,
            _cwd=str(cwd) if cwd else None,
            _env={**os.environ, **(env or {})},
        )
        return True
    except sh.ErrorReturnCode as err:
        logger.debug("Command failed with exit code %s: %s", err.exit_code, command)
        return False


def run_streamed(command: str, cwd: Path | None = None, env: dict[str, str] | None = None) -> bool:
    """Run a shell command with its output passed through to the terminal.

    Args:
        command: Command line passed to ``bash -c``.
        cwd: Working directory, or None for the current one.
        env: Extra environment variables layered over the process environment.

    Returns:
        True if the command exited with status 0.
    """
    logger.debug("Running: %s", command)
    try:
        sh.bash(
            "-c", command,
            _fg=True,
            _cwd=str(cwd) if cwd else None,
            _env={**os.environ, **(env or {})},
        )
        return True
    except sh.ErrorReturnCode as err:
        logger.debug("Command failed with exit code %s: %s", err.exit_code, command)
        return False


def run_kubectl(args: list[str], timeout: int = 30, stdin: str | None = None) -> tuple[bool, str, str]:
    """Run a kubectl command via subprocess and return (success, stdout, stderr).

    Uses subprocess instead of sh because probes need stdout and stderr kept
    apart (e.g. printing ``cluster-info`` while discarding its warnings).

    Args:
        args: kubectl arguments (e.g. ``["get", "model", "default"]``).
        timeout: Maximum seconds to wait for the command to complete.
        stdin: Text written to kubectl's stdin, for ``apply -f -``.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    logger.debug("kubectl %s", " ".join(args))
    try:
        result = subprocess.run(
            ["kubectl", *args],
            capture_output=True,
            text=True,
            timeout=timeout,
            input=stdin,
        )
        return result.returncode == 0, result.stdout, result.stderr
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)


# ============================================================================
# Value helpers
# ============================================================================

def normalize_base_url(url: str) -> str:
    """Strip trailing path separators from a base URL."""
    return url.rstrip("/")


def encode_api_key(api_key: str) -> str:
    """Base64-encode an API key on a single line, as Secret data requires."""
    return base64.b64encode(api_key.encode()).decode()
