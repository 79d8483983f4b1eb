"""Shared utility functions for monoforge.

Provides async command execution, Rich-based console output and the
interactive prompt used when the CLI is called without positional arguments.
"""

from __future__ import annotations

import asyncio
import os
import re
from collections.abc import Callable, Iterable
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams, which is what an interactive ``npm install``
            wants).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.  A timeout yields ``-1``.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    if isinstance(cmd, list):
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    else:
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {format_command(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


def format_command(cmd: str | list[str]) -> str:
    """Render *cmd* the way it would be typed in a shell."""
    return cmd if isinstance(cmd, str) else " ".join(cmd)


# ---------------------------------------------------------------------------
# Interactive prompt
# ---------------------------------------------------------------------------


def prompt_until_valid(
    message: str,
    pattern: str | re.Pattern[str],
    *,
    normalize: Callable[[str], str] | None = None,
    prompt_console: Console | None = None,
) -> str:
    """Ask for a value until the answer fully matches *pattern*.

    *normalize* (e.g. ``str.lower``) is applied to the stripped answer before
    it is checked, so the returned value is always the normalized one.

    Invalid input is reported and asked again; this is the only place where
    monoforge recovers from bad input instead of failing.
    """
    target = prompt_console or console
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    while True:
        raw = Prompt.ask(message, console=target).strip()
        answer = normalize(raw) if normalize else raw
        if regex.fullmatch(answer):
            return answer
        target.print(f"[yellow]'{escape(raw)}' does not match {escape(regex.pattern)}[/yellow]")


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step(message: str, out: Console | None = None) -> None:
    """Print a dim progress line such as ``Copy files...``."""
    (out or console).print(f"[cyan]{message}[/cyan]")


def print_success(message: str, out: Console | None = None) -> None:
    """Print a green success message."""
    (out or console).print(f"[bold green]{message}[/bold green]")


def print_error(message: str, out: Console | None = None) -> None:
    """Print a red error message."""
    (out or console).print(f"[bold red]{message}[/bold red]")


def print_warning(message: str, out: Console | None = None) -> None:
    """Print a yellow warning message."""
    (out or console).print(f"[bold yellow]{message}[/bold yellow]")


def print_blueprint_table(
    rows: Iterable[tuple[str, str, str]],
    title: str = "Blueprints",
    out: Console | None = None,
) -> None:
    """Print a ``name / package / archive`` table.

    Args:
        rows: ``(blueprint name, owning package, archive path)`` triples.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Blueprint", no_wrap=True)
    table.add_column("Package", style="dim", no_wrap=True)
    table.add_column("Archive", style="dim")

    for name, package, archive in rows:
        table.add_row(name, package, archive)

    target = out or console
    target.print(table)
    target.print()
