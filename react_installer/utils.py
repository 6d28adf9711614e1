"""Shared utility functions for React Installer.

Provides async command execution, project-name helpers, host information,
and Rich-based output helpers used by the CLI and the installation pipeline.
"""

from __future__ import annotations

import asyncio
import platform
import re
import sys
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

console = Console()

PROJECT_NAME_RE = re.compile(r"^[a-z0-9-]+$")
PROJECT_NAME_HINT = "Project name should contain only lowercase letters, numbers, and hyphens"

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 30,
) -> tuple[int, str, str]:
    """Run a command asynchronously and capture its output.

    Args:
        cmd: Argument list; the first item is the program.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple. A program that cannot be
        started yields return code ``-1`` with the reason in *stderr*.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
    except OSError as exc:
        return (-1, "", f"Failed to start {cmd[0]}: {exc}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# Project name helpers
# ---------------------------------------------------------------------------


def is_valid_project_name(name: str) -> bool:
    """Return ``True`` if *name* is non-empty lowercase letters, digits and hyphens."""
    return bool(name) and PROJECT_NAME_RE.match(name) is not None


def sanitize_name(name: str) -> str:
    """Convert an arbitrary name to a valid project name.

    * Lowercases the input.
    * Replaces every character other than letters, digits and hyphens with a hyphen.
    * Collapses consecutive hyphens and strips leading/trailing hyphens.

    Examples::

        sanitize_name("My App") -> "my-app"
        sanitize_name("  Shop_Front 2  ") -> "shop-front-2"
    """
    result = re.sub(r"[^a-z0-9-]", "-", name.strip().lower())
    result = re.sub(r"-+", "-", result)
    return result.strip("-")


# ---------------------------------------------------------------------------
# Host information
# ---------------------------------------------------------------------------


def get_default_path() -> Path:
    """Default installation directory: the user's Desktop."""
    return Path.home() / "Desktop"


async def _tool_version(program: str) -> str:
    if sys.platform == "win32":
        program = f"{program}.cmd"
    code, stdout, _ = await run_command([program, "--version"], timeout=15)
    if code != 0 or not stdout:
        return "unknown"
    return stdout.splitlines()[0].strip()


async def get_system_info() -> dict[str, str]:
    """Describe the host: platform, Python, Node.js and npm versions.

    Node.js and npm are probed concurrently; a missing tool reports ``unknown``.
    """
    node_version, npm_version = await asyncio.gather(
        _tool_version("node"), _tool_version("npm")
    )
    return {
        "platform": sys.platform,
        "os": f"{platform.system()} {platform.release()}".strip(),
        "python": platform.python_version(),
        "node": node_version,
        "npm": npm_version,
    }


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def create_progress() -> Progress:
    """Create a Rich progress bar for an installation.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    )
