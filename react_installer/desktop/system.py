"""Desktop actions: open URLs, open projects in an editor, reveal paths."""

from __future__ import annotations

import os
import subprocess
import sys
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

FILE_MANAGER_FALLBACK = "File Explorer (fallback)"


@dataclass
class ActionResult:
    """Outcome of a side-effecting desktop action."""

    success: bool
    detail: str = ""
    error: str | None = None


def _spawn_detached(cmd: list[str]) -> None:
    """Start *cmd* without waiting for it or sharing our terminal."""
    subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=os.name != "nt",
    )


def open_external(url: str) -> ActionResult:
    """Open an http(s) *url* in the default browser."""
    scheme = urlparse(url).scheme.lower()
    if scheme not in ("http", "https"):
        return ActionResult(success=False, error=f"Refusing to open non-web URL: {url}")
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        return ActionResult(success=False, error=str(exc))
    if not opened:
        return ActionResult(success=False, error="No web browser available")
    return ActionResult(success=True, detail=url)


def reveal_in_file_manager(path: str | Path) -> ActionResult:
    """Show *path* in the platform file manager."""
    target = Path(path)
    if sys.platform == "darwin":
        cmd = ["open", "-R", str(target)]
    elif sys.platform == "win32":
        cmd = ["explorer", f"/select,{target}"]
    else:
        # xdg-open cannot select a file, so open the containing folder.
        folder = target if target.is_dir() else target.parent
        cmd = ["xdg-open", str(folder)]
    try:
        _spawn_detached(cmd)
    except OSError as exc:
        return ActionResult(success=False, error=f"Failed to open {target}: {exc}")
    return ActionResult(success=True, detail=FILE_MANAGER_FALLBACK)


def _editor_label(editor: str) -> str:
    name = Path(editor).stem.lower()
    return "VS Code" if name == "code" else editor


def open_in_editor(path: str | Path, editor: str = "code") -> ActionResult:
    """Open *path* in *editor*, falling back to the file manager.

    The editor is started detached; once it has been spawned the action
    counts as successful.
    """
    target = Path(path)
    if not target.exists():
        return ActionResult(success=False, error=f"Project path does not exist: {target}")
    try:
        _spawn_detached([editor, str(target)])
    except OSError:
        return reveal_in_file_manager(target)
    return ActionResult(success=True, detail=_editor_label(editor))
