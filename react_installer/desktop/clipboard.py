"""Clipboard access with a fallback chain.

Copying tries, in order:

1. the native clipboard through ``pyperclip``;
2. the platform's clipboard command (``pbcopy``, ``clip``, ``wl-copy``,
   ``xclip``, ``xsel``);
3. manual copy: the operation reports failure and hands the text back so the
   caller can show it for the user to copy by hand.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from enum import Enum

import pyperclip

COMMAND_TIMEOUT = 5


class ClipboardBackend(str, Enum):
    """Mechanism that performed (or failed) a copy."""
    NATIVE = "pyperclip"
    COMMAND = "command"
    MANUAL = "manual"


@dataclass
class ClipboardResult:
    """Result of a clipboard operation.

    Attributes:
        success: Whether the text reached the clipboard.
        backend: Backend that handled the copy.
        message: Info or error message; on manual fallback it carries the text.
        chars_copied: Number of characters copied.
    """

    success: bool
    backend: ClipboardBackend
    message: str | None = None
    chars_copied: int = 0


def _platform_commands() -> list[list[str]]:
    """Clipboard commands to try on this platform, most specific first."""
    if sys.platform == "darwin":
        return [["pbcopy"]]
    if sys.platform == "win32":
        return [["clip"]]
    return [
        ["clip.exe"],  # WSL
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ]


class ClipboardManager:
    """Cross-platform clipboard writer."""

    def __init__(self, use_native: bool = True) -> None:
        self.use_native = use_native

    def copy(self, text: str) -> ClipboardResult:
        """Copy *text*, falling through the backends until one succeeds."""
        if self.use_native:
            result = self._copy_native(text)
            if result.success:
                return result

        result = self._copy_with_command(text)
        if result.success:
            return result

        return ClipboardResult(
            success=False,
            backend=ClipboardBackend.MANUAL,
            message=f"Copy failed. Command: {text}",
        )

    def _copy_native(self, text: str) -> ClipboardResult:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            return ClipboardResult(
                success=False, backend=ClipboardBackend.NATIVE, message=str(exc)
            )
        return ClipboardResult(
            success=True, backend=ClipboardBackend.NATIVE, chars_copied=len(text)
        )

    def _copy_with_command(self, text: str) -> ClipboardResult:
        for cmd in _platform_commands():
            if shutil.which(cmd[0]) is None:
                continue
            try:
                completed = subprocess.run(
                    cmd,
                    input=text.encode("utf-8"),
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    timeout=COMMAND_TIMEOUT,
                    check=False,
                )
            except (OSError, subprocess.TimeoutExpired):
                continue
            if completed.returncode == 0:
                return ClipboardResult(
                    success=True,
                    backend=ClipboardBackend.COMMAND,
                    message=cmd[0],
                    chars_copied=len(text),
                )
        return ClipboardResult(
            success=False,
            backend=ClipboardBackend.COMMAND,
            message="No clipboard command available",
        )
