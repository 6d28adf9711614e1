"""Desktop integration: clipboard, browser, editor and file manager."""

from .clipboard import ClipboardBackend, ClipboardManager, ClipboardResult
from .system import (
    FILE_MANAGER_FALLBACK,
    ActionResult,
    open_external,
    open_in_editor,
    reveal_in_file_manager,
)

__all__ = [
    "ClipboardBackend",
    "ClipboardManager",
    "ClipboardResult",
    "ActionResult",
    "FILE_MANAGER_FALLBACK",
    "open_external",
    "open_in_editor",
    "reveal_in_file_manager",
]
