"""Installation error taxonomy and user-facing error normalisation.

Every failure of an installation session is raised (or converted) as an
``InstallerError`` subclass and then mapped through ``normalize_error`` into
one of a small set of categories with a remediation message. The raw
message is kept on ``ErrorInfo.detail`` for diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class InstallerError(Exception):
    """Base class for every installation failure."""


class DirectoryExistsError(InstallerError):
    """The project directory is already present in the target directory."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f'Directory "{self.path.name}" already exists!')


class TargetDirectoryError(InstallerError):
    """The target directory is missing or cannot be written to."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class UnknownProjectTypeError(InstallerError):
    """No generator command is registered for the requested project type."""

    def __init__(self, project_type: object) -> None:
        self.project_type = project_type
        tag = getattr(project_type, "value", project_type)
        super().__init__(f"Unknown project type: {tag}")


class SpawnFailureError(InstallerError):
    """The generator program could not be started."""

    def __init__(self, program: str, cause: str) -> None:
        self.program = program
        self.cause = cause
        super().__init__(f"Failed to start '{program}': {cause}")


class GeneratorFailureError(InstallerError):
    """The generator ran and exited with a non-zero code."""

    def __init__(self, exit_code: int, stderr: str) -> None:
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Installation failed with code {exit_code}: {stderr}")


class InstallationCancelledError(InstallerError):
    """The user abandoned the installation."""

    def __init__(self, message: str = "Installation cancelled by user") -> None:
        super().__init__(message)


class SessionBusyError(InstallerError):
    """Another installation is already running."""


class SessionStateError(InstallerError):
    """A session was driven from a state that does not allow it."""


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------


class ErrorCategory(str, Enum):
    """User-facing failure category."""
    ALREADY_EXISTS = "already-exists"
    PERMISSION = "permission"
    NETWORK = "network"
    PACKAGE_MANAGER = "package-manager"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorInfo:
    category: ErrorCategory
    message: str
    detail: str

    @property
    def should_focus_name(self) -> bool:
        """Whether the UI should send the user back to the project-name input."""
        return self.category is ErrorCategory.ALREADY_EXISTS


# Ordered: first match wins. Each entry is (case-sensitive codes, lower-case phrases).
_CATEGORY_RULES: list[tuple[ErrorCategory, tuple[str, ...], tuple[str, ...], str]] = [
    (
        ErrorCategory.ALREADY_EXISTS,
        ("EEXIST",),
        ("already exists",),
        "A project with this name already exists in the selected directory. "
        "Please choose a different project name.",
    ),
    (
        ErrorCategory.PERMISSION,
        ("EACCES",),
        ("permission denied", "permission"),
        "Permission denied. Please check folder permissions or run as administrator.",
    ),
    (
        ErrorCategory.NETWORK,
        ("ENOTFOUND",),
        ("network",),
        "Network error. Please check your internet connection.",
    ),
    (
        ErrorCategory.PACKAGE_MANAGER,
        ("npm ERR!",),
        ("yarn error",),
        "Package manager error. Please ensure npm/yarn is installed correctly.",
    ),
]


def normalize_error(error: BaseException | str) -> ErrorInfo:
    """Map a raw failure into a user-facing ``ErrorInfo``.

    Unmatched messages are surfaced verbatim under ``ErrorCategory.UNKNOWN``.
    """
    if isinstance(error, InstallationCancelledError):
        raw = str(error)
        return ErrorInfo(category=ErrorCategory.CANCELLED, message=raw, detail=raw)

    raw = str(error) if isinstance(error, BaseException) else error
    raw = raw or (error.__class__.__name__ if isinstance(error, BaseException) else "")
    lowered = raw.lower()

    for category, codes, phrases, message in _CATEGORY_RULES:
        if any(code in raw for code in codes) or any(p in lowered for p in phrases):
            return ErrorInfo(category=category, message=message, detail=raw)

    return ErrorInfo(category=ErrorCategory.UNKNOWN, message=raw, detail=raw)
