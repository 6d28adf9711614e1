"""React Installer installation pipeline.

Launches a scaffolding generator, relays its output, infers progress from the
text it prints, and resolves each run to a terminal success/failure state.

Key classes:
    ProcessLauncher      - Generator command resolution, pre-flight, spawning
    OutputRelay          - stdout/stderr chunk forwarding
    InstallationSession  - Per-run state machine
    SessionManager       - Single-flight guard around sessions
"""

from .errors import (
    DirectoryExistsError,
    ErrorCategory,
    ErrorInfo,
    GeneratorFailureError,
    InstallationCancelledError,
    InstallerError,
    SessionBusyError,
    SessionStateError,
    SpawnFailureError,
    TargetDirectoryError,
    UnknownProjectTypeError,
    normalize_error,
)
from .launcher import ProcessHandle, ProcessLauncher
from .models import (
    COMMAND_TABLE,
    CommandSpec,
    InstallRequest,
    InstallResult,
    OutputChunk,
    ProgressState,
    ProjectType,
    SessionStatus,
    StreamName,
)
from .progress import classify
from .relay import OutputRelay
from .session import InstallationObserver, InstallationSession, SessionManager

__all__ = [
    # Models
    "ProjectType",
    "CommandSpec",
    "COMMAND_TABLE",
    "InstallRequest",
    "InstallResult",
    "OutputChunk",
    "ProgressState",
    "SessionStatus",
    "StreamName",
    # Errors
    "InstallerError",
    "DirectoryExistsError",
    "TargetDirectoryError",
    "UnknownProjectTypeError",
    "SpawnFailureError",
    "GeneratorFailureError",
    "InstallationCancelledError",
    "SessionBusyError",
    "SessionStateError",
    "ErrorCategory",
    "ErrorInfo",
    "normalize_error",
    # Pipeline
    "ProcessLauncher",
    "ProcessHandle",
    "OutputRelay",
    "classify",
    "InstallationObserver",
    "InstallationSession",
    "SessionManager",
]
