"""Data model for the installation pipeline.

Defines the project types and their fixed generator commands, the validated
install request, the output and progress value objects streamed while a
generator runs, and the terminal result of an installation session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from react_installer.installer.errors import ErrorInfo

PROJECT_NAME_PATTERN = r"^[a-z0-9-]+$"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ProjectType(str, Enum):
    """Scaffolding generator to run."""
    CREATE_REACT_APP = "create-react-app"
    VITE = "vite"
    NEXT = "next"

    @property
    def label(self) -> str:
        return PROJECT_TYPE_LABELS[self]


PROJECT_TYPE_LABELS: dict[ProjectType, str] = {
    ProjectType.CREATE_REACT_APP: "Create React App",
    ProjectType.VITE: "Vite + React",
    ProjectType.NEXT: "Next.js",
}


class StreamName(str, Enum):
    """Child process stream an output chunk came from."""
    STDOUT = "stdout"
    STDERR = "stderr"


class SessionStatus(str, Enum):
    """Lifecycle state of an installation session."""
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.SUCCEEDED, SessionStatus.FAILED, SessionStatus.CANCELLED)


# ---------------------------------------------------------------------------
# Generator commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CommandSpec:
    """Program plus fixed arguments; the project name is spliced in at ``name_index``."""

    program: str
    args: tuple[str, ...]
    name_index: int

    def argv(self, project_name: str) -> list[str]:
        """Return the full argument vector for *project_name*."""
        args = list(self.args)
        args.insert(self.name_index, project_name)
        return [self.program, *args]


COMMAND_TABLE: dict[ProjectType, CommandSpec] = {
    ProjectType.CREATE_REACT_APP: CommandSpec(
        program="npx",
        args=("create-react-app",),
        name_index=1,
    ),
    ProjectType.VITE: CommandSpec(
        program="npm",
        args=("create", "vite@latest", "--", "--template", "react"),
        name_index=2,
    ),
    ProjectType.NEXT: CommandSpec(
        program="npx",
        args=(
            "create-next-app@latest",
            "--yes",
            "--typescript",
            "--tailwind",
            "--eslint",
            "--app",
        ),
        name_index=1,
    ),
}


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class InstallRequest(BaseModel):
    """A request to scaffold ``target_directory/project_name``.

    The name is validated here; the directory checks (exists, writable,
    project path absent) happen in the launcher's pre-flight because they
    depend on the file system at launch time.
    """

    model_config = {"frozen": True}

    project_name: str = Field(..., min_length=1, pattern=PROJECT_NAME_PATTERN)
    target_directory: Path
    project_type: ProjectType = Field(default=ProjectType.CREATE_REACT_APP)

    @property
    def project_path(self) -> Path:
        return self.target_directory / self.project_name


# ---------------------------------------------------------------------------
# Streamed values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OutputChunk:
    """One piece of generator output, in arrival order within its stream."""

    stream: StreamName
    text: str
    sequence: int


@dataclass(frozen=True)
class ProgressState:
    """Coarse progress estimate shown to the user."""

    percent: int
    label: str


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class InstallResult:
    """Terminal outcome of one installation session."""

    status: SessionStatus
    request: InstallRequest
    progress: ProgressState
    project_path: Path | None = None
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: ErrorInfo | None = None
    duration_seconds: float = 0.0
    chunks: list[OutputChunk] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is SessionStatus.SUCCEEDED

    def summary(self) -> str:
        """Return a human-readable summary of the result."""
        if self.status is SessionStatus.SUCCEEDED:
            status = "[green]SUCCEEDED[/green]"
        elif self.status is SessionStatus.CANCELLED:
            status = "[yellow]CANCELLED[/yellow]"
        else:
            status = "[red]FAILED[/red]"
        lines = [
            f"Status: {status}",
            f"Project: {self.request.project_name} ({self.request.project_type.label})",
            f"Duration: {self.duration_seconds:.1f}s",
        ]
        if self.exit_code is not None:
            lines.append(f"Exit code: {self.exit_code}")
        if self.project_path is not None:
            lines.append(f"Path: {self.project_path}")
        if self.error is not None:
            lines.append(f"Error: {self.error.message[:200]}")
        return "\n".join(lines)
