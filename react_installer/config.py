"""React Installer configuration.

Centralised, typed configuration for the installer. All settings use
Pydantic v2 models so they can be validated at construction time and serialised
to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from react_installer.installer.models import ProjectType


def _default_editor_command() -> str:
    return "code.cmd" if os.name == "nt" else "code"


class ProcessConfig(BaseModel):
    """How scaffolding generators are spawned and drained."""

    use_shell: bool = Field(
        default=True, description="Run the generator through the system shell"
    )
    drain_grace_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Seconds to keep reading output after the generator exits",
    )


class EditorConfig(BaseModel):
    """External code editor used by the 'open project' action."""

    command: str = Field(default_factory=_default_editor_command)


class RegistryConfig(BaseModel):
    """npm registry used for catalog version lookups."""

    url: str = Field(default="https://registry.npmjs.org")
    timeout: int = Field(default=10, ge=1, description="Per-request timeout in seconds")


class InstallerConfig(BaseModel):
    """Global React Installer configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the session manager and the desktop actions.
    """

    default_directory: Path = Field(default_factory=lambda: Path.home() / "Desktop")
    default_project_type: ProjectType = Field(default=ProjectType.CREATE_REACT_APP)
    process: ProcessConfig = Field(default_factory=ProcessConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Parent directories are created.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "InstallerConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "InstallerConfig":
        """Build an ``InstallerConfig`` from environment variables.

        Recognised variables (all optional):
            RI_DEFAULT_DIR, RI_PROJECT_TYPE, RI_USE_SHELL, RI_DRAIN_GRACE,
            RI_EDITOR, RI_REGISTRY_URL, RI_REGISTRY_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("RI_DEFAULT_DIR"):
            kwargs["default_directory"] = Path(os.environ["RI_DEFAULT_DIR"])
        if os.environ.get("RI_PROJECT_TYPE"):
            kwargs["default_project_type"] = ProjectType(os.environ["RI_PROJECT_TYPE"])

        process_kwargs: dict[str, Any] = {}
        if os.environ.get("RI_USE_SHELL"):
            process_kwargs["use_shell"] = os.environ["RI_USE_SHELL"].strip().lower() in (
                "1",
                "true",
                "yes",
                "on",
            )
        if os.environ.get("RI_DRAIN_GRACE"):
            process_kwargs["drain_grace_seconds"] = float(os.environ["RI_DRAIN_GRACE"])

        editor_kwargs: dict[str, Any] = {}
        if os.environ.get("RI_EDITOR"):
            editor_kwargs["command"] = os.environ["RI_EDITOR"]

        registry_kwargs: dict[str, Any] = {}
        if os.environ.get("RI_REGISTRY_URL"):
            registry_kwargs["url"] = os.environ["RI_REGISTRY_URL"]
        if os.environ.get("RI_REGISTRY_TIMEOUT"):
            registry_kwargs["timeout"] = int(os.environ["RI_REGISTRY_TIMEOUT"])

        return cls(
            process=ProcessConfig(**process_kwargs),
            editor=EditorConfig(**editor_kwargs),
            registry=RegistryConfig(**registry_kwargs),
            **kwargs,
        )
