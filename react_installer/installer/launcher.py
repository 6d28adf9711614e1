"""Scaffolding generator process launcher.

Resolves a project type to its fixed generator command, runs the pre-flight
checks on the target directory, and spawns the generator as a child process
whose stdout/stderr are piped back for the output relay. The launcher never
touches the file system itself: the generator creates the project directory.
"""

from __future__ import annotations

import asyncio
import os
import shlex
import signal
import subprocess
from pathlib import Path

from react_installer.installer.errors import (
    DirectoryExistsError,
    SpawnFailureError,
    TargetDirectoryError,
    UnknownProjectTypeError,
)
from react_installer.installer.models import (
    COMMAND_TABLE,
    CommandSpec,
    InstallRequest,
    ProjectType,
)
from react_installer.utils import console

# Exit codes a shell uses when the program itself cannot be found.
SHELL_NOT_FOUND_CODES: frozenset[int] = frozenset({127, 9009})

_POSIX = os.name != "nt"


class ProcessHandle:
    """Owns one running generator process.

    Exposes the piped output streams, an awaitable exit code, and
    termination of the whole process tree (the generator forks npm, node,
    git, ...).
    """

    def __init__(self, process: asyncio.subprocess.Process, argv: list[str], cwd: Path) -> None:
        self._process = process
        self.argv = argv
        self.cwd = cwd

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def stdout(self) -> asyncio.StreamReader | None:
        return self._process.stdout

    @property
    def stderr(self) -> asyncio.StreamReader | None:
        return self._process.stderr

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    async def wait(self) -> int:
        """Wait for the process to exit and return its exit code."""
        return await self._process.wait()

    def _signal(self, sig: int) -> None:
        try:
            if _POSIX:
                # The child leads its own session, so its pid is the group id.
                os.killpg(self._process.pid, sig)
            elif sig == signal.SIGTERM:
                self._process.terminate()
            else:
                self._process.kill()
        except ProcessLookupError:
            pass

    async def terminate(self, timeout: float = 5.0) -> int:
        """Terminate the process tree, escalating to a kill after *timeout*.

        Returns:
            The exit code of the reaped process.
        """
        if self._process.returncode is not None:
            return self._process.returncode

        self._signal(signal.SIGTERM)
        try:
            return await asyncio.wait_for(self._process.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            self._signal(signal.SIGKILL if _POSIX else signal.SIGTERM)
            return await self._process.wait()


class ProcessLauncher:
    """Spawns scaffolding generators.

    Args:
        use_shell: Run the command line through the system shell (so ``npx``
            and ``npm`` shims resolve the way they do in a terminal).
        commands: Override of the project-type command table.
    """

    def __init__(
        self,
        use_shell: bool = True,
        commands: dict[ProjectType, CommandSpec] | None = None,
    ) -> None:
        self.use_shell = use_shell
        self.commands = dict(COMMAND_TABLE if commands is None else commands)

    # ------------------------------------------------------------------
    # Command resolution
    # ------------------------------------------------------------------

    def resolve(self, project_type: ProjectType | str) -> CommandSpec:
        """Return the command spec for *project_type*.

        Raises:
            UnknownProjectTypeError: If the tag is not a known project type
                or has no registered command.
        """
        try:
            key = ProjectType(project_type)
        except ValueError:
            raise UnknownProjectTypeError(project_type) from None
        spec = self.commands.get(key)
        if spec is None:
            raise UnknownProjectTypeError(key)
        return spec

    def build_argv(self, request: InstallRequest) -> list[str]:
        """Return ``[program, *args]`` for *request*."""
        return self.resolve(request.project_type).argv(request.project_name)

    @staticmethod
    def format_command_line(argv: list[str]) -> str:
        """Quote *argv* as a single command line for the host shell."""
        if _POSIX:
            return shlex.join(argv)
        return subprocess.list2cmdline(argv)

    def is_command_not_found(self, exit_code: int) -> bool:
        """Whether *exit_code* means the shell could not find the program."""
        return self.use_shell and exit_code in SHELL_NOT_FOUND_CODES

    # ------------------------------------------------------------------
    # Pre-flight
    # ------------------------------------------------------------------

    def preflight(self, request: InstallRequest) -> CommandSpec:
        """Validate *request* against the file system and command table.

        The existence check is advisory: nothing stops another process from
        creating the directory between this check and the generator run.

        Raises:
            TargetDirectoryError: Target directory missing or not writable.
            DirectoryExistsError: ``target/project_name`` already exists.
            UnknownProjectTypeError: No command for the project type.
        """
        target = request.target_directory
        if not target.is_dir():
            raise TargetDirectoryError(target, "Installation directory not found")
        if not os.access(target, os.W_OK):
            raise TargetDirectoryError(target, "Permission denied, cannot write to")
        if os.path.lexists(request.project_path):
            raise DirectoryExistsError(request.project_path)
        return self.resolve(request.project_type)

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    async def spawn(self, request: InstallRequest) -> ProcessHandle:
        """Start the generator for *request* without re-running pre-flight.

        Raises:
            UnknownProjectTypeError: No command for the project type.
            TargetDirectoryError: The target directory vanished after pre-flight.
            SpawnFailureError: The program could not be started.
        """
        argv = self.build_argv(request)
        cwd = request.target_directory
        command_line = self.format_command_line(argv)

        console.print(f"[dim]$ {command_line}  (in {cwd})[/dim]")

        try:
            if self.use_shell:
                process = await asyncio.create_subprocess_shell(
                    command_line,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    cwd=str(cwd),
                    start_new_session=_POSIX,
                )
            else:
                process = await asyncio.create_subprocess_exec(
                    *argv,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    cwd=str(cwd),
                    start_new_session=_POSIX,
                )
        except FileNotFoundError as exc:
            # The same errno covers a missing working directory.
            if not cwd.is_dir():
                raise TargetDirectoryError(cwd, "Installation directory not found") from exc
            raise SpawnFailureError(argv[0], f"program not found ({exc})") from exc
        except PermissionError as exc:
            raise SpawnFailureError(argv[0], f"permission denied ({exc})") from exc
        except OSError as exc:
            raise SpawnFailureError(argv[0], str(exc)) from exc

        console.print(f"[dim]Started {argv[0]} (pid {process.pid})[/dim]")
        return ProcessHandle(process, argv, cwd)

    async def launch(self, request: InstallRequest) -> ProcessHandle:
        """Run pre-flight checks, then spawn the generator."""
        self.preflight(request)
        return await self.spawn(request)
