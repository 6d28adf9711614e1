"""Installation session state machine.

An ``InstallationSession`` drives one generator run through
``idle -> running -> succeeded | failed | cancelled``. It owns the child
process for its lifetime, aggregates output, turns output into progress
estimates, and reports every event to an ``InstallationObserver``.

``SessionManager`` enforces single-flight: at most one non-terminal session
exists at a time, and further requests are rejected rather than queued.

Typical usage::

    manager = SessionManager()
    request = InstallRequest(project_name="my-app", target_directory=Path.home())
    result = await manager.install(request, observer=MyView())
    if result.success:
        print(result.project_path)
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from pathlib import Path
from typing import TYPE_CHECKING

from rich.text import Text

from react_installer.installer.errors import (
    ErrorInfo,
    GeneratorFailureError,
    InstallationCancelledError,
    InstallerError,
    SessionBusyError,
    SessionStateError,
    SpawnFailureError,
    normalize_error,
)
from react_installer.installer.launcher import ProcessHandle, ProcessLauncher
from react_installer.installer.models import (
    InstallRequest,
    InstallResult,
    OutputChunk,
    ProgressState,
    SessionStatus,
    StreamName,
)
from react_installer.installer.progress import (
    COMPLETED_PROGRESS,
    INITIAL_PROGRESS,
    advance,
    classify,
)
from react_installer.installer.relay import OutputRelay
from react_installer.utils import console

if TYPE_CHECKING:
    from react_installer.config import InstallerConfig

READY_PROGRESS = ProgressState(0, "Ready to install…")


class InstallationObserver:
    """Receives session events. Subclasses override the hooks they need."""

    def on_progress(self, progress: ProgressState) -> None:
        pass

    def on_output(self, chunk: OutputChunk) -> None:
        pass

    def on_succeeded(self, project_path: Path) -> None:
        pass

    def on_failed(self, error: ErrorInfo) -> None:
        pass

    def on_cancelled(self) -> None:
        pass


class InstallationSession:
    """One installation attempt.

    Attributes:
        request: The request being installed.
        status: Current lifecycle state.
        progress: Latest progress estimate; never decreases while running.
        collected_output: Output text per stream, in arrival order.
        project_path: Set on success.
        error: Set on failure or cancellation.
    """

    def __init__(
        self,
        request: InstallRequest,
        launcher: ProcessLauncher | None = None,
        observer: InstallationObserver | None = None,
        drain_grace_seconds: float = 2.0,
    ) -> None:
        self.request = request
        self.status = SessionStatus.IDLE
        self.progress = READY_PROGRESS
        self.collected_output: dict[StreamName, list[str]] = {
            StreamName.STDOUT: [],
            StreamName.STDERR: [],
        }
        self.chunks: list[OutputChunk] = []
        self.project_path: Path | None = None
        self.exit_code: int | None = None
        self.error: ErrorInfo | None = None

        self._launcher = launcher or ProcessLauncher()
        self._observer = observer or InstallationObserver()
        self._drain_grace = drain_grace_seconds
        self._cancel_requested = asyncio.Event()
        self._started_at: float | None = None
        self._finished_at: float | None = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def stdout_text(self) -> str:
        return "".join(self.collected_output[StreamName.STDOUT])

    @property
    def stderr_text(self) -> str:
        return "".join(self.collected_output[StreamName.STDERR])

    @property
    def duration_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._finished_at if self._finished_at is not None else time.monotonic()
        return end - self._started_at

    def result(self) -> InstallResult:
        """Snapshot the session as an ``InstallResult``."""
        return InstallResult(
            status=self.status,
            request=self.request,
            progress=self.progress,
            project_path=self.project_path,
            exit_code=self.exit_code,
            stdout=self.stdout_text,
            stderr=self.stderr_text,
            error=self.error,
            duration_seconds=self.duration_seconds,
            chunks=list(self.chunks),
        )

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Request cancellation. No-op once the session is terminal."""
        if self.status.is_terminal:
            return
        if self.status is SessionStatus.IDLE:
            self._cancelled()
            return
        self._cancel_requested.set()

    async def run(self) -> InstallResult:
        """Run the installation to a terminal state and return the result.

        Raises:
            SessionStateError: If the session has already been run.
        """
        if self.status is not SessionStatus.IDLE:
            raise SessionStateError(
                f"Cannot run a session that is {self.status.value}; start a new one"
            )
        self._started_at = time.monotonic()

        try:
            self._launcher.preflight(self.request)
        except InstallerError as exc:
            return self._failed(exc)

        self.status = SessionStatus.RUNNING
        self._set_progress(INITIAL_PROGRESS, force=True)

        try:
            handle = await self._launcher.spawn(self.request)
        except InstallerError as exc:
            return self._failed(exc)

        relay = OutputRelay()
        relay.subscribe(self._on_chunk)
        pump = asyncio.ensure_future(relay.relay(handle))

        try:
            exit_code, cancelled = await self._wait_for_exit(handle, pump)
            await self._drain(pump)
        except asyncio.CancelledError:
            await self._abort(handle, pump)
            self._cancelled()
            raise
        except Exception as exc:
            await self._abort(handle, pump)
            return self._failed(exc)

        self.exit_code = exit_code
        console.print(f"[dim]Generator exited with code {exit_code}[/dim]")

        if cancelled:
            return self._cancelled()
        if exit_code == 0:
            return self._succeeded()
        if self._launcher.is_command_not_found(exit_code):
            program = handle.argv[0] if handle.argv else "generator"
            cause = self.stderr_text.strip() or "command not found"
            return self._failed(SpawnFailureError(program, cause))
        return self._failed(GeneratorFailureError(exit_code, self.stderr_text))

    # ------------------------------------------------------------------
    # Process coordination
    # ------------------------------------------------------------------

    async def _wait_for_exit(
        self, handle: ProcessHandle, pump: asyncio.Future
    ) -> tuple[int, bool]:
        """Wait for exit or a cancel request; returns ``(exit_code, cancelled)``.

        A relay that fails while the generator is still running is re-raised
        here, since nothing would be left reading the pipes.
        """
        exit_task = asyncio.ensure_future(handle.wait())
        cancel_task = asyncio.ensure_future(self._cancel_requested.wait())
        waiting = {exit_task, cancel_task, pump}
        try:
            while True:
                done, waiting = await asyncio.wait(
                    waiting, return_when=asyncio.FIRST_COMPLETED
                )
                if pump in done and not pump.cancelled() and pump.exception() is not None:
                    exit_task.cancel()
                    pump.result()
                if exit_task in done or cancel_task in done:
                    break
        except asyncio.CancelledError:
            exit_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if exit_task in done:
            return exit_task.result(), False

        console.print("[yellow]Cancelling installation...[/yellow]")
        exit_code = await handle.terminate()
        with contextlib.suppress(asyncio.CancelledError):
            await exit_task
        return exit_code, True

    async def _drain(self, pump: asyncio.Future) -> None:
        """Give the relay a grace period to deliver output written before exit.

        Grandchildren that inherited the pipes can keep them open after the
        generator exits; past the grace period the remaining output is dropped.
        """
        try:
            await asyncio.wait_for(asyncio.shield(pump), timeout=self._drain_grace)
        except asyncio.TimeoutError:
            pump.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pump
            console.print("[dim]Output streams still open after exit; stopped reading.[/dim]")

    async def _abort(self, handle: ProcessHandle, pump: asyncio.Future) -> None:
        """Stop the relay and make sure the generator is gone."""
        pump.cancel()
        if handle.returncode is None:
            self.exit_code = await handle.terminate()
        else:
            self.exit_code = handle.returncode
        # asyncio.wait collects the pump without re-raising its exception.
        await asyncio.wait({pump})

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _notify(self, hook: str, *args) -> None:
        """Call an observer hook; a failing observer never stops the session."""
        try:
            getattr(self._observer, hook)(*args)
        except Exception as exc:
            console.print(Text(f"Observer hook {hook} raised {exc!r}", style="red"))

    def _on_chunk(self, chunk: OutputChunk) -> None:
        self.chunks.append(chunk)
        self.collected_output[chunk.stream].append(chunk.text)
        self._notify("on_output", chunk)
        self._set_progress(classify(chunk.text))

    def _set_progress(self, candidate: ProgressState | None, force: bool = False) -> None:
        if force and candidate is not None:
            updated = candidate
        else:
            updated = advance(self.progress, candidate)
        if updated == self.progress:
            return
        self.progress = updated
        self._notify("on_progress", updated)

    # ------------------------------------------------------------------
    # Terminal transitions
    # ------------------------------------------------------------------

    def _finish(self, status: SessionStatus) -> InstallResult:
        self.status = status
        self._finished_at = time.monotonic()
        return self.result()

    def _succeeded(self) -> InstallResult:
        self.project_path = self.request.project_path
        self._set_progress(COMPLETED_PROGRESS, force=True)
        result = self._finish(SessionStatus.SUCCEEDED)
        self._notify("on_succeeded", self.project_path)
        return result

    def _failed(self, exc: BaseException) -> InstallResult:
        self.error = normalize_error(exc)
        result = self._finish(SessionStatus.FAILED)
        self._notify("on_failed", self.error)
        return result

    def _cancelled(self) -> InstallResult:
        self.error = normalize_error(InstallationCancelledError())
        result = self._finish(SessionStatus.CANCELLED)
        self._notify("on_cancelled")
        return result


class SessionManager:
    """Creates installation sessions, allowing only one in flight at a time."""

    def __init__(
        self,
        launcher: ProcessLauncher | None = None,
        drain_grace_seconds: float = 2.0,
    ) -> None:
        self.launcher = launcher or ProcessLauncher()
        self.drain_grace_seconds = drain_grace_seconds
        self._active: InstallationSession | None = None

    @classmethod
    def from_config(cls, config: InstallerConfig) -> "SessionManager":
        """Build a manager from an ``InstallerConfig``."""
        return cls(
            launcher=ProcessLauncher(use_shell=config.process.use_shell),
            drain_grace_seconds=config.process.drain_grace_seconds,
        )

    @property
    def active(self) -> InstallationSession | None:
        return self._active

    @property
    def busy(self) -> bool:
        return self._active is not None and not self._active.status.is_terminal

    def create(
        self,
        request: InstallRequest,
        observer: InstallationObserver | None = None,
    ) -> InstallationSession:
        """Reserve the single installation slot for *request*.

        Raises:
            SessionBusyError: If another session has not reached a terminal state.
        """
        if self.busy:
            raise SessionBusyError(
                f"An installation of '{self._active.request.project_name}' is already running"
            )
        session = InstallationSession(
            request,
            launcher=self.launcher,
            observer=observer,
            drain_grace_seconds=self.drain_grace_seconds,
        )
        self._active = session
        return session

    async def install(
        self,
        request: InstallRequest,
        observer: InstallationObserver | None = None,
    ) -> InstallResult:
        """Create a session for *request* and run it to completion."""
        session = self.create(request, observer=observer)
        return await session.run()

    def cancel(self) -> bool:
        """Cancel the in-flight session; returns ``False`` if there is none."""
        if not self.busy:
            return False
        self._active.cancel()
        return True
