"""Shared pytest fixtures for the React Installer test suite.

Provides reusable fixtures for:
- Temporary target directories
- Install requests
- Scripted fake generator processes and a launcher that spawns them
- Recording session observers
"""

from __future__ import annotations

import asyncio
import signal
from pathlib import Path
from typing import Any

import pytest

from react_installer.installer import (
    ErrorInfo,
    InstallationObserver,
    InstallRequest,
    OutputChunk,
    ProcessHandle,
    ProcessLauncher,
    ProgressState,
    ProjectType,
)


# ---------------------------------------------------------------------------
# Paths & Requests
# ---------------------------------------------------------------------------

@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    """Existing, writable installation directory (auto-cleanup)."""
    desktop = tmp_path / "Desktop"
    desktop.mkdir()
    yield desktop


@pytest.fixture
def vite_request(target_dir: Path) -> InstallRequest:
    """Request for ``my-app`` scaffolded with Vite into ``target_dir``."""
    return InstallRequest(
        project_name="my-app",
        target_directory=target_dir,
        project_type=ProjectType.VITE,
    )


# ---------------------------------------------------------------------------
# Fake generator process
# ---------------------------------------------------------------------------

class FakeProcess:
    """Stand-in for ``asyncio.subprocess.Process`` that plays a script.

    Each script entry is ``(stream, text)`` with stream ``"stdout"`` or
    ``"stderr"``; entries are fed one at a time with a short pause so the
    relay sees them as separate chunks. Must be created inside a running loop.
    """

    def __init__(
        self,
        script: list[tuple[str, str | bytes]] | None = None,
        returncode: int = 0,
        *,
        exits: bool = True,
        close_streams: bool = True,
        late_script: list[tuple[str, str | bytes]] | None = None,
        delay: float = 0.01,
        pid: int = 4242,
    ) -> None:
        self.pid = pid
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.returncode: int | None = None
        self.signals: list[int] = []
        self._script = list(script or [])
        self._late_script = list(late_script or [])
        self._final_code = returncode
        self._exits = exits
        self._close_streams = close_streams
        self._delay = delay
        self._closed = False
        self._exited = asyncio.Event()
        self._task: asyncio.Future | None = None

    def start(self) -> None:
        self._task = asyncio.ensure_future(self._play())

    def _reader(self, stream: str) -> asyncio.StreamReader:
        return self.stdout if stream == "stdout" else self.stderr

    def _feed(self, stream: str, text: str | bytes) -> None:
        if self._closed:
            return
        data = text.encode("utf-8") if isinstance(text, str) else text
        self._reader(stream).feed_data(data)

    async def _play(self) -> None:
        for stream, text in self._script:
            if self._closed:
                return
            self._feed(stream, text)
            await asyncio.sleep(self._delay)
        if not self._exits:
            return
        self._exit(self._final_code)
        for stream, text in self._late_script:
            await asyncio.sleep(self._delay)
            self._feed(stream, text)
        if self._close_streams:
            self._close()

    def _exit(self, code: int) -> None:
        if self.returncode is None:
            self.returncode = code
            self._exited.set()

    def _close(self) -> None:
        if not self._closed:
            self._closed = True
            self.stdout.feed_eof()
            self.stderr.feed_eof()

    async def wait(self) -> int:
        await self._exited.wait()
        return self.returncode

    def terminate(self) -> None:
        self.signals.append(signal.SIGTERM)
        self._exit(-15)
        self._close()

    def kill(self) -> None:
        self.signals.append(9)
        self._exit(-9)
        self._close()


class FakeLauncher(ProcessLauncher):
    """Real pre-flight and command resolution; spawns ``FakeProcess`` instead."""

    def __init__(self, process_kwargs: dict[str, Any], use_shell: bool = True, **kwargs: Any) -> None:
        super().__init__(use_shell=use_shell, **kwargs)
        self.process_kwargs = process_kwargs
        self.spawned: list[list[str]] = []
        self.processes: list[FakeProcess] = []

    async def spawn(self, request: InstallRequest) -> ProcessHandle:
        argv = self.build_argv(request)
        process = FakeProcess(**self.process_kwargs)
        process.start()
        self.spawned.append(argv)
        self.processes.append(process)
        return ProcessHandle(process, argv, request.target_directory)


@pytest.fixture
def fake_launcher(monkeypatch: pytest.MonkeyPatch):
    """Factory for launchers whose generator is a scripted ``FakeProcess``.

    Process-group signalling is routed to the fake process so cancellation
    never touches real processes.

    Usage:
        async def test_run(fake_launcher, vite_request):
            launcher = fake_launcher(script=[("stdout", "done\\n")], returncode=0)
            ...
    """
    def route_signal(self: ProcessHandle, sig: int) -> None:
        if sig == signal.SIGTERM:
            self._process.terminate()
        else:
            self._process.kill()

    monkeypatch.setattr(ProcessHandle, "_signal", route_signal)

    def factory(use_shell: bool = True, commands=None, **process_kwargs: Any) -> FakeLauncher:
        return FakeLauncher(process_kwargs, use_shell=use_shell, commands=commands)

    return factory


# ---------------------------------------------------------------------------
# Observers
# ---------------------------------------------------------------------------

class RecordingObserver(InstallationObserver):
    """Records every session event in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def on_progress(self, progress: ProgressState) -> None:
        self.events.append(("progress", progress))

    def on_output(self, chunk: OutputChunk) -> None:
        self.events.append(("output", chunk))

    def on_succeeded(self, project_path: Path) -> None:
        self.events.append(("succeeded", project_path))

    def on_failed(self, error: ErrorInfo) -> None:
        self.events.append(("failed", error))

    def on_cancelled(self) -> None:
        self.events.append(("cancelled", None))

    def of(self, kind: str) -> list[Any]:
        return [payload for name, payload in self.events if name == kind]


@pytest.fixture
def observer() -> RecordingObserver:
    """Observer that records session events."""
    return RecordingObserver()
