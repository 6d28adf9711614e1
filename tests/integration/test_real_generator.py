"""Integration tests running real child processes through an installation session.

The generator commands are replaced with small ``sh`` scripts that print
the same kind of output a React generator does, so the full launch, relay,
progress, exit and cancellation path runs against the operating system.

No Node.js, npm or network access is required.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from react_installer.installer import (
    CommandSpec,
    ErrorCategory,
    InstallationObserver,
    InstallationSession,
    InstallRequest,
    ProcessLauncher,
    ProjectType,
    SessionStatus,
)

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX sh"),
]

SUCCESS_SCRIPT = (
    'mkdir "$1" && '
    'echo "Creating a new React app in $1." && '
    'echo "Installing packages. This might take a couple of minutes." && '
    'echo "added 3 packages in 1s" && '
    'echo "Happy hacking!"'
)
FAILURE_SCRIPT = 'echo "npm ERR! code E404" >&2; exit 3'
SLOW_SCRIPT = 'echo "Installing packages"; sleep 30; mkdir "$1"'


def _launcher(script: str, use_shell: bool = False) -> ProcessLauncher:
    # sh -c SCRIPT sh NAME: the project name arrives as $1.
    spec = CommandSpec(program="sh", args=("-c", script, "sh"), name_index=3)
    return ProcessLauncher(use_shell=use_shell, commands={ProjectType.CREATE_REACT_APP: spec})


def _request(target: Path) -> InstallRequest:
    return InstallRequest(project_name="my-app", target_directory=target)


class TestRealGenerator:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("use_shell", [False, True])
    async def test_success_creates_project(self, target_dir: Path, observer, use_shell):
        session = InstallationSession(
            _request(target_dir), launcher=_launcher(SUCCESS_SCRIPT, use_shell), observer=observer
        )

        result = await asyncio.wait_for(session.run(), timeout=15)

        assert result.status is SessionStatus.SUCCEEDED
        assert result.project_path == target_dir / "my-app"
        assert result.project_path.is_dir()
        assert "Happy hacking!" in result.stdout
        percents = [p.percent for p in observer.of("progress")]
        assert percents == sorted(percents)
        assert percents[-1] == 100

    @pytest.mark.asyncio
    async def test_large_output_with_failing_observer(self, target_dir: Path):
        # Well past a pipe buffer, so the generator blocks unless output keeps being read.
        script = "head -c 300000 /dev/zero | tr '\\0' 'a'; echo; mkdir \"$1\""

        class BrokenView(InstallationObserver):
            def on_output(self, chunk):
                raise RuntimeError("view closed")

        session = InstallationSession(
            _request(target_dir), launcher=_launcher(script), observer=BrokenView()
        )

        result = await asyncio.wait_for(session.run(), timeout=10)

        assert result.status is SessionStatus.SUCCEEDED
        assert result.stdout.count("a") == 300000

    @pytest.mark.asyncio
    async def test_failure_reports_stderr(self, target_dir: Path):
        session = InstallationSession(_request(target_dir), launcher=_launcher(FAILURE_SCRIPT))

        result = await asyncio.wait_for(session.run(), timeout=15)

        assert result.status is SessionStatus.FAILED
        assert result.exit_code == 3
        assert result.error.category is ErrorCategory.PACKAGE_MANAGER
        assert "npm ERR! code E404" in result.error.detail

    @pytest.mark.asyncio
    async def test_existing_directory_untouched(self, target_dir: Path):
        existing = target_dir / "my-app"
        existing.mkdir()
        (existing / "README.md").write_text("keep me")
        session = InstallationSession(_request(target_dir), launcher=_launcher(SUCCESS_SCRIPT))

        result = await session.run()

        assert result.error.category is ErrorCategory.ALREADY_EXISTS
        assert (existing / "README.md").read_text() == "keep me"

    @pytest.mark.asyncio
    async def test_missing_program_through_shell(self, target_dir: Path):
        spec = CommandSpec(program="definitely-not-a-generator-xyz", args=(), name_index=0)
        launcher = ProcessLauncher(use_shell=True, commands={ProjectType.CREATE_REACT_APP: spec})

        result = await asyncio.wait_for(InstallationSession(_request(target_dir), launcher=launcher).run(), timeout=15)

        assert result.status is SessionStatus.FAILED
        assert result.exit_code == 127
        assert "Failed to start 'definitely-not-a-generator-xyz'" in result.error.message

    @pytest.mark.asyncio
    async def test_missing_program_without_shell(self, target_dir: Path):
        spec = CommandSpec(program="definitely-not-a-generator-xyz", args=(), name_index=0)
        launcher = ProcessLauncher(use_shell=False, commands={ProjectType.CREATE_REACT_APP: spec})

        result = await InstallationSession(_request(target_dir), launcher=launcher).run()

        assert result.status is SessionStatus.FAILED
        assert result.exit_code is None
        assert "program not found" in result.error.message

    @pytest.mark.asyncio
    async def test_cancel_terminates_generator(self, target_dir: Path, observer):
        session = InstallationSession(
            _request(target_dir), launcher=_launcher(SLOW_SCRIPT), observer=observer
        )
        task = asyncio.ensure_future(session.run())

        loop = asyncio.get_running_loop()
        deadline = loop.time() + 10
        while session.progress.percent < 40:
            assert loop.time() < deadline, "generator output never arrived"
            await asyncio.sleep(0.05)

        session.cancel()
        result = await asyncio.wait_for(task, timeout=10)

        assert result.status is SessionStatus.CANCELLED
        assert not (target_dir / "my-app").exists()
        assert observer.events[-1] == ("cancelled", None)
