"""Progress inference from generator output.

Generators do not report structured progress, so each output chunk is
matched against a fixed, ordered table of substrings. The result is only a
hint for the progress bar: completion is decided by the process exit code.
"""

from __future__ import annotations

from dataclasses import dataclass

from react_installer.installer.models import ProgressState

INITIAL_PROGRESS = ProgressState(10, "Initializing installation…")
COMPLETED_PROGRESS = ProgressState(100, "Installation completed successfully!")


@dataclass(frozen=True)
class ProgressRule:
    """A rule matches when every substring of any one group is present."""

    groups: tuple[tuple[str, ...], ...]
    progress: ProgressState

    def matches(self, lowered: str) -> bool:
        return any(all(part in lowered for part in group) for group in self.groups)


PROGRESS_RULES: tuple[ProgressRule, ...] = (
    ProgressRule(
        groups=(("creating a new react app",), ("scaffolding project",)),
        progress=ProgressState(20, "Creating project structure…"),
    ),
    ProgressRule(
        groups=(("installing packages",), ("installing dependencies",)),
        progress=ProgressState(40, "Installing dependencies…"),
    ),
    ProgressRule(
        groups=(("installing react",), ("added", "packages")),
        progress=ProgressState(60, "Installing React packages…"),
    ),
    ProgressRule(
        groups=(("removing template package",), ("cleaning up",)),
        progress=ProgressState(80, "Cleaning up installation…"),
    ),
    ProgressRule(
        groups=(("success",), ("created",), ("done",)),
        progress=ProgressState(90, "Finalizing setup…"),
    ),
    ProgressRule(
        groups=(("happy hacking",), ("get started",)),
        progress=ProgressState(100, "Installation completed!"),
    ),
)


def classify(text: str) -> ProgressState | None:
    """Return the progress implied by *text*, or ``None`` if no rule matches."""
    lowered = text.lower()
    for rule in PROGRESS_RULES:
        if rule.matches(lowered):
            return rule.progress
    return None


def advance(current: ProgressState, candidate: ProgressState | None) -> ProgressState:
    """Combine *current* with a classifier result without ever moving backwards."""
    if candidate is None or candidate.percent <= current.percent:
        return current
    return candidate
