"""React Installer command-line interface.

Scaffolds React projects with a live progress bar and generator output, and
browses the package catalog.

Usage::

    react-installer create my-app --type vite --dir ~/Projects
    react-installer packages --category state --latest
    react-installer packages --copy zustand
    react-installer info
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.panel import Panel
from rich.progress import Progress, TaskID
from rich.table import Table
from rich.text import Text

from react_installer.catalog import (
    ALL_CATEGORIES,
    CATEGORIES,
    PACKAGE_CATALOG,
    PackageEntry,
    RegistryClient,
    filter_packages,
    find_package,
    packages_from_command,
)
from react_installer.config import InstallerConfig
from react_installer.desktop import ClipboardManager, open_in_editor
from react_installer.installer import (
    ErrorInfo,
    InstallationObserver,
    InstallRequest,
    InstallResult,
    OutputChunk,
    ProgressState,
    ProjectType,
    SessionManager,
    SessionStatus,
    StreamName,
)
from react_installer.utils import (
    PROJECT_NAME_HINT,
    console,
    create_progress,
    format_duration,
    get_system_info,
    is_valid_project_name,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    sanitize_name,
)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130

NEXT_STEPS: dict[ProjectType, list[str]] = {
    ProjectType.CREATE_REACT_APP: ["npm start"],
    ProjectType.VITE: ["npm install", "npm run dev"],
    ProjectType.NEXT: ["npm run dev"],
}


# ---------------------------------------------------------------------------
# Installation view
# ---------------------------------------------------------------------------


class RichInstallView(InstallationObserver):
    """Renders a session as a progress bar above a scrolling terminal pane."""

    def __init__(self, progress: Progress | None = None, show_output: bool = True) -> None:
        self.progress = progress or create_progress()
        self.show_output = show_output
        self.task_id: TaskID | None = None
        self.error: ErrorInfo | None = None

    def __enter__(self) -> "RichInstallView":
        self.progress.start()
        self.task_id = self.progress.add_task("Ready to install…", total=100)
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.progress.stop()

    def on_progress(self, progress: ProgressState) -> None:
        if self.task_id is not None:
            self.progress.update(self.task_id, completed=progress.percent, description=progress.label)

    def on_output(self, chunk: OutputChunk) -> None:
        if not self.show_output:
            return
        style = "red" if chunk.stream is StreamName.STDERR else "green"
        text = chunk.text.rstrip("\r\n")
        if text.strip():
            self.progress.console.print(Text(text, style=style))

    def on_failed(self, error: ErrorInfo) -> None:
        self.error = error


def _report_install(result: InstallResult, config: InstallerConfig, open_project: bool) -> int:
    request = result.request

    if result.status is SessionStatus.SUCCEEDED:
        print_success(
            f'Successfully created "{request.project_name}" using {request.project_type.label}!'
        )
        print_summary_table(
            {
                "Path": str(result.project_path),
                "Generator": request.project_type.label,
                "Duration": format_duration(result.duration_seconds),
            },
            title="Project Created",
        )
        steps = [f"cd {request.project_name}", *NEXT_STEPS[request.project_type]]
        console.print(Panel("\n".join(steps), title="Next steps", border_style="green"))
        if open_project:
            action = open_in_editor(result.project_path, editor=config.editor.command)
            if action.success:
                print_success(f"Project opened in {action.detail}!")
            else:
                print_error(f"Failed to open project. Path: {result.project_path}")
        return EXIT_OK

    if result.status is SessionStatus.CANCELLED:
        print_warning("Installation cancelled. The partially created project may need to be removed.")
        return EXIT_CANCELLED

    error = result.error
    print_error(f"Installation failed: {error.message if error else 'unknown error'}")
    if error is not None:
        if error.detail and error.detail != error.message:
            console.print(Text(error.detail.strip()[:2000], style="dim"))
        if error.should_focus_name:
            print_warning("Choose a different project name and try again.")
    return EXIT_FAILED


async def _create(args: argparse.Namespace, config: InstallerConfig) -> int:
    name = args.name.strip()
    if not is_valid_project_name(name):
        print_error(PROJECT_NAME_HINT)
        suggestion = sanitize_name(name)
        if suggestion:
            print_warning(f"Try: {suggestion}")
        return EXIT_FAILED

    target = Path(args.dir).expanduser() if args.dir else config.default_directory
    project_type = ProjectType(args.type) if args.type else config.default_project_type
    request = InstallRequest(
        project_name=name,
        target_directory=target.resolve(),
        project_type=project_type,
    )

    manager = SessionManager.from_config(config)
    console.print(
        Panel(
            f"[cyan]Creating {name}[/cyan]\n"
            f"  Generator: {project_type.label}\n"
            f"  Location: {request.target_directory}",
            title="React Installer",
            border_style="cyan",
        )
    )

    with RichInstallView(show_output=not args.quiet) as view:
        session = manager.create(request, observer=view)
        try:
            result = await session.run()
        except asyncio.CancelledError:
            result = session.result()

    return _report_install(result, config, open_project=args.open)


# ---------------------------------------------------------------------------
# Package catalog
# ---------------------------------------------------------------------------


def _render_packages(packages: list[PackageEntry], versions: dict[str, str]) -> None:
    table = Table(title="Packages", show_header=True, header_style="bold cyan")
    table.add_column("Name", no_wrap=True)
    table.add_column("Category", style="dim")
    table.add_column("Description")
    table.add_column("Command", style="green")
    if versions:
        table.add_column("Latest", style="magenta")

    for pkg in packages:
        row = [pkg.name, pkg.category, pkg.description, pkg.command]
        if versions:
            row.append(versions.get(pkg.name, "-"))
        table.add_row(*row)

    console.print(table)


async def _latest_versions(packages: list[PackageEntry], config: InstallerConfig) -> dict[str, str]:
    client = RegistryClient.from_config(config)
    primary = {pkg.name: packages_from_command(pkg.command)[:1] for pkg in packages}
    names = sorted({names[0] for names in primary.values() if names})
    responses = await client.latest_versions(names)

    versions: dict[str, str] = {}
    for display, npm_names in primary.items():
        if not npm_names:
            continue
        resp = responses[npm_names[0]]
        versions[display] = resp.version if resp.success and resp.version else "?"
    return versions


def _packages(args: argparse.Namespace, config: InstallerConfig) -> int:
    if args.copy:
        pkg = find_package(args.copy)
        if pkg is None:
            print_error(f"No package named '{args.copy}' in the catalog")
            return EXIT_FAILED
        result = ClipboardManager().copy(pkg.command)
        if result.success:
            print_success("Command copied to clipboard!")
            return EXIT_OK
        print_warning(result.message or f"Copy failed. Command: {pkg.command}")
        return EXIT_FAILED

    packages = filter_packages(PACKAGE_CATALOG, args.search or "", args.category)
    if not packages:
        print_warning("No packages found matching your criteria.")
        return EXIT_OK

    versions = asyncio.run(_latest_versions(packages, config)) if args.latest else {}
    _render_packages(packages, versions)
    return EXIT_OK


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="react-installer",
        description="React Installer -- scaffold React projects and find packages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  react-installer create my-app\n"
            "  react-installer create shop --type next --dir ~/Projects --open\n"
            "  react-installer packages --search form\n"
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON config file (default: environment variables)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Scaffold a new project")
    create.add_argument("name", help="Project name (lowercase letters, numbers, hyphens)")
    create.add_argument(
        "--type", "-t",
        choices=[t.value for t in ProjectType],
        default=None,
        help="Generator to use (default: create-react-app)",
    )
    create.add_argument("--dir", "-d", default=None, help="Installation directory (default: ~/Desktop)")
    create.add_argument("--open", action="store_true", help="Open the project in the editor afterwards")
    create.add_argument("--quiet", "-q", action="store_true", help="Hide generator output")

    packages = sub.add_parser("packages", help="Browse the package catalog")
    packages.add_argument("--search", "-s", default="", help="Filter by name, description or category")
    packages.add_argument(
        "--category", "-c",
        choices=[ALL_CATEGORIES, *CATEGORIES],
        default=ALL_CATEGORIES,
        help="Only show one category",
    )
    packages.add_argument("--copy", default=None, metavar="NAME", help="Copy a package's install command")
    packages.add_argument("--latest", action="store_true", help="Look up latest versions on npm")

    sub.add_parser("info", help="Show system information")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the command, and return the exit status."""
    args = build_parser().parse_args(argv)

    try:
        if args.config:
            config_path = Path(args.config)
            if not config_path.exists():
                print_error(f"Config file not found: {config_path}")
                return EXIT_FAILED
            config = InstallerConfig.load(config_path)
        else:
            config = InstallerConfig.from_env()
    except (ValueError, OSError) as exc:
        # pydantic's ValidationError is a ValueError.
        print_error(f"Invalid configuration: {exc}")
        return EXIT_FAILED

    if args.command == "create":
        try:
            return asyncio.run(_create(args, config))
        except KeyboardInterrupt:
            print_warning("Installation cancelled.")
            return EXIT_CANCELLED
    if args.command == "packages":
        return _packages(args, config)

    print_summary_table(asyncio.run(get_system_info()), title="System Info")
    return EXIT_OK


def main() -> None:
    """CLI entry point for ``react-installer`` / ``python -m react_installer.cli``."""
    sys.exit(run())


if __name__ == "__main__":
    main()
