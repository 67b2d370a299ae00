"""
Install CLI commands.

Commands for installing, cleaning up and detecting target IDE configurations.
"""

from pathlib import Path

import click

from ideport import config, ui
from ideport.exceptions import IdeportError
from ideport.hooks import uninstall_damage_control
from ideport.install import cleanup_targets, detect_targets, install_targets
from ideport.models import InstallOptions
from ideport.profiles import ProfileLoader
from ideport.targets import TARGETS


def _plural(count: int, singular: str) -> str:
    return f"{count} {singular}" if count == 1 else f"{count} {singular}s"


@click.command(name='install')
@click.argument('source_dir', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument('project_path', required=False, default="./", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    '-t', '--target',
    'targets',
    type=click.Choice(list(TARGETS.keys())),
    multiple=True,
    help='Target IDE to install into (repeatable, default: all)'
)
@click.option(
    '--skip-damage-control',
    is_flag=True,
    help='Do not copy guard scripts or touch hook configuration'
)
@click.option(
    '--docs-folder',
    default=config.DOCS_FOLDER,
    show_default=True,
    help='Docs folder name substituted into generated content'
)
@click.option(
    '-v', '--verbose',
    is_flag=True,
    help='Show every warning for each target'
)
def install_cmd(
    source_dir: Path,
    project_path: Path,
    targets: tuple[str, ...],
    skip_damage_control: bool,
    docs_folder: str,
    verbose: bool,
):
    """
    Install agileflow commands and agents into target IDEs.

    SOURCE_DIR holds the canonical commands/, agents/ and scripts/ folders.
    If no project path is given, installs into the current directory.

    \b
    Examples:
        ideport install ./agileflow                     # All targets here
        ideport install ./agileflow -t cursor           # Only Cursor
        ideport install ./agileflow ./app -t codex      # Codex, in ./app
    """
    root = project_path.resolve()
    if not root.exists():
        ui.error(f"Project path does not exist: {root}")
        raise SystemExit(1)

    options = InstallOptions(skip_damage_control=skip_damage_control, docs_folder=docs_folder)
    names = list(targets) or None

    ui.header(f"Installing {ui.path(str(source_dir))} {ui.Icons.ARROW} {root}")
    ui.blank()

    reports = install_targets(root, source_dir, names, options)
    for report in reports.values():
        ui.report(report, verbose)

    failed = [name for name, report in reports.items() if not report.success]
    ui.blank()
    if failed:
        ui.error(f"{_plural(len(failed), 'target')} failed: {', '.join(failed)}")
        raise SystemExit(1)
    ui.success(f"Installed to {_plural(len(reports), 'target')}")


@click.command(name='cleanup')
@click.argument('project_path', required=False, default="./", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    '-t', '--target',
    'targets',
    type=click.Choice(list(TARGETS.keys())),
    multiple=True,
    help='Target IDE to clean (repeatable, default: all)'
)
@click.option(
    '--hooks',
    is_flag=True,
    help='Also unregister damage-control hooks'
)
def cleanup_cmd(project_path: Path, targets: tuple[str, ...], hooks: bool):
    """
    Remove installed agileflow artifacts from target IDEs.

    Only managed files are removed; user content is left alone.
    """
    root = project_path.resolve()
    loader = ProfileLoader()
    cleaned = cleanup_targets(root, list(targets) or None, loader)

    for name in cleaned:
        note = None
        if hooks:
            try:
                if uninstall_damage_control(root, loader.load(name)):
                    note = "hooks removed"
            except IdeportError as e:
                ui.item_result(name, False, note=str(e))
                continue
        ui.item_result(name, True, note=note)

    ui.blank()
    ui.success(f"Cleaned {_plural(len(cleaned), 'target')}")


@click.command(name='detect')
@click.argument('project_path', required=False, default="./", type=click.Path(file_okay=False, path_type=Path))
def detect_cmd(project_path: Path):
    """
    Show which target IDEs are configured in a project.
    """
    root = project_path.resolve()
    found = detect_targets(root)

    ui.header(f"Targets in {root}")
    ui.blank()
    for name, present in found.items():
        ui.item_result(name, present, note=None if present else "not found")

    if not any(found.values()):
        ui.blank()
        ui.hint("Install with: ideport install <source-dir>")
