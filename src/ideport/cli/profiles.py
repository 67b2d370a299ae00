"""
Profile CLI commands.

Commands for listing, showing and comparing target capability profiles.
"""

from typing import NoReturn

import click

from ideport import ui
from ideport.exceptions import IdeportError
from ideport.profiles import ProfileLoader


def _handle_ideport_error(e: IdeportError) -> NoReturn:
    """Print an IdeportError and exit."""
    ui.error(str(e))
    raise SystemExit(1)


@click.group(name='profiles')
def profiles():
    """
    Inspect target capability profiles.

    \b
    Examples:
        ideport profiles ls
        ideport profiles show cursor
        ideport profiles compare core.interactiveInput
    """
    pass


@profiles.command(name='ls')
def list_cmd():
    """List available profiles."""
    loader = ProfileLoader()
    available = loader.list_available()
    if not available:
        ui.warning(f"No profiles found in {loader.profiles_dir}")
        return

    ui.header(f"Profiles ({len(available)})")
    ui.blank()
    for profile_id in available:
        try:
            profile = loader.load(profile_id)
        except IdeportError as e:
            ui.item_result(profile_id, False, note=str(e).splitlines()[0])
            continue
        ui.item(f"{ui.target_name(profile.id)} [dim]{profile.display_name}[/dim]")


@profiles.command(name='show')
@click.argument('profile_id')
def show_cmd(profile_id: str):
    """Show paths, capabilities and tool names of one profile."""
    loader = ProfileLoader()
    try:
        profile = loader.load(profile_id)
    except IdeportError as e:
        _handle_ideport_error(e)

    ui.header(f"{profile.display_name} ({profile.id})")
    ui.blank()
    ui.console.print("[bold]Paths[/bold]")
    for attr in ("config_dir", "commands", "agents", "skills", "hooks_dir", "hook_config", "instructions"):
        value = getattr(profile.paths, attr)
        if value is not None:
            ui.kv(attr, ui.path(value))

    ui.blank()
    ui.console.print("[bold]Capabilities[/bold]")
    for key, value in loader.get_all_capabilities(profile_id).items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value) or "-"
        ui.kv(key, str(value))

    tools = profile.tool_names
    if tools:
        ui.blank()
        ui.console.print("[bold]Tool names[/bold]")
        for alias, name in tools.items():
            ui.kv(alias, name if name is not None else "[dim]unavailable[/dim]")


@profiles.command(name='compare')
@click.argument('capability')
def compare_cmd(capability: str):
    """
    Compare one capability across all profiles.

    CAPABILITY is written as group.name, e.g. planning.planMode.
    """
    group, _, name = capability.partition(".")
    if not group or not name:
        ui.error("Capability must be written as group.name")
        raise SystemExit(1)

    loader = ProfileLoader()
    values = loader.compare_capability(group, name)
    table = ui.capability_table(capability, [(capability, list(values.values()))], list(values.keys()))
    ui.console.print(table)

    supported = loader.find_ides_with_capability(group, name)
    if supported:
        ui.hint(f"Supported by: {', '.join(supported)}")
    else:
        ui.hint("No profile supports this capability")
