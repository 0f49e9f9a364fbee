"""
Setup and help commands for Sunflower Control CLI.

Contains custom Click group class for coloured help output and typo suggestions.
"""

from dataclasses import dataclass

import click

from commands.helpers import get_controller
from core.config import CONFIG_FILE
from core.errors import HubUnreachable
from models.utils import find_similar_strings


@dataclass(frozen=True)
class CommandSection:
    """Represents a section in the help command."""
    name: str
    commands: list[tuple[str, str]]


class ColouredGroup(click.Group):
    """Group with coloured help output that suggests commands for typos."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            cmd_name = args[0] if args else ''
            suggestions = self.suggest(ctx, cmd_name) if 'No such command' in str(e) else []
            if not suggestions:
                raise
            lines = [f"No such command '{cmd_name}'.", "",
                     click.style("Did you mean one of these?", fg='yellow')]
            lines += [click.style(f"  • {name}", fg='green') for name in suggestions]
            raise click.UsageError("\n".join(lines), ctx=ctx) from e

    def suggest(self, ctx, cmd_name: str, limit: int = 3) -> list[str]:
        """Visible commands that look like cmd_name, best first."""
        if not cmd_name:
            return []
        visible = [name for name in self.list_commands(ctx)
                   if not self.get_command(ctx, name).hidden]
        return find_similar_strings(cmd_name, visible, limit=limit)

    def format_commands(self, ctx, formatter):
        """Format commands with colour."""
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd.get_short_help_str(limit=500)))

        if commands:
            formatter.write_paragraph()
            formatter.write_text(click.style('Commands:', fg='yellow', bold=True))

            max_len = max(max(len(cmd[0]) for cmd in commands), 16)

            with formatter.indentation():
                for subcommand, help_text in commands:
                    formatter.write_text(
                        click.style(subcommand.ljust(max_len), fg='green') + '  ' +
                        click.style(help_text, fg='white', dim=True)
                    )


COMMAND_SECTIONS = [
    CommandSection(
        name="HUB",
        commands=[
            ("status", "Check the hub is responding"),
            ("scan", "Find the hub and add new lights"),
            ("set-ip <ip>", "Use a hub IP instead of discovery"),
            ("rename <id>=<name>...", "Rename lights"),
            ("reset", "Forget the hub and all lights"),
        ]
    ),
    CommandSection(
        name="CONTROL",
        commands=[
            ("lights", "List lights (* = on)"),
            ("power <light> [--on/--off]", "Turn light on/off"),
            ("brightness <light> <0-1>", "Set brightness"),
            ("colour <light> [options]", "Set colour/temperature"),
            ("all-off", "Turn every light off"),
        ]
    ),
    CommandSection(
        name="PRESETS",
        commands=[
            ("presets", "List saved presets"),
            ("save-preset <name> [lights]", "Save current light state"),
            ("activate <name>", "Activate a preset"),
            ("delete-preset <name>", "Delete a preset"),
        ]
    ),
]


@click.command(name='help')
def help_command():
    """Display help and common commands."""
    click.echo()
    click.secho("Sunflower Control - Quick Reference", fg='cyan', bold=True)
    click.echo()

    for section in COMMAND_SECTIONS:
        click.secho(section.name, fg='yellow', bold=True)
        for cmd, desc in section.commands:
            click.echo("  ", nl=False)
            click.secho(cmd, fg='green', nl=False)
            click.echo(" " * (32 - len(cmd)) + "  " + desc)
        click.echo()

    click.secho("For detailed help on any command:", fg='cyan')
    click.echo(f"  sunflower {click.style('<command> -h', fg='white', bold=True)}")
    click.echo()


@click.command(name='status')
def status_command():
    """Show configuration and check the hub is responding."""
    controller = get_controller()
    registry = controller.registry

    click.echo()
    click.secho("=== Sunflower Hub ===", fg='cyan', bold=True)
    click.echo()
    click.echo(f"   Config:      {controller.config_path or CONFIG_FILE}")
    click.echo(f"   Initialised: {'yes' if registry.initialised else 'no'}")
    click.echo(f"   Hub IP:      {registry.ip or '(none)'}")
    click.echo(f"   Lights:      {len(registry.light_ids)}")
    click.echo(f"   Presets:     {len(controller.presets.names())}")
    click.echo()

    try:
        controller.check_hub()
    except HubUnreachable as e:
        click.secho(f"✗ {e.get_full_message()}", fg='red', bold=True)
        click.echo()
        click.get_current_context().exit(1)

    click.secho(f"✓ Hub at {registry.ip} is responding", fg='green', bold=True)
    click.echo()
