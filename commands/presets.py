"""Preset CLI commands.

This module provides CLI commands for saving, listing, activating and
deleting presets (saved multi-light scenes).
"""

import click

from commands.helpers import get_controller, report_errors
from core.errors import PresetActivationError
from core.presets import ALL_LIGHTS
from models.utils import format_rgb


@click.command(name='presets')
@click.option('--verbose', '-v', is_flag=True, help='Show the saved colour and level of each light')
@report_errors
def presets_command(verbose: bool):
    """List saved presets."""
    controller = get_controller()
    names = controller.presets.names()
    if not names:
        click.echo("No presets saved. Create one with 'save-preset'.")
        return

    click.echo()
    click.secho(f"=== Presets ({len(names)}) ===", fg='cyan', bold=True)
    for name in names:
        preset = controller.presets.get(name)
        click.echo(f"  {click.style(name, fg='green')}  ({len(preset.snapshots)} lights)")
        if verbose:
            for snap in preset.snapshots:
                light_name = controller.registry.name_of(snap['id'])
                click.echo(f"      {light_name:<20} {format_rgb(snap['r'], snap['g'], snap['b'], swatch=True)}"
                           f"  level {snap['level']}")
    click.echo()


@click.command(name='save-preset')
@click.argument('name')
@click.argument('lights', nargs=-1)
@click.option('--all', 'all_lights', is_flag=True, help='Include every known light')
@report_errors
def save_preset_command(name: str, lights: tuple[str, ...], all_lights: bool):
    """Save the current state of some lights as a preset.

    With no LIGHTS, the lights that are currently on are saved. Saving
    under an existing name replaces that preset.

    \b
    Examples:
      sunflower save-preset "Evening" --all
      sunflower save-preset "Reading" Desk 143E
    """
    controller = get_controller()
    if all_lights:
        selector = ALL_LIGHTS
    elif lights:
        selector = list(lights)
    else:
        selector = controller.sync.on_lights()
        if not selector:
            raise click.UsageError("No lights are on. Name some lights or use --all.")

    try:
        preset = controller.presets.save(name, selector)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='NAME')
    click.secho(f"✓ Saved preset '{preset.name}' ({len(preset.snapshots)} lights)", fg='green')


@click.command(name='activate')
@click.argument('name')
@report_errors
def activate_command(name: str):
    """Activate a saved preset. Lights not in the preset are left alone."""
    controller = get_controller()
    try:
        preset = controller.presets.activate(name)
    except PresetActivationError as e:
        for light_id, error in e.failures:
            click.secho(f"  ✗ {controller.registry.name_of(light_id)}: {error}", fg='red')
        raise
    click.secho(f"✓ Preset '{preset.name}' activated", fg='green')


@click.command(name='delete-preset')
@click.argument('name')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
@report_errors
def delete_preset_command(name: str, yes: bool):
    """Delete a saved preset."""
    presets = get_controller().presets
    pending = presets.request_delete(name)

    if not yes and not click.confirm(f"Delete preset '{pending.name}'?", default=False):
        click.echo("Cancelled.")
        return

    presets.confirm_delete(pending)
    click.secho(f"✓ Deleted preset '{pending.name}'", fg='green')
