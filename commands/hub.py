"""Hub and registry CLI commands.

This module provides CLI commands for finding the hub, scanning for lights,
renaming them and resetting the registry.
"""

import click

from commands.helpers import get_controller, report_errors
from models.utils import parse_rename_pairs


def _summary(controller):
    registry = controller.registry
    click.echo(f"  Hub IP:  {registry.ip or '(none)'}")
    click.echo(f"  Lights:  {len(registry.light_ids)}")


@click.command(name='scan')
@click.option('--timeout', '-t', type=click.FloatRange(0.5, 30.0), default=3.0, show_default=True,
              help='Seconds to wait for the hub')
@report_errors
def scan_command(timeout: float):
    """Look for the hub and add any new lights.

    Lights already known keep their names, and lights the hub doesn't
    report right now are not removed.
    """
    controller = get_controller()
    before = set(controller.registry.light_ids)
    click.echo("Searching for Sunflower hub...")
    controller.scan(timeout)

    added = [i for i in controller.registry.light_ids if i not in before]
    click.secho(f"✓ Found hub, {len(added)} new light(s)", fg='green')
    for light_id in added:
        click.echo(f"  + {controller.registry.name_of(light_id)}")
    _summary(controller)


@click.command(name='set-ip')
@click.argument('ip')
@report_errors
def set_ip_command(ip: str):
    """Set the hub IP manually and scan it for lights."""
    controller = get_controller()
    controller.set_ip(ip)
    click.secho(f"✓ Using hub at {controller.registry.ip}", fg='green')
    _summary(controller)


@click.command(name='rename')
@click.argument('pairs', nargs=-1, required=True)
@report_errors
def rename_command(pairs: tuple[str, ...]):
    """Rename lights. An empty name restores the default.

    \b
    Examples:
      sunflower rename 143E="Desk" 143C="Hall"
      sunflower rename 143E=
    """
    names = parse_rename_pairs(pairs)
    controller = get_controller()
    known = set(controller.registry.light_ids)
    controller.rename(names)
    for light_id in names:
        if light_id in known:
            click.echo(f"✓ {light_id} → {controller.registry.name_of(light_id)}")
        else:
            click.secho(f"⚠ {light_id} is not a known light, skipped", fg='yellow')


@click.command(name='reset')
@click.option('--keep-presets/--discard-presets', default=True, show_default=True,
              help='Keep saved presets')
@click.option('--rescan/--no-rescan', default=True, show_default=True,
              help='Scan for the hub again after resetting')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
@report_errors
def reset_command(keep_presets: bool, rescan: bool, yes: bool):
    """Forget the hub and all lights (and optionally presets)."""
    if not yes:
        what = "all lights and custom names" + ("" if keep_presets else " and presets")
        if not click.confirm(f"This clears {what}. Continue?", default=False):
            click.echo("Cancelled.")
            return

    controller = get_controller()
    controller.reset(keep_presets)
    click.secho("✓ Configuration reset", fg='green')

    if rescan:
        click.echo("Searching for Sunflower hub...")
        controller.scan()
        click.secho("✓ Found hub", fg='green')
        _summary(controller)
