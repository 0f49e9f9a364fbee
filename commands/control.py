"""
Control commands for direct manipulation of lights.

Includes the light list, power, brightness, colour and all-off.
"""

import click

from commands.helpers import get_controller, report_errors
from core.errors import HubUnreachable
from core.sync import is_on
from models.light import Hue, Temperature, LightRequest, MIN_KELVIN, MAX_KELVIN


def _describe(light) -> str:
    state = click.style('ON ', fg='green') if is_on(light) else click.style('OFF', fg='red')
    stale = click.style(' (unconfirmed)', fg='yellow') if light.stale else ''
    return f"[{state}] {light.name} {light.brightness:.0%}{stale}"


@click.command(name='lights')
@report_errors
def lights_command():
    """List lights. * marks lights that are currently on.

    \b
    Examples:
      sunflower lights
    """
    controller = get_controller()
    try:
        controller.check_hub()
    except HubUnreachable as e:
        click.secho(f"✗ {e.get_full_message()}", fg='red')
        click.echo(f"Current hub IP: {controller.registry.ip or '(none)'}")
        click.get_current_context().exit(1)

    on_ids = set(controller.sync.on_lights())
    light_ids = controller.registry.light_ids
    if not light_ids:
        click.echo("No lights known. Run 'scan' to look for some.")
        return

    click.echo()
    click.secho(f"=== Lights ({len(light_ids)}) ===", fg='cyan', bold=True)
    for light_id in light_ids:
        name = controller.registry.name_of(light_id)
        marker = click.style(' *', fg='green', bold=True) if light_id in on_ids else ''
        click.echo(f"  {name}{marker}  {click.style(light_id, dim=True)}")
    click.echo()


@click.command(name='power')
@click.argument('light')
@click.option('--on/--off', default=True, help='Turn light on or off')
@report_errors
def power_command(light: str, on: bool):
    """Turn a light ON or OFF.

    \b
    Examples:
      sunflower power "Desk" --on
      sunflower power 143E --off
    """
    result = get_controller().apply(light, LightRequest(on=on))
    click.echo(f"✓ {_describe(result)}")


@click.command(name='brightness')
@click.argument('light')
@click.argument('value', type=click.FloatRange(0.0, 1.0))
@report_errors
def brightness_command(light: str, value: float):
    """Set brightness of a light (0-1). Very low values turn it off.

    \b
    Examples:
      sunflower brightness "Desk" 0.5
    """
    result = get_controller().apply(light, LightRequest(brightness=value))
    click.echo(f"✓ {_describe(result)}")


@click.command(name='colour')
@click.argument('light')
@click.option('--hue', '-u', type=click.FloatRange(0.0, 1.0), help='Hue (0-1)')
@click.option('--sat', '-s', type=click.FloatRange(0.0, 1.0), default=1.0, show_default=True,
              help='Saturation (0-1)')
@click.option('--kelvin', '-k', type=click.IntRange(MIN_KELVIN, MAX_KELVIN),
              help=f'Colour temperature ({MIN_KELVIN}-{MAX_KELVIN})')
@report_errors
def colour_command(light: str, hue: float | None, sat: float, kelvin: int | None):
    """Set colour or temperature of a light.

    \b
    Examples:
      sunflower colour "Desk" --hue 0.33 --sat 1
      sunflower colour "Desk" -k 2700
    """
    if kelvin is not None and hue is not None:
        raise click.UsageError("Give either --hue or --kelvin, not both")
    if kelvin is not None:
        colour = Temperature(kelvin)
    elif hue is not None:
        colour = Hue(hue, sat)
    else:
        raise click.UsageError("Please specify --hue/-u (and optionally --sat/-s), or --kelvin/-k")

    result = get_controller().apply(light, LightRequest(colour=colour))
    r, g, b = colour.to_rgb()
    click.echo(f"✓ {result.name} colour set to #{r:02x}{g:02x}{b:02x}")


@click.command(name='all-off')
@report_errors
def all_off_command():
    """Turn every light off."""
    get_controller().all_off()
    click.secho("✓ All lights off", fg='green')
