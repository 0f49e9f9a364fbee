#!/usr/bin/env python3
"""
Sunflower Control CLI
Control Yeelight Sunflower bulbs through the Sunflower LAN hub, and save and
restore multi-light presets.
"""

import logging
from pathlib import Path

import click

from commands.setup import ColouredGroup, help_command, status_command
from commands.hub import scan_command, set_ip_command, rename_command, reset_command
from commands.control import (
    lights_command,
    power_command,
    brightness_command,
    colour_command,
    all_off_command
)
from commands.presets import (
    presets_command,
    save_preset_command,
    activate_command,
    delete_preset_command
)


@click.group(
    cls=ColouredGroup,
    context_settings={
        'help_option_names': ['-h', '--help'],
        'max_content_width': 999  # Very wide to prevent wrapping on wide terminals
    }
)
@click.version_option(version='0.1.0', prog_name='Sunflower Control')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              envvar='SUNFLOWER_CONFIG', help='Config file (default: ~/.sunflower/config.json)')
@click.option('--verbose', '-v', is_flag=True, help='Log hub traffic')
@click.pass_context
def cli(ctx, config_path: Path | None, verbose: bool):
    """Sunflower Control CLI - Manage Yeelight Sunflower lights and presets.

Run 'scan' first to find the hub, or 'set-ip' if discovery fails.

Use 'help' for a quick reference of all commands.
Use 'COMMAND -h' or 'COMMAND --help' for detailed help on a specific command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )
    obj = ctx.ensure_object(dict)
    obj.setdefault('config_path', config_path)


# Register setup and help commands
cli.add_command(help_command)
cli.add_command(status_command)

# Register hub commands
cli.add_command(scan_command)
cli.add_command(set_ip_command)
cli.add_command(rename_command)
cli.add_command(reset_command)

# Register control commands
cli.add_command(lights_command)
cli.add_command(power_command)
cli.add_command(brightness_command)
cli.add_command(colour_command)
cli.add_command(all_off_command)

# Register preset commands
cli.add_command(presets_command)
cli.add_command(save_preset_command)
cli.add_command(activate_command)
cli.add_command(delete_preset_command)


if __name__ == '__main__':
    cli()
