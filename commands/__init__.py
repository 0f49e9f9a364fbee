"""CLI command modules.

This package contains:
- hub: Hub and registry commands (scan, set-ip, rename, reset)
- control: Direct control commands (lights, power, brightness, colour, all-off)
- presets: Preset commands (presets, save-preset, activate, delete-preset)
- setup: Help and status commands
- helpers: Controller lookup and error reporting shared by commands
"""
