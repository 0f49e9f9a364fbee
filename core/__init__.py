"""Core functionality for Sunflower control.

This package contains:
- transport: HubTransport for talking to the hub
- registry: LightRegistry (known lights, names, hub IP)
- sync: StateSynchronizer and the on/off/brightness coupling
- presets: PresetStore for saving and activating scenes
- controller: SunflowerController tying them together
- config: Configuration persistence and tunables
- errors: Exception hierarchy
"""
