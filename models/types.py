"""Type definitions for Sunflower Control.

This module provides TypedDict definitions for structured data types used across
the application, mirroring the shapes stored in the persisted config document.
"""

from typing import TypedDict


class LightSnapshot(TypedDict):
    """One light as reported by the hub's light list.

    level is on the hub's native 0-100 scale.
    """
    id: str
    r: int
    g: int
    b: int
    level: int


class PresetDocument(TypedDict):
    """A saved preset as stored in the config document."""
    name: str
    snapshots: list[LightSnapshot]


class ConfigDocument(TypedDict):
    """The whole persisted config document. Rewritten on every change."""
    initialised: bool
    ip: str
    lightIDs: list[str]
    names: dict[str, str]
    presetNames: list[str]
    presets: dict[str, list[LightSnapshot]]
