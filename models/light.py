"""Light aggregate and the state requests applied to it.

A light's colour is either a hue/saturation pair or a colour temperature,
never both, so it is modelled as two small frozen dataclasses rather than
one record with optional fields.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from models.colour import hsv_to_rgb, temperature_to_rgb

# Colour temperature range offered to the operator
MIN_KELVIN = 2000
MAX_KELVIN = 6500


class Capability(str, Enum):
    """Channels a light can be controlled through."""
    ON_OFF = 'on-off'
    BRIGHTNESS = 'brightness'
    COLOUR = 'colour'


ALL_CAPABILITIES = frozenset(Capability)


@dataclass(frozen=True)
class Hue:
    """Hue and saturation, both 0-1."""
    hue: float
    saturation: float

    def to_rgb(self) -> tuple[int, int, int]:
        # Value is fixed at 1, brightness is controlled separately
        return hsv_to_rgb(self.hue, self.saturation, 1.0)


@dataclass(frozen=True)
class Temperature:
    """Colour temperature in kelvins."""
    kelvin: float

    def to_rgb(self) -> tuple[int, int, int]:
        return temperature_to_rgb(self.kelvin)


ColourIntent = Hue | Temperature


@dataclass(frozen=True)
class LightRequest:
    """A state change for one light. Fields left as None are untouched."""
    on: bool | None = None
    brightness: float | None = None
    colour: ColourIntent | None = None

    def is_empty(self) -> bool:
        return self.on is None and self.brightness is None and self.colour is None


@dataclass(frozen=True)
class Light:
    """A bulb known to the hub, plus its last observed runtime state.

    Attributes:
        id: Hub-assigned hex id, never changes
        name: Display name
        on: Whether the light is on
        brightness: 0-1, zero exactly when the light is off
        colour: Last colour applied, if any
        capabilities: Channels this light accepts
        stale: True when the last command failed and the state has not
            been confirmed by the hub since
    """
    id: str
    name: str
    on: bool = False
    brightness: float = 0.0
    colour: ColourIntent | None = None
    capabilities: frozenset = field(default=ALL_CAPABILITIES)
    stale: bool = False

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def as_request(self) -> LightRequest:
        """The request that would reproduce this light's current state."""
        return LightRequest(on=self.on, brightness=self.brightness, colour=self.colour)

    def with_state(self, **changes) -> 'Light':
        return replace(self, **changes)
