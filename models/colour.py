"""Colour conversion helpers.

The Sunflower hub only understands RGB, so colour temperatures and
hue/saturation values from the operator are converted here before they
are sent.
"""

import math


def _clamp(x: float, low: float = 0, high: float = 255) -> int:
    """Clamp to [low, high] and truncate to an int. NaN goes to low."""
    if not x >= low:
        return int(low)
    if x > high:
        return int(high)
    return int(x)


def temperature_to_rgb(kelvin: float) -> tuple[int, int, int]:
    """Convert a colour temperature in kelvins to an RGB triple.

    Uses Tanner Helland's piecewise approximation, valid from 1000K to 40000K.
    Inputs outside that range still return a value, saturated at 0 or 255.

    Args:
        kelvin: Colour temperature

    Returns:
        Tuple of (red, green, blue), each 0-255
    """
    temp = kelvin / 100

    if temp <= 66:
        red = 255
        # log of a non-positive temperature would raise, the clamp handles it
        green = 99.4708025861 * math.log(temp) - 161.1195681661 if temp > 0 else 0
        if temp <= 19:
            blue = 0
        else:
            blue = 138.5177312231 * math.log(temp - 10) - 305.0447927307
    else:
        red = 329.698727446 * math.pow(temp - 60, -0.1332047592)
        green = 288.1221695283 * math.pow(temp - 60, -0.0755148492)
        blue = 255

    return _clamp(red), _clamp(green), _clamp(blue)


def _unit_to_byte(x: float) -> int:
    if not x >= 0:
        return 0
    if x > 1:
        return 255
    return int(x * 255 + 0.5)


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[int, int, int]:
    """Convert an HSV triple (each 0-1) to an RGB triple (each 0-255).

    A hue that isn't finite is read as 0 (red).
    """
    if not math.isfinite(h):
        h = 0.0
    i = math.floor(h * 6)
    f = h * 6 - i
    p = v * (1.0 - s)
    q = v * (1.0 - f * s)
    t = v * (1.0 - (1.0 - f) * s)

    sector = int(i) % 6
    if sector == 0:
        r, g, b = v, t, p
    elif sector == 1:
        r, g, b = q, v, p
    elif sector == 2:
        r, g, b = p, v, t
    elif sector == 3:
        r, g, b = p, q, v
    elif sector == 4:
        r, g, b = t, p, v
    else:
        r, g, b = v, p, q

    return _unit_to_byte(r), _unit_to_byte(g), _unit_to_byte(b)
