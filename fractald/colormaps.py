"""
Palette definitions and the escape-field to color mapping.

Each palette function takes an array of positions t in [0, 1) and returns
an (..., 3) float array of RGB channels. apply_palette normalizes escape
values into t with a rotation phase, so increasing the phase cycles colors
through the palette without recomputing the escape field.

To add a new palette:
1. Add a member to PaletteType
2. Define a palette_xxx(t) function
3. Register it in the PALETTES dictionary at the bottom of this file
"""

import enum

import numpy as np


PHASE_STEP = 50.0    # Escape-value units per unit of phase
RAMP_LENGTH = 256.0  # Values wrap around the ramp every 256 units
ROTATION_PERIOD = RAMP_LENGTH / PHASE_STEP  # Phase change for one full cycle


class PaletteType(enum.Enum):
    CLASSIC = "CLASSIC"
    FIRE = "FIRE"
    OCEAN = "OCEAN"
    RAINBOW = "RAINBOW"
    PSYCHEDELIC = "PSYCHEDELIC"
    GRAYSCALE = "GRAYSCALE"


DEFAULT_PALETTE = PaletteType.RAINBOW


def _stack(r, g, b):
    return np.stack([r, g, b], axis=-1)


def palette_classic(t):
    """Three phase-shifted sines: smooth cycle through the primaries."""
    angle = 2.0 * np.pi * t
    return _stack((np.sin(angle) + 1.0) / 2.0,
                  (np.sin(angle + 2.0 * np.pi / 3.0) + 1.0) / 2.0,
                  (np.sin(angle + 4.0 * np.pi / 3.0) + 1.0) / 2.0)


def palette_fire(t):
    """
    Fire palette: black -> red -> yellow -> white.

    Green comes in after 0.3 and blue after 0.7, so the low end stays red.
    """
    return _stack(t,
                  np.maximum(t - 0.3, 0.0) * 1.5,
                  np.maximum(t - 0.7, 0.0) * 3.0)


def palette_ocean(t):
    """Ocean palette: deep blue -> cyan -> pale blue."""
    return _stack(t * 0.3, t * 0.8, 0.3 + t * 0.7)


def _hsv_channel(n, hue):
    k = (n + hue / 60.0) % 6.0
    return 1.0 - np.clip(np.minimum(k, 4.0 - k), 0.0, 1.0)


def palette_rainbow(t):
    """
    Rainbow palette: one full hue rotation over the ramp.

    HSV to RGB with saturation and value fixed at 1.
    """
    hue = (t * 360.0) % 360.0
    return _stack(_hsv_channel(5.0, hue),
                  _hsv_channel(3.0, hue),
                  _hsv_channel(1.0, hue))


def palette_psychedelic(t):
    """Sines of different frequencies per channel, high-contrast bands."""
    return _stack((np.sin(6.0 * np.pi * t) + 1.0) / 2.0,
                  (np.sin(8.0 * np.pi * t + 1.0) + 1.0) / 2.0,
                  (np.sin(10.0 * np.pi * t + 2.0) + 1.0) / 2.0)


def palette_grayscale(t):
    """Grayscale palette: black -> white."""
    return _stack(t, t, t)


# Registry of all available palettes.
# Keys are PaletteType members, values are palette functions.
PALETTES = {
    PaletteType.CLASSIC: palette_classic,
    PaletteType.FIRE: palette_fire,
    PaletteType.OCEAN: palette_ocean,
    PaletteType.RAINBOW: palette_rainbow,
    PaletteType.PSYCHEDELIC: palette_psychedelic,
    PaletteType.GRAYSCALE: palette_grayscale,
}


def get_palette(selector):
    """
    Resolve a palette selector.

    Palette names often come from saved settings or bookmarks, so anything
    that is not a known palette resolves to the default (Rainbow) instead
    of raising.

    Args:
        selector: PaletteType member or palette name (case-insensitive)

    Returns:
        PaletteType member
    """
    if isinstance(selector, PaletteType):
        return selector
    if isinstance(selector, str):
        try:
            return PaletteType[selector.strip().upper()]
        except KeyError:
            pass
    return DEFAULT_PALETTE


def list_palette_names():
    """Get list of available palette names."""
    return [palette.value for palette in PALETTES]


def next_palette(selector):
    """Palette after the given one, wrapping around."""
    order = list(PALETTES)
    index = order.index(get_palette(selector))
    return order[(index + 1) % len(order)]


def normalize_field(field, phase=0.0):
    """
    Ramp position t in [0, 256/255) for every escape value, rotated by phase.

    The phase offset is reduced modulo the ramp and rounded before it is
    added, so phases one ROTATION_PERIOD apart give identical positions.
    """
    values = np.asarray(field, dtype=np.float64)
    offset = np.round(np.mod(phase * PHASE_STEP, RAMP_LENGTH), 9)
    return np.mod(values + offset, RAMP_LENGTH) / (RAMP_LENGTH - 1.0)


def apply_palette(field, max_iter, selector=DEFAULT_PALETTE, phase=0.0):
    """
    Map an escape field to RGB colors.

    Points at or above max_iter are inside the set and are always black.
    Everything else is looked up on the palette at
    t = ((value + phase * 50) mod 256) / 255.

    Args:
        field: 2D array of escape values
        max_iter: Iteration cap the field was computed with
        selector: PaletteType or palette name; unknown names use Rainbow
        phase: Rotation offset; ROTATION_PERIOD is one full cycle

    Returns:
        uint8 array of shape (height, width, 3)
    """
    field = np.asarray(field)
    palette = PALETTES[get_palette(selector)]

    rgb = palette(normalize_field(field, phase))
    out = (np.clip(rgb, 0.0, 1.0) * 255.0).astype(np.uint8)
    out[field >= max_iter] = 0
    return out
