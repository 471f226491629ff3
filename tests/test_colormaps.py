import numpy as np
import pytest

from fractald.colormaps import (
    PALETTES,
    ROTATION_PERIOD,
    PaletteType,
    apply_palette,
    get_palette,
    list_palette_names,
    next_palette,
    normalize_field,
)


FIELD = np.array([[1, 7, 50, 100], [128, 200, 255, 99], [3, 100, 64, 12]], dtype=np.int32)
MAX_ITER = 100


@pytest.mark.parametrize("palette", list(PaletteType))
@pytest.mark.parametrize("phase", [0.0, 0.37, 3.0, 11.5])
def test_inside_points_are_black(palette, phase):
    rgb = apply_palette(FIELD, MAX_ITER, palette, phase)
    assert rgb.shape == FIELD.shape + (3,)
    assert rgb.dtype == np.uint8
    assert (rgb[FIELD >= MAX_ITER] == 0).all()


def test_grayscale_channels_equal():
    field = np.arange(0, 300, dtype=np.int32).reshape(10, 30)
    for phase in (0.0, 1.3, 4.0):
        rgb = apply_palette(field, 1000, PaletteType.GRAYSCALE, phase)
        assert (rgb[..., 0] == rgb[..., 1]).all()
        assert (rgb[..., 1] == rgb[..., 2]).all()


def test_grayscale_ramp_endpoints():
    rgb = apply_palette(np.array([[0, 255]]), 1000, "GRAYSCALE")
    assert tuple(rgb[0, 0]) == (0, 0, 0)
    assert tuple(rgb[0, 1]) == (255, 255, 255)


def test_rainbow_is_periodic_in_phase():
    field = np.arange(1, 513, dtype=np.int32).reshape(16, 32)
    base = apply_palette(field, 1000, PaletteType.RAINBOW, 0.0)
    np.testing.assert_array_equal(base, apply_palette(field, 1000, PaletteType.RAINBOW, ROTATION_PERIOD))
    np.testing.assert_array_equal(base, apply_palette(field, 1000, PaletteType.RAINBOW, 2 * ROTATION_PERIOD))


@pytest.mark.parametrize("phase", [0.55, 0.6000000000000001, 0.8500000000000001, 1.1, 7.3])
def test_rainbow_is_periodic_from_any_phase(phase):
    field = np.arange(1, 513, dtype=np.int32).reshape(16, 32)
    np.testing.assert_array_equal(apply_palette(field, 5000, PaletteType.RAINBOW, phase),
                                  apply_palette(field, 5000, PaletteType.RAINBOW, phase + ROTATION_PERIOD))


def test_rainbow_period_holds_across_phase_sweep():
    field = np.arange(1, 257, dtype=np.int32).reshape(16, 16)
    mismatched = [
        phase for phase in np.linspace(0.0, 20.0, 401)
        if not np.array_equal(apply_palette(field, 5000, "RAINBOW", phase),
                              apply_palette(field, 5000, "RAINBOW", phase + ROTATION_PERIOD))
    ]
    assert mismatched == []


def test_phase_rotates_colors():
    field = np.arange(1, 65, dtype=np.int32).reshape(8, 8)
    assert not np.array_equal(apply_palette(field, 1000, "RAINBOW", 0.0),
                              apply_palette(field, 1000, "RAINBOW", 0.5))


def test_normalization_wraps():
    t = normalize_field(np.array([0, 255, 256, 300]), phase=0.0)
    np.testing.assert_allclose(t, [0.0, 1.0, 0.0, 44 / 255])
    t = normalize_field(np.array([0]), phase=1.0)
    np.testing.assert_allclose(t, [50 / 255])
    assert normalize_field(np.array([255.5]), phase=0.0)[0] > 1.0


def _color(palette, value):
    return tuple(int(c) for c in apply_palette(np.array([[value]]), 1000, palette)[0, 0])


def _close(actual, expected):
    return all(abs(a - e) <= 1 for a, e in zip(actual, expected))


def test_palette_formulas_at_ramp_start():
    assert _close(_color("CLASSIC", 0), (127, 237, 17))
    assert _close(_color("FIRE", 0), (0, 0, 0))
    assert _close(_color("OCEAN", 0), (0, 0, 76))
    assert _close(_color("RAINBOW", 0), (255, 0, 0))
    assert _close(_color("PSYCHEDELIC", 0), (127, 234, 243))


def test_palette_formulas_at_ramp_end():
    assert _close(_color("FIRE", 255), (255, 255, 229))
    assert _close(_color("OCEAN", 255), (76, 204, 255))


def test_rainbow_hues():
    assert _close(_color("RAINBOW", 85), (0, 255, 0))
    assert _close(_color("RAINBOW", 170), (0, 0, 255))


def test_fire_channels_clamped():
    rgb = apply_palette(np.arange(0, 256).reshape(16, 16), 1000, "FIRE")
    assert rgb[..., 1].max() == 255
    assert rgb[..., 2].max() == 229


@pytest.mark.parametrize("selector", ["NEON", "", None, 42, "rainbow "])
def test_unknown_selector_falls_back_to_rainbow(selector):
    assert get_palette(selector) is PaletteType.RAINBOW
    np.testing.assert_array_equal(apply_palette(FIELD, MAX_ITER, selector),
                                  apply_palette(FIELD, MAX_ITER, PaletteType.RAINBOW))


def test_selector_names_case_insensitive():
    assert get_palette("ocean") is PaletteType.OCEAN
    assert get_palette(PaletteType.FIRE) is PaletteType.FIRE


def test_registry_and_cycling():
    assert list_palette_names() == ["CLASSIC", "FIRE", "OCEAN", "RAINBOW", "PSYCHEDELIC", "GRAYSCALE"]
    assert set(PALETTES) == set(PaletteType)
    assert next_palette("CLASSIC") is PaletteType.FIRE
    assert next_palette(PaletteType.GRAYSCALE) is PaletteType.CLASSIC
