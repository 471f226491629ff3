import numpy as np
import pytest

from fractald.images import decode_png, encode_png, make_thumbnail, save_png, thumbnail_array, upscale


def _gradient(width, height):
    rgb = np.zeros((height, width, 3), dtype=np.uint8)
    rgb[..., 0] = np.arange(width, dtype=np.uint8)[None, :]
    rgb[..., 1] = np.arange(height, dtype=np.uint8)[:, None]
    return rgb


def test_upscale_repeats_blocks():
    rgb = _gradient(4, 3)
    big = upscale(rgb, 3)
    assert big.shape == (9, 12, 3)
    np.testing.assert_array_equal(big[::3, ::3], rgb)
    assert upscale(rgb, 1) is rgb
    with pytest.raises(ValueError):
        upscale(rgb, 0)


def test_thumbnail_keeps_aspect():
    assert thumbnail_array(_gradient(240, 120)).shape == (100, 200, 3)
    assert thumbnail_array(_gradient(100, 200)).shape == (200, 100, 3)


def test_png_round_trip():
    rgb = _gradient(20, 10)
    np.testing.assert_array_equal(decode_png(encode_png(rgb)), rgb)


def test_make_thumbnail_is_png():
    data = make_thumbnail(_gradient(240, 120))
    assert data.startswith(b"\x89PNG")
    assert decode_png(data).shape == (100, 200, 3)


def test_save_png_scales(tmp_path):
    path = str(tmp_path / "out" / "frame.png")
    save_png(_gradient(8, 6), path, scale=4)
    with open(path, "rb") as f:
        assert decode_png(f.read()).shape == (24, 32, 3)
