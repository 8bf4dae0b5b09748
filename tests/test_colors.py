import numpy as np
import pytest

from mandelview import channel_count, color_mode, colorize, grayscale, quantize

RAMP_FIXTURES = {
    0: (0, 0, 0),
    15: (240, 30, 15),
    16: (255, 32, 16),
    127: (144, 254, 127),
    128: (143, 255, 128),
    255: (16, 1, 255),
}


@pytest.mark.parametrize("score,expected", sorted(RAMP_FIXTURES.items()))
def test_color_ramp_boundaries(score, expected):
    rgb = colorize(np.array([score], dtype=np.uint8))
    assert tuple(int(b) for b in rgb) == expected


def test_color_ramp_matches_piecewise_formula_for_every_score():
    scores = np.arange(256, dtype=np.uint8)
    rgb = colorize(scores).reshape(-1, 3)
    for v in range(256):
        r = v * 16 if v < 16 else 255 - (v - 16)
        g = v * 2 if v < 128 else 255 - (v - 128) * 2
        assert tuple(int(b) for b in rgb[v]) == (r, g, v)


def test_colorize_groups_bytes_per_pixel_in_order():
    scores = np.array([255, 0, 16], dtype=np.uint8)
    data = colorize(scores)
    assert data.dtype == np.uint8
    assert list(data) == [16, 1, 255, 0, 0, 0, 255, 32, 16]


def test_grayscale_is_identity():
    scores = np.array([0, 1, 128, 255], dtype=np.uint8)
    data = grayscale(scores)
    assert data.dtype == np.uint8
    assert list(data) == [0, 1, 128, 255]
    data[0] = 9
    assert scores[0] == 0


def test_quantize_buffer_lengths():
    scores = np.arange(10, dtype=np.uint8)
    assert quantize(scores).size == 10
    assert quantize(scores, color=True).size == 30


def test_modes_and_channels():
    assert color_mode(False) == "L"
    assert color_mode(True) == "RGB"
    assert channel_count(False) == 1
    assert channel_count(True) == 3
