"""Conversion of escape-time scores into pixel bytes."""

from __future__ import annotations

import numpy as np

GRAYSCALE_MODE = "L"
COLOR_MODE = "RGB"


def color_mode(color: bool) -> str:
    """Pillow mode name of the buffer produced by :func:`quantize`."""

    return COLOR_MODE if color else GRAYSCALE_MODE


def channel_count(color: bool) -> int:
    return 3 if color else 1


def grayscale(scores: np.ndarray) -> np.ndarray:
    """One byte per pixel, equal to the score."""

    return np.array(scores, dtype=np.uint8, copy=True).reshape(-1)


def colorize(scores: np.ndarray) -> np.ndarray:
    """Black plus rainbow ramp, three bytes (R, G, B) per pixel.

    All arithmetic happens on ``uint8`` values. Each branch is only taken for
    scores that keep its intermediate results inside ``[0, 255]``.
    """

    v = np.asarray(scores, dtype=np.uint8).reshape(-1)
    r = np.where(v < 16, v * np.uint8(16), np.uint8(255) - (v - np.uint8(16)))
    g = np.where(v < 128, v * np.uint8(2), np.uint8(255) - (v - np.uint8(128)) * np.uint8(2))
    b = v

    rgb = np.empty((v.size, 3), dtype=np.uint8)
    rgb[:, 0] = r
    rgb[:, 1] = g
    rgb[:, 2] = b
    return rgb.reshape(-1)


def quantize(scores: np.ndarray, color: bool = False) -> np.ndarray:
    if color:
        return colorize(scores)
    return grayscale(scores)
