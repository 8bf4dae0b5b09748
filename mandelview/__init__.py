"""Public API for Mandelbrot escape-time rendering."""

from .point import ORIGIN, Point, add, mul
from .viewport import ViewSampler, Viewport, viewport_from_scale
from .colors import channel_count, color_mode, colorize, grayscale, quantize
from .renderer import (
    MAX_ITERATIONS,
    PixelBuffer,
    compute_image,
    evaluate,
    evaluate_points,
    render_scores,
)

__all__ = [
    "MAX_ITERATIONS",
    "ORIGIN",
    "PixelBuffer",
    "Point",
    "ViewSampler",
    "Viewport",
    "add",
    "channel_count",
    "color_mode",
    "colorize",
    "compute_image",
    "evaluate",
    "evaluate_points",
    "grayscale",
    "mul",
    "quantize",
    "render_scores",
    "viewport_from_scale",
]
