"""Escape-time evaluation of Mandelbrot viewports."""

from __future__ import annotations

import os
from dataclasses import dataclass
from multiprocessing.pool import ThreadPool
from typing import Callable, Iterable, Optional

import numpy as np
import PIL.Image
import tensorflow as tf

from .colors import color_mode, quantize
from .point import ORIGIN, Point
from .viewport import Viewport

MAX_ITERATIONS = 255
ESCAPE_RADIUS_SQUARED = 4.0
MAX_BLOCK_SIZE = 1 << 16
DEFAULT_DEVICE = "/CPU:0"


@dataclass(frozen=True)
class PixelBuffer:
    """Flat row-major pixel bytes together with the format needed to encode them."""

    data: np.ndarray
    scores: np.ndarray
    width: int
    height: int
    mode: str

    @property
    def channels(self) -> int:
        return self.data.size // max(self.width * self.height, 1)

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    def to_image(self) -> PIL.Image.Image:
        """Wrap the buffer in a Pillow image of the same mode and size."""

        return PIL.Image.frombytes(self.mode, (self.width, self.height), self.tobytes())


def evaluate(c: Point) -> int:
    """Score a single point: ``255 - n`` if it escapes at iteration ``n``, else 0."""

    z = ORIGIN
    for n in range(MAX_ITERATIONS):
        z = z * z + c
        if z.magnitude_squared() >= ESCAPE_RADIUS_SQUARED:
            return MAX_ITERATIONS - n
    return 0


@tf.function
def _escape_step(
    zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor,
    scores: tf.Tensor, active: tf.Tensor, n: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every point that has not escaped yet by one iteration."""

    # Same operation order as Point.__mul__ followed by Point.__add__.
    new_re = zr * zr - zi * zi + cr
    new_im = zr * zi + zi * zr + ci
    magnitude = new_im * new_im + new_re * new_re

    escaped = tf.logical_and(active, magnitude >= ESCAPE_RADIUS_SQUARED)
    scores = tf.where(escaped, MAX_ITERATIONS - n, scores)
    active = tf.logical_and(active, tf.logical_not(escaped))
    zr = tf.where(active, new_re, zr)
    zi = tf.where(active, new_im, zi)
    return zr, zi, scores, active


@tf.function(input_signature=[tf.TensorSpec([None], tf.float32), tf.TensorSpec([None], tf.float32)])
def _escape_run(cr: tf.Tensor, ci: tf.Tensor) -> tf.Tensor:
    """Run the escape-time iteration over a block of points using a TensorFlow while loop."""

    n = tf.constant(0, dtype=tf.int32)
    zr = tf.zeros_like(cr)
    zi = tf.zeros_like(ci)
    scores = tf.zeros(tf.shape(cr), dtype=tf.int32)
    active = tf.ones(tf.shape(cr), dtype=tf.bool)

    def cond(n: tf.Tensor, zr: tf.Tensor, zi: tf.Tensor, scores: tf.Tensor, active: tf.Tensor) -> tf.Tensor:
        return tf.logical_and(tf.less(n, MAX_ITERATIONS), tf.reduce_any(active))

    def body(n: tf.Tensor, zr: tf.Tensor, zi: tf.Tensor, scores: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, ...]:
        zr, zi, scores, active = _escape_step(zr, zi, cr, ci, scores, active, n)
        return n + 1, zr, zi, scores, active

    _, _, _, scores, _ = tf.while_loop(cond, body, (n, zr, zi, scores, active))
    return scores


def _evaluate_block(cr: np.ndarray, ci: np.ndarray, device: Optional[str]) -> np.ndarray:
    with tf.device(device if device is not None else DEFAULT_DEVICE):
        scores = _escape_run(
            tf.convert_to_tensor(cr, dtype=tf.float32),
            tf.convert_to_tensor(ci, dtype=tf.float32),
        )
    return scores.numpy().astype(np.uint8)


def _partition(total: int, workers: int) -> list[tuple[int, int]]:
    """Split ``[0, total)`` into contiguous ranges, at least one per worker."""

    block = -(-total // workers)
    block = max(1, min(block, MAX_BLOCK_SIZE))
    return [(start, min(start + block, total)) for start in range(0, total, block)]


def _resolve_workers(workers: Optional[int]) -> int:
    if workers is None:
        return os.cpu_count() or 1
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}.")
    return int(workers)


def _map_blocks(
    total: int,
    block_fn: Callable[[int, int], np.ndarray],
    workers: Optional[int],
) -> np.ndarray:
    """Fill a preallocated score buffer by evaluating disjoint index ranges in parallel."""

    workers = _resolve_workers(workers)
    scores = np.empty(total, dtype=np.uint8)
    ranges = _partition(total, workers)

    def run(bounds: tuple[int, int]) -> None:
        start, stop = bounds
        scores[start:stop] = block_fn(start, stop)

    if len(ranges) <= 1 or workers == 1:
        for bounds in ranges:
            run(bounds)
        return scores

    with ThreadPool(processes=min(workers, len(ranges))) as pool:
        pool.map(run, ranges)
    return scores


def evaluate_points(
    points: Iterable[Point],
    *,
    workers: Optional[int] = None,
    device: Optional[str] = None,
) -> np.ndarray:
    """Score every point of a materialized sample sequence, preserving its order."""

    points = list(points)
    cr = np.array([p.re for p in points], dtype=np.float32)
    ci = np.array([p.im for p in points], dtype=np.float32)
    return _map_blocks(
        len(points),
        lambda start, stop: _evaluate_block(cr[start:stop], ci[start:stop], device),
        workers,
    )


def render_scores(
    viewport: Viewport,
    *,
    workers: Optional[int] = None,
    device: Optional[str] = None,
) -> np.ndarray:
    """Score every pixel of ``viewport`` in row-major order.

    Each task derives the coordinates of its own index range, so the full list
    of sample points never exists in memory.
    """

    def block(start: int, stop: int) -> np.ndarray:
        cr, ci = viewport.coordinates(start, stop)
        return _evaluate_block(cr, ci, device)

    return _map_blocks(viewport.size, block, workers)


def compute_image(
    viewport: Viewport,
    color: bool = False,
    *,
    workers: Optional[int] = None,
    device: Optional[str] = None,
) -> PixelBuffer:
    """Render ``viewport`` into a grayscale or RGB pixel buffer."""

    viewport.validate()
    scores = render_scores(viewport, workers=workers, device=device)
    return PixelBuffer(
        data=quantize(scores, color),
        scores=scores,
        width=int(viewport.width),
        height=int(viewport.height),
        mode=color_mode(color),
    )
