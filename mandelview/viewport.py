"""Viewport geometry and row-major enumeration of sample points."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .point import Point


def _check_resolution(width: int, height: int) -> None:
    for value in (width, height):
        if isinstance(value, bool) or int(value) != value:
            raise ValueError(f"Resolution must be a whole number of pixels, got {width}x{height}.")
    if int(width) < 1 or int(height) < 1:
        raise ValueError(f"Resolution must be at least 1x1, got {width}x{height}.")


def _deltas(topleft: Point, bottomright: Point, width: int, height: int) -> tuple[np.float32, np.float32]:
    xdelta = np.float32((bottomright.re - topleft.re) / np.float32(width))
    ydelta = np.float32((topleft.im - bottomright.im) / np.float32(height))
    return xdelta, ydelta


@dataclass(frozen=True)
class Viewport:
    """A rectangle of the complex plane sampled at ``width`` x ``height`` pixels.

    The step sizes are taken as given: a bottom-right corner that lies above or
    to the left of the top-left corner yields a mirrored image.
    """

    topleft: Point
    bottomright: Point
    width: int
    height: int

    def __post_init__(self) -> None:
        self.validate()
        object.__setattr__(self, "width", int(self.width))
        object.__setattr__(self, "height", int(self.height))

    def validate(self) -> None:
        """Raise ``ValueError`` unless the resolution is a whole number of pixels, at least 1x1."""

        _check_resolution(self.width, self.height)

    @property
    def xdelta(self) -> np.float32:
        return _deltas(self.topleft, self.bottomright, self.width, self.height)[0]

    @property
    def ydelta(self) -> np.float32:
        return _deltas(self.topleft, self.bottomright, self.width, self.height)[1]

    @property
    def size(self) -> int:
        return int(self.width) * int(self.height)

    def sampler(self) -> ViewSampler:
        return ViewSampler(self.topleft, self.bottomright, self.width, self.height)

    def point_at(self, row: int, col: int) -> Point:
        """Return the sample point of pixel ``(row, col)``."""

        return Point(
            self.topleft.re + np.float32(col) * self.xdelta,
            self.topleft.im - np.float32(row) * self.ydelta,
        )

    def coordinates(self, start: int, stop: int) -> tuple[np.ndarray, np.ndarray]:
        """Vectorized coordinates for the flattened pixel indices ``[start, stop)``.

        The values are bit-identical to the points yielded by :class:`ViewSampler`.
        """

        xdelta, ydelta = _deltas(self.topleft, self.bottomright, self.width, self.height)
        index = np.arange(start, stop, dtype=np.int64)
        rows, cols = np.divmod(index, int(self.width))
        re = self.topleft.re + cols.astype(np.float32) * xdelta
        im = self.topleft.im - rows.astype(np.float32) * ydelta
        return re.astype(np.float32, copy=False), im.astype(np.float32, copy=False)


class ViewSampler:
    """Produce the sample points of a viewport, top row first, left column first.

    The sampler is its own iterator and cannot be rewound; build a new one to
    enumerate the viewport again.
    """

    def __init__(self, topleft: Point, bottomright: Point, width: int, height: int):
        _check_resolution(width, height)
        self.topleft = topleft
        self.xdelta, self.ydelta = _deltas(topleft, bottomright, width, height)
        self.xres = int(width)
        self.yres = int(height)
        self.curx = 0
        self.cury = 0

    def __iter__(self) -> ViewSampler:
        return self

    def __next__(self) -> Point:
        if self.curx == self.xres:
            # End of the row: back to the left edge, one row down.
            self.curx = 0
            self.cury += 1
        if self.cury >= self.yres:
            raise StopIteration

        point = Point(
            self.topleft.re + np.float32(self.curx) * self.xdelta,
            self.topleft.im - np.float32(self.cury) * self.ydelta,
        )
        self.curx += 1
        return point

    def __length_hint__(self) -> int:
        if self.cury >= self.yres:
            return 0
        return (self.yres - self.cury) * self.xres - self.curx


def viewport_from_scale(x_topleft: float, y_topleft: float, scale: float, xres: int, yres: int) -> Viewport:
    """Build the viewport whose top-left corner is given and whose width is ``scale``.

    The height follows from the pixel aspect ratio so that pixels stay square.
    """

    _check_resolution(xres, yres)
    ratio = np.float32(xres) / np.float32(yres)
    topleft = Point(x_topleft, y_topleft)
    right = topleft.re + np.float32(scale)
    # Derived from the real extent rather than scale / ratio to keep pixels square.
    bottom = topleft.im - (right - topleft.re) / ratio
    return Viewport(topleft, Point(right, bottom), int(xres), int(yres))
