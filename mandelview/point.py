"""Single-precision complex arithmetic."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Point:
    """A point of the complex plane stored as two 32-bit floats."""

    re: np.float32
    im: np.float32

    def __post_init__(self) -> None:
        object.__setattr__(self, "re", np.float32(self.re))
        object.__setattr__(self, "im", np.float32(self.im))

    def __add__(self, other: Point) -> Point:
        return add(self, other)

    def __mul__(self, other: Point) -> Point:
        return mul(self, other)

    def magnitude_squared(self) -> np.float32:
        with np.errstate(over="ignore", invalid="ignore"):
            return self.im * self.im + self.re * self.re


ORIGIN = Point(0.0, 0.0)


def add(a: Point, b: Point) -> Point:
    with np.errstate(over="ignore", invalid="ignore"):
        return Point(a.re + b.re, a.im + b.im)


def mul(a: Point, b: Point) -> Point:
    with np.errstate(over="ignore", invalid="ignore"):
        return Point(a.re * b.re - a.im * b.im, a.re * b.im + a.im * b.re)
