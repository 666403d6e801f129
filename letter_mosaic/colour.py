"""The Colour value object and RGB distance helpers."""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Colour:
    """An 8-bit RGB triple. Alpha is never part of a colour."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                msg = f"Channel {name}={value} is outside 0-255"
                raise ValueError(msg)

    def __iter__(self) -> Iterator[int]:
        yield self.r
        yield self.g
        yield self.b

    @classmethod
    def from_pixel(cls, pixel: Sequence[int] | np.ndarray) -> Colour:
        """Build a colour from the first three channels of *pixel*."""
        return cls(int(pixel[0]), int(pixel[1]), int(pixel[2]))

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


def distance(colour: Colour, r: int, g: int, b: int) -> float:
    """Euclidean RGB distance between *colour* and ``(r, g, b)``."""
    dr = colour.r - int(r)
    dg = colour.g - int(g)
    db = colour.b - int(b)
    return math.sqrt(dr * dr + dg * dg + db * db)


def squared_distance_matrix(
    pixels: np.ndarray,
    colours: np.ndarray,
    chunk_size: int = 4096,
) -> np.ndarray:
    """Pairwise squared Euclidean RGB distance between pixels and colours.

    Integer arithmetic keeps equal distances exactly equal, which the
    matcher relies on for tie-breaking.

    Args:
        pixels:     (N, C) uint8, only the first three channels are used.
        colours:    (K, 3) uint8 palette colours.
        chunk_size: Rows computed per batch (controls peak RAM).

    Returns:
        (N, K) int64 matrix.
    """
    p = pixels[:, :3].astype(np.int64)
    c = colours[:, :3].astype(np.int64)

    n = len(p)
    dist = np.empty((n, len(c)), dtype=np.int64)
    for i in range(0, n, chunk_size):
        j = min(i + chunk_size, n)
        diff = p[i:j, np.newaxis, :] - c[np.newaxis, :, :]
        dist[i:j] = np.sum(diff ** 2, axis=2)
    return dist
