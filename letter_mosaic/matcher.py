"""Nearest palette colour by Euclidean RGB distance.

Both entry points scan the palette linearly, so cost grows with
``pixels x palette size``. That is fine for a few dozen letter tiles;
a k-d tree over RGB would be the next step for much larger palettes.
"""

from __future__ import annotations

import numpy as np

from letter_mosaic.colour import Colour, distance, squared_distance_matrix
from letter_mosaic.errors import EmptyPaletteError
from letter_mosaic.palette import Palette

# Larger than the widest possible RGB distance, sqrt(3 * 255**2) ~ 441.7
SENTINEL_DISTANCE = 500.0
EXACT_MATCH_EPSILON = 0.001


def nearest(palette: Palette, r: int, g: int, b: int) -> Colour:
    """Return the palette colour closest to ``(r, g, b)``.

    The scan stops at the first exact match. Among equally distant
    colours the one that comes first in the palette wins.
    """
    if not palette:
        msg = "Cannot match against an empty palette"
        raise EmptyPaletteError(msg)

    best = palette.colours[0]
    best_distance = SENTINEL_DISTANCE
    for colour in palette:
        d = distance(colour, r, g, b)
        if d < EXACT_MATCH_EPSILON:
            return colour
        if d < best_distance:
            best_distance = d
            best = colour
    return best


def nearest_indices(
    palette: Palette,
    pixels: np.ndarray,
    chunk_size: int = 4096,
) -> np.ndarray:
    """Batch version of :func:`nearest` returning palette indices.

    Agrees with :func:`nearest` pixel for pixel: ``argmin`` picks the
    first minimum, and with integer channels an exact match is the only
    distance below the epsilon.

    Args:
        palette:    Non-empty palette.
        pixels:     (N, C) uint8; channels beyond the third are ignored.
        chunk_size: Pixels per distance batch.

    Returns:
        (N,) intp array of indices into ``palette.colours``.
    """
    if not palette:
        msg = "Cannot match against an empty palette"
        raise EmptyPaletteError(msg)

    dist = squared_distance_matrix(pixels, palette.as_array(), chunk_size)
    return np.argmin(dist, axis=1)
