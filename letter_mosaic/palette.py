"""Palette building: one mean colour per tile image."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType

import numpy as np

from letter_mosaic.colour import Colour
from letter_mosaic.errors import DecodeError, EmptyPaletteError
from letter_mosaic.image_io import decode_image, enumerate_files

logger = logging.getLogger(__name__)


class Palette(Mapping[Colour, Path]):
    """Read-only ``Colour -> tile path`` mapping.

    Iteration follows insertion order, which is the order the matcher
    uses to break ties. When two entries share a colour the first one
    is kept.
    """

    def __init__(self, entries: Iterable[tuple[Colour, Path]] = ()) -> None:
        lookup: dict[Colour, Path] = {}
        for colour, tile in entries:
            lookup.setdefault(colour, Path(tile))
        self._lookup = MappingProxyType(lookup)
        self._colours = tuple(lookup)
        self._tiles = tuple(lookup.values())
        array = np.array([tuple(c) for c in self._colours], dtype=np.uint8)
        self._array = array.reshape(-1, 3)
        self._array.setflags(write=False)

    def __getitem__(self, colour: Colour) -> Path:
        return self._lookup[colour]

    def __iter__(self) -> Iterator[Colour]:
        return iter(self._colours)

    def __len__(self) -> int:
        return len(self._colours)

    def __repr__(self) -> str:
        return f"Palette({len(self)} colours)"

    @property
    def colours(self) -> tuple[Colour, ...]:
        return self._colours

    @property
    def tiles(self) -> tuple[Path, ...]:
        """Tile paths, index-aligned with :attr:`colours`."""
        return self._tiles

    def as_array(self) -> np.ndarray:
        """(K, 3) uint8 read-only view of the colours in palette order."""
        return self._array


def mean_colour(pixels: np.ndarray) -> Colour:
    """Per-channel mean of an (H, W, C) image, truncated to integers.

    Only the first three channels count; alpha is ignored.
    """
    rgb = pixels.reshape(-1, pixels.shape[-1])[:, :3]
    total = len(rgb)
    if total == 0:
        msg = "Cannot average an image without pixels"
        raise ValueError(msg)
    sums = rgb.sum(axis=0, dtype=np.int64)
    r, g, b = (int(s) // total for s in sums)
    return Colour(r, g, b)


def _tile_colour(path: Path) -> Colour | None:
    try:
        return mean_colour(decode_image(path))
    except (DecodeError, ValueError) as exc:
        logger.warning("Skipping tile %s: %s", path.name, exc)
        return None


def build_palette(directory: str | Path, workers: int = 1) -> Palette:
    """Scan *directory* and map each tile's mean colour to its path.

    Args:
        directory: Folder of tile images. Files that fail to decode are
            skipped with a warning.
        workers: Threads used to average tiles. Results are merged in
            file order, so the palette is the same for any value.

    Raises:
        EmptyPaletteError: no file in *directory* could be decoded.
    """
    files = enumerate_files(directory)
    logger.info("Averaging %d tile file(s) in %s …", len(files), directory)
    t0 = time.perf_counter()

    if workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            colours = list(executor.map(_tile_colour, files))
    else:
        colours = [_tile_colour(f) for f in files]

    palette = Palette(
        (colour, path)
        for colour, path in zip(colours, files, strict=True)
        if colour is not None
    )
    if not palette:
        msg = f"No usable tile images in {directory}"
        raise EmptyPaletteError(msg)

    decoded = sum(c is not None for c in colours)
    if decoded > len(palette):
        logger.debug(
            "%d tile(s) share a colour with an earlier tile and were dropped",
            decoded - len(palette),
        )
    logger.info(
        "Palette ready: %d colours  (%.1f s)", len(palette), time.perf_counter() - t0,
    )
    return palette
