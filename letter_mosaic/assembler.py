"""Mosaic assembly: resize, classify, composite."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from letter_mosaic.config import MosaicConfig
from letter_mosaic.errors import (
    DecodeError,
    DimensionError,
    InputNotFoundError,
    TileDecodeError,
)
from letter_mosaic.image_io import (
    compute_working_size,
    decode_image,
    load_and_resize,
    resize,
)
from letter_mosaic.matcher import nearest_indices
from letter_mosaic.palette import Palette, build_palette

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentGrid:
    """Chosen tile per working pixel.

    Attributes:
        indices: (H, W) indices into *tiles*.
        tiles:   Tile paths in palette order.
    """

    indices: np.ndarray
    tiles: tuple[Path, ...]

    @property
    def shape(self) -> tuple[int, int]:
        h, w = self.indices.shape
        return h, w

    def tile_at(self, x: int, y: int) -> Path:
        return self.tiles[int(self.indices[y, x])]


class TileCache:
    """Decoded tile images keyed by path, filled on first use.

    Each path is decoded at most once, also when several threads ask
    for the same tile at the same time.
    """

    def __init__(
        self, decoder: Callable[[Path], np.ndarray] = decode_image,
    ) -> None:
        self._decoder = decoder
        self._images: dict[Path, np.ndarray] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._images)

    def get(self, tile: Path) -> np.ndarray:
        with self._lock:
            image = self._images.get(tile)
            if image is None:
                try:
                    image = self._decoder(tile)
                except DecodeError as exc:
                    raise TileDecodeError(tile, str(exc)) from exc
                self._images[tile] = image
            return image


def working_image(source: np.ndarray, max_width: int) -> np.ndarray:
    """Shrink a source to the working resolution as RGB.

    Accepts (H, W) grayscale or (H, W, C) arrays; alpha is dropped.
    """
    h, w = source.shape[:2]
    new_w, new_h = compute_working_size(w, h, max_width)
    logger.info("Working size: %dx%d (source %dx%d)", new_w, new_h, w, h)
    return resize(_as_rgba(source)[..., :3], new_w, new_h)


def classify(
    working: np.ndarray,
    palette: Palette,
    workers: int = 1,
) -> AssignmentGrid:
    """Pick the nearest palette tile for every working pixel.

    With ``workers > 1`` rows are split into bands matched on a thread
    pool; each band writes its own rows, so the grid is the same for
    any worker count.
    """
    h, w = working.shape[:2]
    indices = np.empty((h, w), dtype=np.intp)

    logger.info("Matching %d pixels against %d colours …", h * w, len(palette))
    t0 = time.perf_counter()

    def _match_rows(rows: np.ndarray) -> None:
        if len(rows) == 0:
            return
        top, bottom = int(rows[0]), int(rows[-1]) + 1
        band = working[top:bottom].reshape(-1, working.shape[-1])
        indices[top:bottom] = nearest_indices(palette, band).reshape(bottom - top, w)

    bands = np.array_split(np.arange(h), min(workers, h))
    if len(bands) > 1:
        with ThreadPoolExecutor(max_workers=len(bands)) as executor:
            list(executor.map(_match_rows, bands))
    else:
        _match_rows(bands[0])

    logger.info("Matching done  (%.1f s)", time.perf_counter() - t0)
    return AssignmentGrid(indices=indices, tiles=palette.tiles)


def composite(
    grid: AssignmentGrid,
    cell_size: int,
    cache: TileCache | None = None,
) -> np.ndarray:
    """Stamp every cell's tile into an RGBA canvas.

    Returns:
        (H * cell_size, W * cell_size, 4) uint8 array.

    Raises:
        TileDecodeError: a tile referenced by *grid* can no longer be read.
    """
    if cell_size < 1:
        msg = f"cell_size must be positive, got {cell_size}"
        raise DimensionError(msg)
    cache = cache if cache is not None else TileCache()
    h, w = grid.shape
    s = cell_size

    logger.info("Compositing %dx%d canvas …", w * s, h * s)
    t0 = time.perf_counter()

    # One resized stamp per tile actually used, resolved in row-major order
    stamps = np.zeros((len(grid.tiles), s, s, 4), dtype=np.uint8)
    for index in dict.fromkeys(grid.indices.ravel().tolist()):
        tile = cache.get(grid.tiles[index])
        stamps[index] = resize(_as_rgba(tile), s, s)

    # (H, W, s, s, 4) -> (H, s, W, s, 4) -> (H*s, W*s, 4)
    canvas = stamps[grid.indices].transpose(0, 2, 1, 3, 4).reshape(h * s, w * s, 4)

    logger.info(
        "Canvas ready, %d distinct tiles  (%.1f s)",
        len(cache), time.perf_counter() - t0,
    )
    return np.ascontiguousarray(canvas)


def _as_rgba(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        image = np.stack([image] * 3, axis=-1)
    if image.shape[-1] == 4:
        return image
    alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([image[..., :3], alpha], axis=-1)


def assemble(
    source: np.ndarray,
    palette: Palette,
    cell_size: int = 10,
    max_width: int = 200,
    workers: int = 1,
    cache: TileCache | None = None,
) -> np.ndarray:
    """Turn a decoded source image into a tile mosaic canvas."""
    working = working_image(source, max_width)
    grid = classify(working, palette, workers=workers)
    return composite(grid, cell_size, cache)


@dataclass(frozen=True)
class MosaicResult:
    """Everything a run produced, for saving and reporting."""

    canvas: np.ndarray
    working: np.ndarray
    grid: AssignmentGrid
    palette: Palette

    def mean_error(self) -> float:
        """Mean RGB distance between working pixels and their palette colour."""
        chosen = self.palette.as_array()[self.grid.indices].reshape(-1, 3)
        target = self.working[..., :3].reshape(-1, 3)
        diff = target.astype(np.float64) - chosen.astype(np.float64)
        return float(np.mean(np.sqrt(np.sum(diff ** 2, axis=1))))


def create_mosaic(
    source_path: str | Path,
    cfg: MosaicConfig | None = None,
    palette: Palette | None = None,
) -> MosaicResult:
    """Run the whole pipeline for one source image.

    The palette is built from ``cfg.tile_dir`` unless one is passed in.
    Nothing is written to disk.
    """
    cfg = (cfg or MosaicConfig()).validate()
    source_path = Path(source_path)
    if not source_path.exists():
        raise InputNotFoundError(source_path)

    if palette is None:
        palette = build_palette(cfg.tile_dir, workers=cfg.workers)

    working = load_and_resize(source_path, cfg.max_width)
    grid = classify(working, palette, workers=cfg.workers)
    canvas = composite(grid, cfg.cell_size, TileCache())
    return MosaicResult(canvas=canvas, working=working, grid=grid, palette=palette)
