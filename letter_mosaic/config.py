"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from letter_mosaic.errors import DimensionError


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for a mosaic run.

    Attributes:
        max_width:   Upper bound on the working width (height follows the
                     aspect ratio).
        cell_size:   Each working pixel becomes an n x n tile in the output.
        workers:     Thread count for palette averaging and classification.
        tile_dir:    Folder scanned for tile images.
        output_path: Where the finished mosaic is written.
    """

    # Image scaling
    max_width: int = 200

    # Output
    cell_size: int = 10
    output_path: Path = field(default_factory=lambda: Path("output.png"))

    # Tiles
    tile_dir: Path = field(default_factory=lambda: Path("letters"))

    # Parallelism (results never depend on it)
    workers: int = 1

    def validate(self) -> MosaicConfig:
        if self.max_width < 1:
            msg = f"max_width must be positive, got {self.max_width}"
            raise DimensionError(msg)
        if self.cell_size < 1:
            msg = f"cell_size must be positive, got {self.cell_size}"
            raise DimensionError(msg)
        if self.workers < 1:
            msg = f"workers must be at least 1, got {self.workers}"
            raise ValueError(msg)
        return self
