"""
Letter Mosaic Generator
=======================

Rebuild any image out of small tile images (letters, glyphs, icons).
Every tile is reduced to its mean colour; every pixel of the shrunken
source picks the tile whose colour is nearest in RGB, and the tiles are
stamped into a grid at a fixed cell size.
"""

__version__ = "1.0.0"

from letter_mosaic.assembler import (
    AssignmentGrid,
    MosaicResult,
    TileCache,
    assemble,
    classify,
    composite,
    create_mosaic,
)
from letter_mosaic.colour import Colour
from letter_mosaic.config import MosaicConfig
from letter_mosaic.errors import (
    DecodeError,
    DimensionError,
    EmptyPaletteError,
    InputNotFoundError,
    MosaicError,
    TileDecodeError,
)
from letter_mosaic.image_io import compute_working_size, load_and_resize, save_png
from letter_mosaic.matcher import nearest, nearest_indices
from letter_mosaic.palette import Palette, build_palette, mean_colour

__all__ = [
    "AssignmentGrid",
    "Colour",
    "DecodeError",
    "DimensionError",
    "EmptyPaletteError",
    "InputNotFoundError",
    "MosaicConfig",
    "MosaicError",
    "MosaicResult",
    "Palette",
    "TileCache",
    "TileDecodeError",
    "assemble",
    "build_palette",
    "classify",
    "composite",
    "compute_working_size",
    "create_mosaic",
    "load_and_resize",
    "mean_colour",
    "nearest",
    "nearest_indices",
    "save_png",
]
