"""Exception hierarchy for a mosaic run."""

from __future__ import annotations

from pathlib import Path


class MosaicError(Exception):
    """Base class for every error raised by letter_mosaic."""


class InputNotFoundError(MosaicError):
    """The source image path does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Couldn't find image at {self.path}")


class EmptyPaletteError(MosaicError):
    """No tile produced a palette entry."""


class DecodeError(MosaicError):
    """An image could not be decoded."""

    def __init__(self, source: str | Path | None, reason: str = "") -> None:
        self.source = source
        label = str(source) if source is not None else "<bytes>"
        msg = f"Could not decode image {label}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class TileDecodeError(DecodeError):
    """A catalogued tile became unreadable while compositing."""

    def __init__(self, tile: Path, reason: str = "") -> None:
        self.tile = tile
        super().__init__(tile, reason)


class DimensionError(MosaicError):
    """A width, height or cell size is not a positive integer."""
