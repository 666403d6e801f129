"""Image decoding, resizing, PNG encoding and comparison-grid generation."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from letter_mosaic.errors import DecodeError, DimensionError


def decode_image(source: str | Path | bytes, mode: str = "RGBA") -> np.ndarray:
    """Decode a file path or raw bytes into an (H, W, C) uint8 array.

    Raises:
        DecodeError: the data is missing, truncated or not an image.
    """
    label = None if isinstance(source, bytes) else Path(source)
    fp = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        with Image.open(fp) as img:
            img.load()
            return np.array(img.convert(mode), dtype=np.uint8)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(label, str(exc)) from exc


def resize(array: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resample *array* to exactly ``(height, width)`` pixels (Lanczos)."""
    if width < 1 or height < 1:
        msg = f"Cannot resize to {width}x{height}"
        raise DimensionError(msg)
    img = Image.fromarray(array.astype(np.uint8))
    img = img.resize((width, height), Image.LANCZOS)
    return np.array(img, dtype=np.uint8)


def encode_png(array: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(array.astype(np.uint8)).save(buf, format="PNG")
    return buf.getvalue()


def save_png(array: np.ndarray, path: str | Path) -> Path:
    """Encode fully in memory, then write, so failures leave no file behind."""
    data = encode_png(array)
    path = Path(path)
    path.write_bytes(data)
    return path


def enumerate_files(directory: str | Path) -> list[Path]:
    """Regular files directly inside *directory*, sorted by name.

    A missing directory yields an empty list.
    """
    folder = Path(directory)
    if not folder.is_dir():
        return []
    return sorted(f for f in folder.iterdir() if f.is_file())


def compute_working_size(
    original_width: int,
    original_height: int,
    max_width: int,
) -> tuple[int, int]:
    """Compute the working (w, h) for a source image.

    The width is capped at *max_width*; the height is scaled by the same
    factor and floored. Both sides are clamped to a minimum of 1 so very
    wide or very tall sources never collapse to an empty grid.
    """
    if original_width < 1 or original_height < 1:
        msg = f"Source image is {original_width}x{original_height}"
        raise DimensionError(msg)
    if max_width < 1:
        msg = f"max_width must be positive, got {max_width}"
        raise DimensionError(msg)
    w = min(max_width, original_width)
    h = original_height * w // original_width
    return max(1, w), max(1, h)


def load_and_resize(path: str | Path, max_width: int = 200) -> np.ndarray:
    """Load a source image and shrink it to the working resolution.

    Returns:
        (H, W, 3) uint8 array.
    """
    source = decode_image(path, mode="RGB")
    h, w = source.shape[:2]
    new_w, new_h = compute_working_size(w, h, max_width)
    return resize(source, new_w, new_h)


def make_comparison_grid(
    source_path: str | Path,
    working: np.ndarray,
    canvas: np.ndarray,
    output_path: str | Path,
) -> None:
    """Create a 3-panel comparison: Source | Working | Mosaic.

    Every panel takes the mosaic canvas dimensions; the working image is
    upscaled with nearest-neighbour so individual cells stay visible.
    """
    panel_h, panel_w = canvas.shape[:2]
    wh, ww = working.shape[:2]
    label_height = 36

    source = (
        Image.open(source_path)
        .convert("RGB")
        .resize((panel_w, panel_h), Image.LANCZOS)
    )
    working_img = Image.fromarray(working).resize((panel_w, panel_h), Image.NEAREST)
    mosaic_img = Image.fromarray(canvas).convert("RGB")

    panels = [source, working_img, mosaic_img]
    labels = ["Source", f"Working {ww}x{wh}", "Mosaic"]

    gap = 8
    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    grid = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(grid)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels, strict=False)):
        x = i * (panel_w + gap)
        grid.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel_w - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    grid.save(output_path)
