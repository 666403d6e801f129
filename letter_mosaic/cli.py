"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from letter_mosaic.assembler import (
    MosaicResult,
    TileCache,
    classify,
    composite,
)
from letter_mosaic.config import MosaicConfig
from letter_mosaic.errors import MosaicError
from letter_mosaic.image_io import load_and_resize, make_comparison_grid, save_png
from letter_mosaic.palette import build_palette

app = typer.Typer(
    name="letter-mosaic",
    help="Rebuild an image as a mosaic of letter tiles.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
    )


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


@app.command()
def main(
    source: Path | None = typer.Argument(None, help="Path to the source image"),
    tile_dir: Path = typer.Option(
        _DEFAULTS.tile_dir, "--tiles", "-t", help="Folder with letter tile images",
    ),
    output: Path = typer.Option(
        _DEFAULTS.output_path, "--output", "-o", help="Where to write the mosaic PNG",
    ),
    max_width: int = typer.Option(
        _DEFAULTS.max_width, "--max-width", "-m",
        help="Working width cap (height keeps the aspect ratio)",
    ),
    cell_size: int = typer.Option(
        _DEFAULTS.cell_size, "--cell-size", "-c", help="Tile size in output pixels",
    ),
    workers: int = typer.Option(
        _DEFAULTS.workers, "--workers", "-w", help="Threads for averaging and matching",
    ),
    comparison: Path | None = typer.Option(
        None, "--comparison", help="Also save a Source | Working | Mosaic preview",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Rebuild SOURCE out of the tiles in the tile folder."""
    if source is None:
        console.print("No image path provided")
        raise typer.Exit(0)
    if not source.exists():
        console.print(f"[red]Couldn't find image at {escape(str(source))}[/red]")
        raise typer.Exit(0)

    _setup_logging(verbose)
    logger = logging.getLogger("letter_mosaic")

    cfg = MosaicConfig(
        max_width=max_width,
        cell_size=cell_size,
        output_path=output,
        tile_dir=tile_dir,
        workers=workers,
    )

    console.print(Panel.fit(
        f"[bold]LETTER MOSAIC[/bold]\n"
        f"Source: {source.name}  |  Tiles: {cfg.tile_dir}\n"
        f"Max width: {cfg.max_width}  |  Cell size: {cfg.cell_size}"
        f"  |  Workers: {cfg.workers}",
        border_style="cyan",
    ))
    t_total = time.perf_counter()

    try:
        cfg.validate()

        console.rule("[bold cyan]Step 1: Build colour palette[/bold cyan]")
        palette = build_palette(cfg.tile_dir, workers=cfg.workers)
        console.print(f"  [green]✓[/green] {len(palette)} tile colours")

        console.rule("[bold cyan]Step 2: Find most suitable tiles[/bold cyan]")
        working = load_and_resize(source, cfg.max_width)
        h, w = working.shape[:2]
        grid = classify(working, palette, workers=cfg.workers)
        used = len(set(grid.indices.ravel().tolist()))
        console.print(f"  [green]✓[/green] {w}x{h} cells, {used} distinct tiles")

        console.rule("[bold cyan]Step 3: Create output image[/bold cyan]")
        console.print("  This may take a while …")
        canvas = composite(grid, cfg.cell_size, TileCache())
        cfg.output_path.parent.mkdir(parents=True, exist_ok=True)
        save_png(canvas, cfg.output_path)

        if comparison is not None:
            comparison.parent.mkdir(parents=True, exist_ok=True)
            make_comparison_grid(source, working, canvas, comparison)
            logger.info("Comparison saved to %s", comparison)
    except (MosaicError, OSError, ValueError) as exc:
        logger.debug("Run aborted", exc_info=True)
        console.print(f"[red]✗ {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    err = MosaicResult(canvas, working, grid, palette).mean_error()
    elapsed = time.perf_counter() - t_total

    console.print(Panel.fit(
        f"[bold green]Done![/bold green] Saved to [bold]{cfg.output_path}[/bold]\n"
        f"[dim]{w * cfg.cell_size}x{h * cfg.cell_size} px  error={err:.1f}"
        f"  time={elapsed:.1f}s[/dim]",
        border_style="green",
    ))


if __name__ == "__main__":
    app()
