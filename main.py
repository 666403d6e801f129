#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Drop letter tiles into ``letters/`` and run:

    python main.py my_photo.png

The mosaic is written to ``output.png``. See all options with:

    python -m letter_mosaic.cli --help
"""

from letter_mosaic.cli import app

if __name__ == "__main__":
    app()
