#!/usr/bin/env python3
"""
GIF Server - Main Entry Point
Convert animated GIFs to MP4, OGV or a single PNG frame using ImageMagick and FFmpeg

Run `python main.py --help` for the available commands.
"""

import sys

from gifserver.cli import main

if __name__ == '__main__':
    sys.exit(main())
