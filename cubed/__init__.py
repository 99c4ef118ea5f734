"""A grid-based raycasting first-person game: scene files, rendering, controls, maps and menu."""

__version__ = "0.1.0"