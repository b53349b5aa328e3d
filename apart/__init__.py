"""Tile-map puzzle game core: tile maps, entity movement, software rendering, map files and the per-frame game update."""

__version__ = "0.1.0"