"""Reading and writing of the flat tile-map file of 100 screens of 33 x 9 tiles."""

from __future__ import annotations

from collections.abc import Iterator

from .tilemap import TileMap, TileValue

SCREEN_COUNT = 100
TILES_PER_WIDTH = 33
TILES_PER_HEIGHT = 9
MAP_SIZE = SCREEN_COUNT * TILES_PER_WIDTH * TILES_PER_HEIGHT * TileValue.SIZE


def _load_origins() -> Iterator[tuple[int, int]]:
    """Screen positions used when loading: alternately flip up/down and step right."""
    screen_x = screen_y = 0
    flip = True
    for _ in range(SCREEN_COUNT):
        yield screen_x, screen_y
        if flip:
            screen_y = 0 if screen_y else 1
        else:
            screen_x += 1
        flip = not flip


def _save_origins() -> Iterator[tuple[int, int]]:
    """Screen positions used when saving: a single column stacked upward."""
    for screen_y in range(SCREEN_COUNT):
        yield 0, screen_y


def _tile_coords(origins: Iterator[tuple[int, int]]) -> Iterator[tuple[int, int]]:
    for screen_x, screen_y in origins:
        for tile_y in range(TILES_PER_HEIGHT):
            for tile_x in range(TILES_PER_WIDTH):
                yield (screen_x * TILES_PER_WIDTH + tile_x,
                       screen_y * TILES_PER_HEIGHT + tile_y)


def read_map(tile_map: TileMap, data: bytes) -> None:
    """Store every tile record of ``data`` into ``tile_map`` at layer 0."""
    if len(data) != MAP_SIZE:
        raise ValueError(f"a map file is {MAP_SIZE} bytes, got {len(data)}")
    size = TileValue.SIZE
    records = (data[start:start + size] for start in range(0, len(data), size))
    for (x, y), record in zip(_tile_coords(_load_origins()), records):
        tile_map.set_tile_value(x, y, 0, TileValue.unpack(record))


def write_map(tile_map: TileMap) -> bytes:
    """Serialize the saved region of layer 0 of ``tile_map``."""
    return b"".join(
        tile_map.get_tile_value(x, y, 0).pack()
        for x, y in _tile_coords(_save_origins())
    )