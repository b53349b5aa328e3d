"""Chunked tile map with positions stored as tile indices plus a metric offset."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import ClassVar, Optional

from .intrinsics import round_to_int
from .vector import V2

_TILE_FORMAT = struct.Struct("<iB")


class TileTexture(IntEnum):
    BLUE_BACKGROUND = 0
    BLUE_BRICK = 1
    GOAL = 2
    BLUE_BACKGROUND_CURSOR = 3


@dataclass(frozen=True)
class TileValue:
    """What a single tile holds."""

    collision_enabled: bool = False
    texture: TileTexture = TileTexture.BLUE_BACKGROUND

    SIZE: ClassVar[int] = _TILE_FORMAT.size

    def pack(self) -> bytes:
        """Serialize as a little-endian 32-bit flag followed by one texture byte."""
        return _TILE_FORMAT.pack(int(self.collision_enabled), int(self.texture))

    @classmethod
    def unpack(cls, data: bytes) -> TileValue:
        """Inverse of :meth:`pack`."""
        if len(data) != cls.SIZE:
            raise ValueError(f"a tile record is {cls.SIZE} bytes, got {len(data)}")
        collision, texture = _TILE_FORMAT.unpack(data)
        return cls(bool(collision), TileTexture(texture))


@dataclass(frozen=True)
class TileMapPosition:
    abs_tile_x: int = 0
    abs_tile_y: int = 0
    abs_tile_z: int = 0
    offset: V2 = field(default_factory=V2)


@dataclass(frozen=True)
class TileMapDifference:
    d_xy: V2
    d_z: float


@dataclass(frozen=True)
class ChunkPosition:
    chunk_x: int
    chunk_y: int
    chunk_z: int
    rel_x: int
    rel_y: int


class TileMap:
    """A grid of square chunks, each allocated the first time a tile in it is set."""

    def __init__(self, chunk_shift, chunk_count_x, chunk_count_y, chunk_count_z, tile_side_in_meters):
        self.chunk_shift = chunk_shift
        self.chunk_mask = (1 << chunk_shift) - 1
        self.chunk_dim = 1 << chunk_shift
        self.chunk_count_x = chunk_count_x
        self.chunk_count_y = chunk_count_y
        self.chunk_count_z = chunk_count_z
        self.tile_side_in_meters = tile_side_in_meters
        self.meters_to_pixels = 0.0
        self._chunks: dict[tuple[int, int, int], list[TileValue]] = {}

    def chunk_position(self, abs_tile_x, abs_tile_y, abs_tile_z) -> ChunkPosition:
        """Split absolute tile coordinates into a chunk index and a tile within it."""
        return ChunkPosition(
            abs_tile_x >> self.chunk_shift,
            abs_tile_y >> self.chunk_shift,
            abs_tile_z,
            abs_tile_x & self.chunk_mask,
            abs_tile_y & self.chunk_mask,
        )

    def _in_bounds(self, chunk_x, chunk_y, chunk_z) -> bool:
        return (
            0 <= chunk_x < self.chunk_count_x
            and 0 <= chunk_y < self.chunk_count_y
            and 0 <= chunk_z < self.chunk_count_z
        )

    def chunk_at(self, chunk_x, chunk_y, chunk_z) -> Optional[list[TileValue]]:
        """Tiles of an allocated chunk, or None if it is outside the map or not yet allocated."""
        if not self._in_bounds(chunk_x, chunk_y, chunk_z):
            return None
        return self._chunks.get((chunk_x, chunk_y, chunk_z))

    def get_tile_value(self, abs_tile_x, abs_tile_y, abs_tile_z) -> TileValue:
        """Tile at the given coordinates; a blank tile where nothing is stored."""
        pos = self.chunk_position(abs_tile_x, abs_tile_y, abs_tile_z)
        tiles = self.chunk_at(pos.chunk_x, pos.chunk_y, pos.chunk_z)
        if tiles is None:
            return TileValue()
        return tiles[pos.rel_y * self.chunk_dim + pos.rel_x]

    def tile_at(self, pos: TileMapPosition) -> TileValue:
        return self.get_tile_value(pos.abs_tile_x, pos.abs_tile_y, pos.abs_tile_z)

    def set_tile_value(self, abs_tile_x, abs_tile_y, abs_tile_z, value: TileValue) -> None:
        """Store a tile, allocating its chunk filled with blank tiles if needed."""
        pos = self.chunk_position(abs_tile_x, abs_tile_y, abs_tile_z)
        if not self._in_bounds(pos.chunk_x, pos.chunk_y, pos.chunk_z):
            raise IndexError(
                f"tile ({abs_tile_x}, {abs_tile_y}, {abs_tile_z}) lies outside the map"
            )
        key = (pos.chunk_x, pos.chunk_y, pos.chunk_z)
        tiles = self._chunks.get(key)
        if tiles is None:
            tiles = [TileValue()] * (self.chunk_dim * self.chunk_dim)
            self._chunks[key] = tiles
        tiles[pos.rel_y * self.chunk_dim + pos.rel_x] = value

    def _recanonicalize_coord(self, tile: int, rel: float) -> tuple[int, float]:
        shift = round_to_int(rel / self.tile_side_in_meters)
        return tile + shift, rel - shift * self.tile_side_in_meters

    def recanonicalize(self, pos: TileMapPosition) -> TileMapPosition:
        """Move whole tiles out of the offset so it stays within half a tile."""
        x, ox = self._recanonicalize_coord(pos.abs_tile_x, pos.offset.x)
        y, oy = self._recanonicalize_coord(pos.abs_tile_y, pos.offset.y)
        return replace(pos, abs_tile_x=x, abs_tile_y=y, offset=V2(ox, oy))

    def offset(self, pos: TileMapPosition, delta: V2) -> TileMapPosition:
        return self.recanonicalize(replace(pos, offset=pos.offset + delta))

    def subtract(self, a: TileMapPosition, b: TileMapPosition) -> TileMapDifference:
        """Metric displacement from ``b`` to ``a``."""
        d_tiles = V2(float(a.abs_tile_x - b.abs_tile_x), float(a.abs_tile_y - b.abs_tile_y))
        d_z = float(a.abs_tile_z - b.abs_tile_z)
        return TileMapDifference(
            self.tile_side_in_meters * d_tiles + (a.offset - b.offset),
            self.tile_side_in_meters * d_z,
        )


def centered_tile_point(abs_tile_x, abs_tile_y, abs_tile_z) -> TileMapPosition:
    return TileMapPosition(abs_tile_x, abs_tile_y, abs_tile_z)


def is_tile_empty(value: TileValue) -> bool:
    """A tile is passable when collision is off."""
    return not value.collision_enabled