"""Entities and their movement and collision against the tile map."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .intrinsics import ceil_to_int
from .tilemap import TileMap, TileMapPosition, centered_tile_point, is_tile_empty
from .vector import V2, inner, length_sq, reflect

_PLAYER_SPEED = 90.0
_DRAG = 7.0
_WALL_EPSILON = 0.0001
_MAX_ITERATIONS = 4
_MAX_TILE_SPAN = 32


@dataclass
class Entity:
    exists: bool = False
    p: TileMapPosition = field(default_factory=TileMapPosition)
    facing_direction: int = 0
    dp: V2 = field(default_factory=V2)
    width: float = 0.0
    height: float = 0.0
    can_jump: bool = False
    frames_held: int = 0
    in_air: bool = False
    bitmap: Any = None
    speed: float = 0.0

    def is_in_air(self) -> bool:
        return self.dp.y != 0.0

    def air_collision_check(self) -> bool:
        return self.dp.y != 0.0 and self.dp.x == 0.0


@dataclass
class BallEntity(Entity):
    ball_bitmap: Any = None
    is_active: bool = False
    ddp: V2 = field(default_factory=V2)


@dataclass(frozen=True)
class MovementCalculation:
    new_p: TileMapPosition
    old_p: TileMapPosition
    entity_delta: V2


@dataclass(frozen=True)
class TileRange:
    min_x: int
    max_x: int
    min_y: int
    max_y: int


def test_wall(wall_x, rel_x, rel_y, delta_x, delta_y, t_min, min_y, max_y) -> Optional[float]:
    """Return the reduced time of impact with a wall line, or None if it is not hit sooner."""
    if delta_x == 0.0:
        return None
    t = (wall_x - rel_x) / delta_x
    y = rel_y + t * delta_y
    if t >= 0.0 and t_min > t and min_y <= y <= max_y:
        return max(0.0, t - _WALL_EPSILON)
    return None


def test_tile_range(old_p, new_p, tile_map: TileMap, entity: Entity) -> TileRange:
    """Tiles that a move from ``old_p`` to ``new_p`` may touch."""
    w = ceil_to_int(entity.width / tile_map.tile_side_in_meters)
    h = ceil_to_int(entity.height / tile_map.tile_side_in_meters)
    return TileRange(
        min(old_p.abs_tile_x, new_p.abs_tile_x) - w,
        max(old_p.abs_tile_x, new_p.abs_tile_x) + w,
        min(old_p.abs_tile_y, new_p.abs_tile_y) - h,
        max(old_p.abs_tile_y, new_p.abs_tile_y) + h,
    )


def calculate_new_p(tile_map: TileMap, ddp: V2, entity: Entity, dt: float) -> MovementCalculation:
    """Integrate acceleration for one step; updates ``entity.dp``."""
    length = length_sq(ddp)
    if length > 1.0:
        ddp = ddp * (1.0 / length ** 0.5)
    ddp = ddp * _PLAYER_SPEED
    ddp = ddp + -_DRAG * entity.dp

    old_p = entity.p
    delta = 0.5 * ddp * (dt * dt) + entity.dp * dt
    entity.dp = ddp * dt + entity.dp
    return MovementCalculation(tile_map.offset(old_p, delta), old_p, delta)


def collide(tile_range: TileRange, entity: Entity, tile_map: TileMap, delta: V2, t_min: float):
    """Sweep ``delta`` against solid tiles; return the new ``t_min`` and the wall normal hit."""
    if tile_range.max_x - tile_range.min_x >= _MAX_TILE_SPAN or \
            tile_range.max_y - tile_range.min_y >= _MAX_TILE_SPAN:
        raise ValueError("tile range too large for collision test")

    normal = V2()
    z = entity.p.abs_tile_z
    for y in range(tile_range.min_y, tile_range.max_y + 1):
        for x in range(tile_range.min_x, tile_range.max_x + 1):
            tile_p = centered_tile_point(x, y, z)
            if is_tile_empty(tile_map.tile_at(tile_p)):
                continue
            half_w = 0.5 * (tile_map.tile_side_in_meters + entity.width)
            half_h = 0.5 * (tile_map.tile_side_in_meters + entity.height)
            rel = tile_map.subtract(entity.p, tile_p).d_xy

            walls = (
                (-half_w, rel.x, rel.y, delta.x, delta.y, -half_h, half_h, V2(-1.0, 0.0)),
                (half_w, rel.x, rel.y, delta.x, delta.y, -half_h, half_h, V2(1.0, 0.0)),
                (-half_h, rel.y, rel.x, delta.y, delta.x, -half_w, half_w, V2(0.0, -1.0)),
                (half_h, rel.y, rel.x, delta.y, delta.x, -half_w, half_w, V2(0.0, 1.0)),
            )
            for wall, r_a, r_b, d_a, d_b, lo, hi, wall_normal in walls:
                hit = test_wall(wall, r_a, r_b, d_a, d_b, t_min, lo, hi)
                if hit is not None:
                    t_min = hit
                    normal = wall_normal
    return t_min, normal


def move_ball(tile_map: TileMap, ball: BallEntity, dt: float, ddp: V2) -> None:
    """Advance a ball one step, bouncing it off walls."""
    info = calculate_new_p(tile_map, ddp, ball, dt)
    tile_range = test_tile_range(info.old_p, info.new_p, tile_map, ball)
    delta = info.entity_delta

    t_remaining = 1.0
    for _ in range(_MAX_ITERATIONS):
        if t_remaining <= 0.0:
            break
        t_min, normal = collide(tile_range, ball, tile_map, delta, 1.0)
        ball.p = tile_map.offset(ball.p, t_min * delta)
        ball.dp = reflect(ball.dp, normal)
        delta = delta - inner(delta, normal) * normal
        t_remaining -= t_min
    ball.ddp = ball.dp


def step_player(tile_map: TileMap, entity: Entity, ddp: V2) -> None:
    """Move the entity one whole tile in the direction of ``ddp`` if that tile is free."""
    projected = replace(entity.p, abs_tile_z=0)
    if ddp.x == 1.0:
        projected = replace(projected, abs_tile_x=projected.abs_tile_x + 1)
    elif ddp.x == -1.0:
        projected = replace(projected, abs_tile_x=projected.abs_tile_x - 1)
    elif ddp.y == 1.0:
        projected = replace(projected, abs_tile_y=projected.abs_tile_y + 1)
    elif ddp.y == -1.0:
        projected = replace(projected, abs_tile_y=projected.abs_tile_y - 1)

    target = centered_tile_point(projected.abs_tile_x, projected.abs_tile_y, projected.abs_tile_z)
    if is_tile_empty(tile_map.tile_at(target)):
        entity.p = projected


def move_player(tile_map: TileMap, entity: Entity, dt: float, ddp: V2) -> None:
    """Advance an entity one step, sliding along walls, and update its facing."""
    info = calculate_new_p(tile_map, ddp, entity, dt)
    tile_range = test_tile_range(info.old_p, info.new_p, tile_map, entity)
    delta = info.entity_delta

    t_remaining = 1.0
    for _ in range(_MAX_ITERATIONS):
        if t_remaining <= 0.0:
            break
        t_min, normal = collide(tile_range, entity, tile_map, delta, 1.0)
        entity.p = tile_map.offset(entity.p, t_min * delta)
        entity.dp = entity.dp - inner(entity.dp, normal) * normal
        delta = delta - inner(delta, normal) * normal
        t_remaining -= t_min

    dp = entity.dp
    if dp.x == 0 and dp.y == 0:
        return
    if abs(dp.x) > abs(dp.y):
        entity.facing_direction = 0 if dp.x > 0 else 2
    else:
        entity.facing_direction = 1 if dp.x > 0 else 3