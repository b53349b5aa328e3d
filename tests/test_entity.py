import pytest

from apart import entity as ent
from apart.entity import BallEntity, Entity, TileRange
from apart.tilemap import TileMap, TileTexture, TileValue, centered_tile_point
from apart.vector import V2

SIDE = 1.4
WALL = TileValue(True, TileTexture.BLUE_BRICK)


@pytest.fixture
def tile_map():
    return TileMap(4, 128, 128, 2, SIDE)


def make_player(facing=0):
    return Entity(exists=True, p=centered_tile_point(8, 3, 0), width=1.0, height=0.5,
                  facing_direction=facing)


def test_in_air_checks():
    assert Entity(dp=V2(0.0, 1.0)).is_in_air()
    assert not Entity(dp=V2(1.0, 0.0)).is_in_air()
    assert Entity(dp=V2(0.0, 1.0)).air_collision_check()
    assert not Entity(dp=V2(1.0, 1.0)).air_collision_check()


def test_wall_hit_stops_just_before_wall():
    t = ent.test_wall(1.0, 0.0, 0.0, 2.0, 0.0, 1.0, -1.0, 1.0)
    assert 0.0 <= t < 1.0
    assert 1.0 - 1e-3 < 0.0 + t * 2.0 <= 1.0


def test_wall_misses():
    assert ent.test_wall(1.0, 0.0, 0.0, 0.0, 1.0, 1.0, -1.0, 1.0) is None
    assert ent.test_wall(-1.0, 0.0, 0.0, 2.0, 0.0, 1.0, -1.0, 1.0) is None
    assert ent.test_wall(1.0, 0.0, 5.0, 2.0, 0.0, 1.0, -1.0, 1.0) is None
    assert ent.test_wall(1.0, 0.0, 0.0, 2.0, 0.0, 0.1, -1.0, 1.0) is None


def test_tile_range_covers_both_positions(tile_map):
    player = make_player()
    a = centered_tile_point(10, 4, 0)
    b = centered_tile_point(12, 2, 0)
    r = ent.test_tile_range(a, b, tile_map, player)
    assert r.min_x < 10 and r.max_x > 12
    assert r.min_y < 2 and r.max_y > 4
    assert ent.test_tile_range(b, a, tile_map, player) == r


def test_tile_range_grows_with_size(tile_map):
    a = centered_tile_point(10, 10, 0)
    small = ent.test_tile_range(a, a, tile_map, Entity(width=1.0, height=1.0))
    big = ent.test_tile_range(a, a, tile_map, Entity(width=5.0, height=5.0))
    assert big.min_x < small.min_x and big.max_x > small.max_x
    assert big.min_y < small.min_y and big.max_y > small.max_y


def test_calculate_new_p_at_rest(tile_map):
    player = make_player()
    info = ent.calculate_new_p(tile_map, V2(), player, 0.1)
    assert info.new_p == info.old_p == player.p
    assert player.dp == V2(0.0, 0.0)


def test_calculate_new_p_normalizes_long_input(tile_map):
    a, b = make_player(), make_player()
    info_a = ent.calculate_new_p(tile_map, V2(3.0, 4.0), a, 0.1)
    info_b = ent.calculate_new_p(tile_map, V2(0.6, 0.8), b, 0.1)
    assert a.dp.x == pytest.approx(b.dp.x)
    assert a.dp.y == pytest.approx(b.dp.y)
    diff = tile_map.subtract(info_a.new_p, info_a.old_p)
    assert diff.d_xy.x == pytest.approx(info_a.entity_delta.x)
    assert diff.d_xy.y == pytest.approx(info_b.entity_delta.y)


def test_collide_on_empty_map(tile_map):
    player = make_player()
    r = ent.test_tile_range(player.p, player.p, tile_map, player)
    t_min, normal = ent.collide(r, player, tile_map, V2(0.5, 0.0), 1.0)
    assert t_min == 1.0
    assert normal == V2()


def test_collide_finds_wall(tile_map):
    player = make_player()
    tile_map.set_tile_value(9, 3, 0, WALL)
    r = ent.test_tile_range(player.p, player.p, tile_map, player)
    t_min, normal = ent.collide(r, player, tile_map, V2(1.0, 0.0), 1.0)
    assert 0.0 <= t_min < 1.0
    assert normal.x < 0 and normal.y == 0


def test_collide_rejects_huge_range(tile_map):
    with pytest.raises(ValueError):
        ent.collide(TileRange(0, 40, 0, 0), make_player(), tile_map, V2(), 1.0)


def test_move_player_right_and_left(tile_map):
    player = make_player(facing=3)
    start = player.p
    ent.move_player(tile_map, player, 0.1, V2(1.0, 0.0))
    assert tile_map.subtract(player.p, start).d_xy.x > 0
    assert player.facing_direction == 0

    other = make_player(facing=3)
    ent.move_player(tile_map, other, 0.1, V2(-1.0, 0.0))
    assert tile_map.subtract(other.p, start).d_xy.x < 0
    assert other.facing_direction == 2


def test_move_player_at_rest_keeps_facing(tile_map):
    player = make_player(facing=3)
    start = player.p
    ent.move_player(tile_map, player, 0.1, V2())
    assert player.p == start
    assert player.facing_direction == 3


def test_move_player_stops_at_wall(tile_map):
    player = make_player()
    wall = centered_tile_point(9, 3, 0)
    tile_map.set_tile_value(9, 3, 0, WALL)
    contact = -0.5 * (SIDE + player.width)
    for _ in range(20):
        ent.move_player(tile_map, player, 0.1, V2(1.0, 0.0))
        assert tile_map.subtract(player.p, wall).d_xy.x <= contact + 1e-6
    assert player.dp.x == pytest.approx(0.0)


def test_step_player_moves_one_tile(tile_map):
    player = make_player()
    start = player.p
    ent.step_player(tile_map, player, V2(1.0, 0.0))
    assert player.p.abs_tile_x == start.abs_tile_x + 1
    ent.step_player(tile_map, player, V2(0.0, -1.0))
    assert player.p.abs_tile_y == start.abs_tile_y - 1


def test_step_player_blocked_and_flattened(tile_map):
    player = make_player()
    tile_map.set_tile_value(9, 3, 0, WALL)
    start = player.p
    ent.step_player(tile_map, player, V2(1.0, 0.0))
    assert player.p == start

    high = Entity(p=centered_tile_point(8, 3, 1))
    ent.step_player(tile_map, high, V2(-1.0, 0.0))
    assert high.p.abs_tile_z == 0


def test_move_ball_free_flight(tile_map):
    ball = BallEntity(p=centered_tile_point(8, 3, 0), width=1.0, height=1.0, is_active=True)
    start = ball.p
    ent.move_ball(tile_map, ball, 0.1, V2(0.0, 1.0))
    assert tile_map.subtract(ball.p, start).d_xy.y > 0
    assert ball.ddp == ball.dp


def test_move_ball_bounces_off_wall(tile_map):
    ball = BallEntity(p=centered_tile_point(8, 3, 0), width=1.0, height=1.0, is_active=True)
    tile_map.set_tile_value(9, 3, 0, WALL)
    ent.move_ball(tile_map, ball, 0.1, V2(1.0, 0.0))
    assert ball.dp.x < 0
    assert ball.ddp == ball.dp