"""Game state, per-frame input handling, simulation and drawing."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from .entity import BallEntity, Entity, move_ball, step_player
from .mapfile import read_map, write_map
from .render import Bitmap, OffscreenBuffer, draw_background_tile, draw_bitmap, load_bmp
from .tilemap import TileMap, TileMapPosition, TileTexture, TileValue
from .vector import V2, length_sq, normalize

MAP_FILENAME = "tilemap_test.map"
MAX_ENTITIES = 256
CONTROLLER_COUNT = 5
MOUSE_BUTTON_COUNT = 5
TILE_SIDE_IN_PIXELS = 30
SCROLL_TILES = 18

ReadFile = Callable[[str], bytes]
WriteFile = Callable[[str, bytes], None]


@dataclass
class ButtonState:
    half_transition_count: int = 0
    ended_down: bool = False
    was_down: bool = False
    started: bool = False


@dataclass
class ControllerInput:
    is_analog: bool = False
    is_connected: bool = False
    stick_average_x: float = 0.0
    stick_average_y: float = 0.0
    move_up: ButtonState = field(default_factory=ButtonState)
    move_down: ButtonState = field(default_factory=ButtonState)
    move_right: ButtonState = field(default_factory=ButtonState)
    move_left: ButtonState = field(default_factory=ButtonState)
    action_up: ButtonState = field(default_factory=ButtonState)
    action_down: ButtonState = field(default_factory=ButtonState)
    action_left: ButtonState = field(default_factory=ButtonState)
    action_right: ButtonState = field(default_factory=ButtonState)
    left_shoulder: ButtonState = field(default_factory=ButtonState)
    right_shoulder: ButtonState = field(default_factory=ButtonState)
    back: ButtonState = field(default_factory=ButtonState)
    start: ButtonState = field(default_factory=ButtonState)
    save: ButtonState = field(default_factory=ButtonState)
    scroll_up: ButtonState = field(default_factory=ButtonState)
    scroll_down: ButtonState = field(default_factory=ButtonState)
    debug_mode: ButtonState = field(default_factory=ButtonState)


@dataclass
class GameInput:
    mouse_buttons: list[ButtonState] = field(
        default_factory=lambda: [ButtonState() for _ in range(MOUSE_BUTTON_COUNT)]
    )
    mouse_x: int = 0
    mouse_y: int = 0
    mouse_z: int = 0
    d_time: float = 0.0
    controllers: list[ControllerInput] = field(
        default_factory=lambda: [ControllerInput() for _ in range(CONTROLLER_COUNT)]
    )


@dataclass
class PlayerBitmap:
    align_x: int = 0
    align_y: int = 0
    bitmap: Bitmap = field(default_factory=Bitmap)


@dataclass
class BackgroundTile:
    align_x: int = 0
    align_y: int = 0
    bitmap: Bitmap = field(default_factory=Bitmap)
    value: TileValue = field(default_factory=TileValue)


@dataclass
class InputTimer:
    time_held: float = 0.0
    max_held_time: float = 0.0


class Game:
    """The whole game: world, entities, editor state and the per-frame update."""

    def __init__(self, read_file: ReadFile, write_file: WriteFile):
        self._read_file = read_file
        self._write_file = write_file

        def bmp(name: str) -> Bitmap:
            return load_bmp(read_file(f"BMP/{name}.bmp"))

        self.background_tiles = [
            BackgroundTile(bitmap=bmp("blue_background"),
                           value=TileValue(True, TileTexture.BLUE_BACKGROUND)),
            BackgroundTile(bitmap=bmp("blue_brick_wall"),
                           value=TileValue(False, TileTexture.BLUE_BRICK)),
            BackgroundTile(bitmap=bmp("goal_wall"),
                           value=TileValue(False, TileTexture.GOAL)),
            BackgroundTile(bitmap=bmp("blue_background_cursor"),
                           value=TileValue(False, TileTexture.BLUE_BACKGROUND_CURSOR)),
        ]
        self.selected_tile_index = 1
        self.player_bitmaps = [
            PlayerBitmap(15, 23, bmp("player_face_forward")),
            PlayerBitmap(),
        ]

        self.entities = [Entity() for _ in range(MAX_ENTITIES)]
        self.entity_count = 0
        self.player_index_for_controller = [0] * CONTROLLER_COUNT
        self.camera_following_entity_index = 0
        self.add_entity()

        self.camera_p = TileMapPosition(34 // 2, 9, 0)

        self.player_animations = [PlayerBitmap(15, 23, bmp("player_idle"))] + [
            PlayerBitmap() for _ in range(3)
        ]
        self.current_player_bitmap = self.player_animations[0]

        self.tile_map = TileMap(4, 128, 128, 2, 1.4)

        self.ball = BallEntity(exists=True, width=5, height=5, bitmap=bmp("Ball"))

        self.debug_indicator_bitmap = bmp("debug_indicator")
        self.debug_mode = False
        self.mouse_cursor_saved = bmp("mouse_cursor")
        self.mouse_cursor_bitmap = self.mouse_cursor_saved

        self.input_timer = InputTimer(max_held_time=6.0)
        self.input_previous_frame = False

        map_data = read_file(MAP_FILENAME)
        if map_data:
            read_map(self.tile_map, map_data)

        self.camera_chunk_y = SCROLL_TILES
        self.prev_camera_chunk_y = SCROLL_TILES
        self.camera_following_entity = True

    # Entities

    def add_entity(self) -> int:
        """Reserve the next entity slot and return its index."""
        if self.entity_count + 1 >= MAX_ENTITIES:
            raise OverflowError("no free entity slots")
        index = self.entity_count
        self.entity_count += 1
        return index

    def get_entity(self, index: int) -> Optional[Entity]:
        """Entity at ``index``; slot 0 and out-of-range indices give None."""
        if 0 < index < MAX_ENTITIES:
            return self.entities[index]
        return None

    def initialize_player(self, index: int) -> None:
        entity = self.get_entity(index)
        if entity is None:
            raise IndexError(f"no entity slot {index}")
        entity.exists = True
        entity.p = TileMapPosition(17 // 2, 3, 0, V2(0.0, 0.0))
        entity.height = 0.5
        entity.width = 1.0
        entity.can_jump = True
        if self.get_entity(self.camera_following_entity_index) is None:
            self.camera_following_entity_index = index

    # Mouse and editor

    def world_location_from_mouse(self, game_input: GameInput,
                                  buffer: OffscreenBuffer) -> TileMapPosition:
        """Tile under the mouse pointer, measured from the bottom-left of the screen."""
        x = -(-game_input.mouse_x // TILE_SIDE_IN_PIXELS)
        y = -(-(buffer.height - game_input.mouse_y) // TILE_SIDE_IN_PIXELS)
        pos = self.tile_map.recanonicalize(TileMapPosition(x, y, 0))
        return replace(pos, abs_tile_y=pos.abs_tile_y + self.camera_chunk_y - SCROLL_TILES)

    def set_tile_from_mouse(self, game_input: GameInput, buffer: OffscreenBuffer,
                            value: TileValue) -> None:
        """Place ``value`` on the tile under the pointer if it is inside the buffer."""
        if 0 <= game_input.mouse_x <= buffer.width and 0 <= game_input.mouse_y <= buffer.height:
            pos = self.world_location_from_mouse(game_input, buffer)
            self.tile_map.set_tile_value(pos.abs_tile_x, pos.abs_tile_y, pos.abs_tile_z, value)

    def cursor_bitmap(self) -> Bitmap:
        """Bitmap to show as the pointer for the currently selected tile."""
        texture = self.background_tiles[self.selected_tile_index].value.texture
        if texture == TileTexture.BLUE_BACKGROUND:
            return self.background_tiles[3].bitmap
        if texture in (TileTexture.BLUE_BRICK, TileTexture.GOAL):
            return self.background_tiles[self.selected_tile_index].bitmap
        return self.mouse_cursor_saved

    # Frame update

    def _press(self, button: ButtonState) -> bool:
        """True when ``button`` fires this frame; releases the held-input latch otherwise."""
        if button.ended_down and not self.input_previous_frame:
            self.input_previous_frame = True
            return True
        if button.was_down:
            self.input_previous_frame = False
        return False

    def _handle_controller(self, controller: ControllerInput, entity: Entity,
                           game_input: GameInput, buffer: OffscreenBuffer) -> None:
        if controller.is_analog:
            return

        if controller.scroll_up.ended_down and not controller.scroll_up.started:
            self.camera_following_entity = False
            self.camera_p = replace(self.camera_p,
                                    abs_tile_y=self.camera_p.abs_tile_y + SCROLL_TILES)
            self.camera_chunk_y += SCROLL_TILES
            controller.scroll_up.started = True

        if controller.scroll_down.ended_down and not controller.scroll_down.started:
            if self.camera_p.abs_tile_y > SCROLL_TILES:
                self.camera_following_entity = False
                self.camera_p = replace(self.camera_p,
                                        abs_tile_y=self.camera_p.abs_tile_y - SCROLL_TILES)
                self.camera_chunk_y -= SCROLL_TILES
            controller.scroll_down.started = True

        if controller.debug_mode.was_down:
            self.debug_mode = not self.debug_mode

        if controller.save.ended_down:
            self._write_file(MAP_FILENAME, write_map(self.tile_map))

        if self.debug_mode:
            texture = self.background_tiles[self.selected_tile_index].value.texture
            if game_input.mouse_buttons[0].ended_down:
                self.set_tile_from_mouse(game_input, buffer, TileValue(True, texture))
            if game_input.mouse_buttons[1].ended_down:
                self.set_tile_from_mouse(game_input, buffer, TileValue(False, texture))
            if self._press(controller.action_left):
                self.selected_tile_index += 1
                if self.selected_tile_index > len(self.background_tiles) - 1:
                    self.selected_tile_index = 0
            if self._press(controller.action_right):
                self.selected_tile_index = max(self.selected_tile_index - 1, 0)
        elif game_input.mouse_buttons[0].ended_down and not self.ball.is_active:
            self.ball.is_active = True
            self.ball.p = entity.p
            mouse_pos = self.world_location_from_mouse(game_input, buffer)
            diff = self.tile_map.subtract(mouse_pos, entity.p).d_xy
            self.ball.ddp = normalize(diff) if length_sq(diff) > 0.0 else V2()

        if self.input_previous_frame:
            self.input_timer.time_held += 1
            if self.input_timer.time_held >= self.input_timer.max_held_time:
                self.input_previous_frame = False
                self.input_timer.time_held = 0.0

        ddp_x = ddp_y = 0.0
        if self._press(controller.move_left):
            ddp_x = -1.0
            self.camera_following_entity = True
        if self._press(controller.move_right):
            ddp_x = 1.0
            self.camera_following_entity = True
        if self._press(controller.move_up):
            ddp_y = 1.0
        if self._press(controller.move_down):
            ddp_y = -1.0

        if not self.input_previous_frame:
            self.input_timer.time_held = 0.0

        step_player(self.tile_map, entity, V2(ddp_x, ddp_y))

    def _follow_camera(self) -> None:
        target = self.get_entity(self.camera_following_entity_index)
        if target is None:
            return
        diff = self.tile_map.subtract(target.p, self.camera_p).d_xy
        side = self.tile_map.tile_side_in_meters
        x, y = self.camera_p.abs_tile_x, self.camera_p.abs_tile_y
        if diff.x > 18.0 * side:
            x += 33
        elif diff.x < -18.0 * side:
            x -= 33
        if diff.y > 9.0 * side:
            y += 17
        elif diff.y < -9.0 * side:
            y -= 17
        self.camera_p = replace(self.camera_p, abs_tile_x=x, abs_tile_y=y)

    def update_and_render(self, buffer: OffscreenBuffer, game_input: GameInput) -> None:
        """Process one frame of input, advance the world and draw it into ``buffer``."""
        meters_to_pixels = TILE_SIDE_IN_PIXELS / self.tile_map.tile_side_in_meters
        self.tile_map.meters_to_pixels = meters_to_pixels

        for index, controller in enumerate(game_input.controllers):
            entity = self.get_entity(self.player_index_for_controller[index])
            if entity is not None:
                self._handle_controller(controller, entity, game_input, buffer)
            elif controller.start.ended_down:
                new_index = self.add_entity()
                self.initialize_player(new_index)
                self.player_index_for_controller[index] = new_index

        if self.ball.is_active:
            move_ball(self.tile_map, self.ball, game_input.d_time, self.ball.ddp)

        self._follow_camera()

        center_x = 0.5 * buffer.width
        center_y = 0.5 * buffer.height
        cam = self.camera_p
        half = V2(0.5 * TILE_SIDE_IN_PIXELS, 0.5 * TILE_SIDE_IN_PIXELS)
        for rel_row in range(-10, 10):
            for rel_column in range(-20, 20):
                tile = self.tile_map.get_tile_value(cam.abs_tile_x + rel_column,
                                                    cam.abs_tile_y + rel_row, cam.abs_tile_z)
                center = V2(
                    center_x - meters_to_pixels * cam.offset.x + rel_column * TILE_SIDE_IN_PIXELS,
                    center_y + meters_to_pixels * cam.offset.y - rel_row * TILE_SIDE_IN_PIXELS,
                )
                draw_background_tile(buffer, self.background_tiles[tile.texture].bitmap,
                                     center - half, center + half)

        for entity in self.entities[:self.entity_count]:
            if not entity.exists:
                continue
            diff = self.tile_map.subtract(entity.p, self.camera_p).d_xy
            ground_x = center_x + meters_to_pixels * diff.x
            ground_y = center_y - meters_to_pixels * diff.y
            player = self.current_player_bitmap
            draw_bitmap(buffer, player.bitmap, ground_x, ground_y, player.align_x, player.align_y)
            if self.ball.is_active:
                ball_diff = self.tile_map.subtract(self.ball.p, self.camera_p).d_xy
                draw_bitmap(buffer, self.ball.bitmap,
                            center_x + meters_to_pixels * ball_diff.x,
                            center_y - meters_to_pixels * ball_diff.y, 0, 0)

        if self.debug_mode:
            draw_bitmap(buffer, self.debug_indicator_bitmap, 0, 0, 0, 0)
            self.mouse_cursor_bitmap = self.cursor_bitmap()
        else:
            draw_bitmap(buffer, self.background_tiles[0].bitmap, 0, 0, 0, 0)
            self.mouse_cursor_bitmap = self.mouse_cursor_saved

        draw_bitmap(buffer, self.mouse_cursor_bitmap,
                    float(game_input.mouse_x), float(game_input.mouse_y), 20, 20)