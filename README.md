# apart

The core of a small tile-map puzzle game, as a plain Python library with no
dependencies outside the standard library. You supply a frame buffer, the
input state for each frame, and two callbacks for reading and writing files.
The library advances the game and draws into the buffer.

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `apart.intrinsics` provides integer helpers: `round_to_int` (halves round
  away from zero), `floor_to_int`, `ceil_to_int`, `truncate_to_int`,
  `sign_of`, `safe_truncate_uint64` (raises `ValueError` for values outside
  32 unsigned bits) and `find_least_significant_set_bit` (returns `None` when
  no bit is set).
- `apart.vector` provides the immutable `V2` vector, which supports `+`, `-`,
  unary `-` and scalar `*`. It also has `inner`, `length_sq`, `normalize` and
  `reflect`.
- `apart.tilemap` provides `TileMap`, a grid of square chunks. A chunk is
  allocated on the first `set_tile_value` inside it. Setting a tile outside
  the map raises `IndexError`. Reading an unset tile gives a blank
  `TileValue`. Positions are `TileMapPosition` values: a tile index plus a
  metric offset. `recanonicalize` keeps the offset within half a tile,
  `offset` moves a position, and `subtract` gives a `TileMapDifference`. A
  `TileValue` holds a collision flag and a `TileTexture`. It packs to
  5 bytes: a little-endian 32-bit flag followed by the texture byte.
- `apart.entity` provides `Entity` and `BallEntity`, together with the
  movement routines:
  - `calculate_new_p` integrates one step.
  - `collide` sweeps a move against solid tiles.
  - `move_player` slides along walls and updates the facing direction.
  - `move_ball` bounces off walls.
  - `step_player` moves a whole tile at a time when the target tile is free.
- `apart.render` provides `Bitmap` and `OffscreenBuffer`. Both hold
  0xAARRGGBB pixels. A bitmap is stored bottom row first and a buffer top row
  first. The module also has these functions:
  - `load_bmp` decodes 32-bit bit-field BMP data. Empty data gives an empty
    bitmap.
  - `draw_bitmap` and `draw_background_tile` blend with alpha.
  - `draw_rectangle` fills a rectangle.
  - `render_gradient` draws a test pattern.
- `apart.audio` provides `sine_wave_buffer`. It returns ten cycles of a
  220 Hz half-volume tone at 44100 Hz, as signed 16-bit little-endian mono
  PCM bytes.
- `apart.mapfile` provides `read_map` and `write_map` for the flat map file,
  which holds 100 screens of 33 x 9 tile records. `read_map` requires data of
  exactly `MAP_SIZE` bytes. It places the screens alternately flipping
  between two rows and stepping right. `write_map` writes a single column of
  screens stacked upward.
- `apart.game` provides `Game`, which holds the world, the entities, the
  camera and the tile-editor state. It also defines the input dataclasses
  `GameInput`, `ControllerInput` and `ButtonState`.

## Running frames

`Game(read_file, write_file)` loads its images through
`read_file("BMP/<name>.bmp")` and its level through
`read_file("tilemap_test.map")`. If `read_file` returns empty bytes, the
image is empty or the map stays blank. When a controller's `save` button is
down, the game passes the serialized map to
`write_file("tilemap_test.map", data)`.

```python
from pathlib import Path

from apart.game import Game, GameInput
from apart.render import OffscreenBuffer

assets = Path("assets")

def read_file(name):
    try:
        return (assets / name).read_bytes()
    except FileNotFoundError:
        return b""

def write_file(name, data):
    (assets / name).write_bytes(data)

game = Game(read_file, write_file)
buffer = OffscreenBuffer(960, 540)

frame = GameInput(d_time=1 / 30)
frame.controllers[0].start.ended_down = True   # join as a player
game.update_and_render(buffer, frame)

print(hex(buffer.pixel(0, 0)))
```

Pressing `start` on a controller with no player adds an entity and binds it
to that controller. Each movement press steps the player one tile. When a
`debug_mode` press toggles the editor on, the mouse buttons paint tiles and
`action_left` and `action_right` change the selected tile type. Outside the
editor, the left mouse button launches the ball toward the pointer.

## What it does not do

The package opens no window and plays no sound. It reads no keyboard, mouse
or gamepad, and it has no command to start it. Whatever program embeds it
must fill in `GameInput` every frame, show the `OffscreenBuffer` pixels, and
send the `sine_wave_buffer` bytes to an audio device if it wants the tone.