"""Software rendering into a 32-bit pixel buffer, and loading of masked BMP images."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Optional

from .intrinsics import find_least_significant_set_bit, round_to_int
from .vector import V2

_BMP_HEADER = struct.Struct("<HIHHIIiiHHIIiiIIIII")
_BI_BITFIELDS = 3
_U32_MASK = 0xFFFFFFFF


@dataclass
class Bitmap:
    """An image of 0xAARRGGBB pixels, stored bottom row first."""

    width: int = 0
    height: int = 0
    pixels: list[int] = field(default_factory=list)


@dataclass
class OffscreenBuffer:
    """A top-down grid of 0xAARRGGBB pixels to draw into."""

    width: int
    height: int
    pixels: Optional[list[int]] = None

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("buffer dimensions must not be negative")
        if self.pixels is None:
            self.pixels = [0] * (self.width * self.height)
        elif len(self.pixels) != self.width * self.height:
            raise ValueError("pixel count does not match buffer dimensions")

    def pixel(self, x: int, y: int) -> int:
        """Pixel at column ``x`` of row ``y``, counted from the top."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) lies outside the buffer")
        return self.pixels[y * self.width + x]


def load_bmp(data: bytes) -> Bitmap:
    """Decode a 32-bit bit-field BMP into a :class:`Bitmap`; empty data gives an empty bitmap."""
    if not data:
        return Bitmap()
    if len(data) < _BMP_HEADER.size:
        raise ValueError("data too short for a BMP header")
    (
        _file_type, _file_size, _reserved1, _reserved2, pixel_offset,
        _header_size, width, height, _planes, _bits_per_pixel, compression,
        _image_size, _horz_res, _vert_res, _colors_used, _colors_important,
        red_mask, green_mask, blue_mask,
    ) = _BMP_HEADER.unpack_from(data)

    if compression != _BI_BITFIELDS:
        raise ValueError(f"unsupported BMP compression {compression}")
    if width < 0 or height < 0:
        raise ValueError("BMP dimensions must not be negative")

    count = width * height
    if pixel_offset + 4 * count > len(data):
        raise ValueError("BMP pixel data is truncated")

    alpha_mask = ~(red_mask | green_mask | blue_mask) & _U32_MASK
    shifts = []
    for name, mask in (("alpha", alpha_mask), ("red", red_mask),
                       ("green", green_mask), ("blue", blue_mask)):
        shift = find_least_significant_set_bit(mask)
        if shift is None:
            raise ValueError(f"BMP has no {name} channel")
        shifts.append(shift)
    a_shift, r_shift, g_shift, b_shift = shifts

    raw = struct.unpack_from(f"<{count}I", data, pixel_offset)
    pixels = [
        (((c >> a_shift) & 0xFF) << 24)
        | (((c >> r_shift) & 0xFF) << 16)
        | (((c >> g_shift) & 0xFF) << 8)
        | ((c >> b_shift) & 0xFF)
        for c in raw
    ]
    return Bitmap(width, height, pixels)


def _blend(source: int, dest: int) -> int:
    if (source >> 24) & 0xFF > 128:
        return source
    a = ((source >> 24) & 0xFF) / 255.0
    channels = []
    for shift in (16, 8, 0):
        s = (source >> shift) & 0xFF
        d = (dest >> shift) & 0xFF
        channels.append(int((1.0 - a) * d + a * s + 0.5))
    r, g, b = channels
    return (r << 16) | (g << 8) | b


def _blit(buffer: OffscreenBuffer, bitmap: Bitmap,
          min_x: int, min_y: int, max_x: int, max_y: int) -> None:
    src_x0 = 0
    if min_x < 0:
        src_x0 = -min_x
        min_x = 0
    src_y0 = 0
    if min_y < 0:
        src_y0 = -min_y
        min_y = 0
    max_x = min(max_x, buffer.width, min_x + bitmap.width - src_x0)
    max_y = min(max_y, buffer.height, min_y + bitmap.height - src_y0)
    span = max_x - min_x
    if span <= 0:
        return

    for row, y in enumerate(range(min_y, max_y)):
        src_start = (bitmap.height - 1 - src_y0 - row) * bitmap.width + src_x0
        source = bitmap.pixels[src_start:src_start + span]
        dest_start = y * buffer.width + min_x
        dest = buffer.pixels[dest_start:dest_start + span]
        buffer.pixels[dest_start:dest_start + span] = [
            _blend(s, d) for s, d in zip(source, dest)
        ]


def draw_bitmap(buffer: OffscreenBuffer, bitmap: Bitmap, x: float, y: float,
                align_x: int = 0, align_y: int = 0) -> None:
    """Blend ``bitmap`` into ``buffer`` with its alignment point at (x, y)."""
    x -= align_x
    y -= align_y
    _blit(buffer, bitmap,
          round_to_int(x), round_to_int(y),
          round_to_int(x + bitmap.width), round_to_int(y + bitmap.height))


def draw_background_tile(buffer: OffscreenBuffer, bitmap: Bitmap, v_min: V2, v_max: V2) -> None:
    """Blend ``bitmap`` into the rectangle from ``v_min`` to ``v_max``."""
    _blit(buffer, bitmap,
          round_to_int(v_min.x), round_to_int(v_min.y),
          round_to_int(v_max.x), round_to_int(v_max.y))


def draw_rectangle(buffer: OffscreenBuffer, v_min: V2, v_max: V2,
                   r: float, g: float, b: float) -> None:
    """Fill a rectangle with a colour given as channel fractions in [0, 1]."""
    min_x = max(round_to_int(v_min.x), 0)
    min_y = max(round_to_int(v_min.y), 0)
    max_x = min(round_to_int(v_max.x), buffer.width)
    max_y = min(round_to_int(v_max.y), buffer.height)

    color = ((round_to_int(r * 255.0) << 16)
             | (round_to_int(g * 255.0) << 8)
             | round_to_int(b * 255.0)) & _U32_MASK
    span = max_x - min_x
    if span <= 0:
        return
    for y in range(min_y, max_y):
        start = y * buffer.width + min_x
        buffer.pixels[start:start + span] = [color] * span


def render_gradient(buffer: OffscreenBuffer, x_offset: int, y_offset: int) -> None:
    """Fill the buffer with a blue-green test gradient."""
    for y in range(buffer.height):
        green = ((y + y_offset) & 0xFF) << 16
        start = y * buffer.width
        buffer.pixels[start:start + buffer.width] = [
            green | ((x + x_offset) & 0xFF) for x in range(buffer.width)
        ]