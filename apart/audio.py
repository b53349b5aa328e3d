"""Generation of the test tone played by the game."""

from __future__ import annotations

import math
import struct
from itertools import accumulate, repeat

BITS_PER_SAMPLE = 16
SAMPLES_PER_SEC = 44100
AUDIO_BUFFER_SIZE_CYCLES = 10
CYCLES_PER_SEC = 220.0

SAMPLES_PER_CYCLE = int(SAMPLES_PER_SEC / CYCLES_PER_SEC)
AUDIO_BUFFER_SIZE_SAMPLES = SAMPLES_PER_CYCLE * AUDIO_BUFFER_SIZE_CYCLES
AUDIO_BUFFER_SIZE_BYTES = AUDIO_BUFFER_SIZE_SAMPLES * BITS_PER_SAMPLE // 8

_INT16_MAX = 32767
_VOLUME = 0.5


def sine_wave_buffer() -> bytes:
    """Ten cycles of a half-volume sine tone as little-endian signed 16-bit mono PCM."""
    step = 2 * math.pi / SAMPLES_PER_CYCLE
    phases = accumulate(repeat(step, AUDIO_BUFFER_SIZE_SAMPLES))
    samples = [int(math.sin(phase) * _INT16_MAX * _VOLUME) for phase in phases]
    return struct.pack(f"<{len(samples)}h", *samples)