import struct

from apart.audio import SAMPLES_PER_CYCLE, sine_wave_buffer


def samples():
    data = sine_wave_buffer()
    return list(struct.unpack(f"<{len(data) // 2}h", data))


def test_buffer_length():
    assert len(sine_wave_buffer()) == 4000


def test_first_sample_positive_and_rising():
    s = samples()
    assert 0 < s[0] < s[1]


def test_peak_is_half_volume():
    assert max(samples()) == 16383


def test_wave_is_symmetric():
    s = samples()
    assert max(s) == -min(s)


def test_wave_repeats_every_cycle():
    s = samples()
    assert all(abs(a - b) <= 1 for a, b in zip(s, s[SAMPLES_PER_CYCLE:]))


def test_half_cycle_crosses_zero():
    s = samples()
    assert abs(s[SAMPLES_PER_CYCLE // 2 - 1]) <= 1


def test_quarter_cycle_is_peak():
    s = samples()
    assert s[SAMPLES_PER_CYCLE // 4 - 1] >= max(s) - 1