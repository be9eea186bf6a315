import struct
from datetime import datetime

import pytest

from cshell.resbuf import ResbufError, extract_ring, timestamped_filename

PAYLOAD = b"abcdef"


def ring(head, tail):
    return struct.pack("<HH", head, tail) + PAYLOAD


def test_linear_segment():
    assert extract_ring(ring(7, 4)) == PAYLOAD[:3]


def test_wraps_to_start_of_ring():
    assert extract_ring(ring(5, 8)) == PAYLOAD[4:] + PAYLOAD[:1]


def test_equal_indices_return_whole_ring():
    assert extract_ring(ring(4, 4)) == PAYLOAD


def test_output_never_exceeds_ring_size():
    for head in range(4, 10):
        for tail in range(4, 10):
            result = extract_ring(ring(head, tail))
            assert 1 <= len(result) <= len(PAYLOAD)
            assert set(result) <= set(PAYLOAD)


@pytest.mark.parametrize("head,tail", [(11, 4), (4, 11), (4, 10)])
def test_indices_out_of_range(head, tail):
    with pytest.raises(ResbufError):
        extract_ring(ring(head, tail))


def test_unreachable_write_index():
    with pytest.raises(ResbufError):
        extract_ring(ring(2, 4))


def test_too_small_buffer():
    with pytest.raises(ResbufError):
        extract_ring(b"\x00\x00\x00\x00")


def test_timestamped_filename():
    assert timestamped_filename(7, datetime(2024, 1, 2, 3, 4, 5)) == "7_20240102_030405.txt"


def test_timestamped_filename_defaults_to_now():
    name = timestamped_filename(12)
    assert name.startswith("12_")
    assert name.endswith(".txt")
    assert len(name) == len("12_YYYYmmdd_HHMMSS.txt")