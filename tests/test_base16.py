import pytest

from cshell.base16 import Base16Error, decode, encode


def test_encode_pins_lowercase():
    assert encode(b"\x00\xab\xff") == "00abff"


def test_decode_accepts_uppercase():
    assert decode("ABff") == b"\xab\xff"


def test_empty():
    assert encode(b"") == ""
    assert decode("") == b""


@pytest.mark.parametrize("raw", [b"x", bytes(range(256)), b"hello world"])
def test_round_trip(raw):
    assert decode(encode(raw)) == raw


def test_odd_length_rejected():
    with pytest.raises(Base16Error):
        decode("abc")


@pytest.mark.parametrize("bad", ["zz", "0g", "  ", "-1"])
def test_invalid_byte_rejected(bad):
    with pytest.raises(Base16Error):
        decode(bad)