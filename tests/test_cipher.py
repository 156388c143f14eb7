import os

from hlvolume import cipher


def test_keystream_start_and_step():
    assert cipher.keystream(4) == bytes([0xF2, 0x03, 0x14, 0x25])


def test_decode_zeros_yields_keystream():
    assert cipher.decode(bytes(300)) == cipher.keystream(300)


def test_keystream_wraps_with_period_256():
    key = cipher.keystream(512)
    assert key[:256] == key[256:]
    assert len(set(key[:256])) == 256


def test_decode_is_its_own_inverse():
    data = os.urandom(1000)
    assert cipher.decode(cipher.decode(data)) == data
    assert cipher.encode(cipher.decode(data)) == data


def test_key_restarts_on_every_call():
    data = b"volume" * 5
    first = cipher.decode(data)
    second = cipher.decode(data)
    assert first == second
    # decoding two regions separately differs from one continuous pass
    assert cipher.decode(data[:7]) + cipher.decode(data[7:]) != first


def test_empty_input():
    assert cipher.decode(b"") == b""


def test_custom_key_parameters():
    assert cipher.decode(b"\x00\x00\x00", start_key=0, increment=1) == b"\x00\x01\x02"
