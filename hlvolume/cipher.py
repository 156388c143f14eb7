"""
xor keystream used for every obfuscated region of the volume

the key starts at 0xf2 and steps by 0x11 after each byte. each region (footer,
file table, each entry) is decoded on its own with a fresh key.
"""

KEY_START = 0xF2
KEY_STEP = 0x11


def keystream(length: int, start_key: int = KEY_START, increment: int = KEY_STEP) -> bytes:
    """return the first `length` key bytes"""
    return bytes((start_key + i * increment) & 0xFF for i in range(length))


def decode(data: bytes, start_key: int = KEY_START, increment: int = KEY_STEP) -> bytes:
    out = bytearray(len(data))
    key = start_key & 0xFF
    for i, b in enumerate(data):
        out[i] = b ^ key
        key = (key + increment) & 0xFF
    return bytes(out)


# xor is its own inverse
encode = decode
