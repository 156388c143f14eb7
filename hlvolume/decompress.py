"""
lz-style expander for compressed volume entries

the stream is a run of literal bytes broken up by an escape byte chosen per
entry. an escape is followed by two bytes lo, hi:

  lo == hi == 0   the escape byte itself, as a literal
  otherwise       back-reference: count = hi >> 2,
                  distance = ((hi << 8) | lo) & 0x3ff,
                  copy count bytes starting distance + 1 bytes back

back-references may overlap the bytes they produce, so the copy has to run
one byte at a time.
"""

from .errors import CorruptionError


def expand(compressed: bytes, escape_byte: int, output_size: int) -> bytes:
    """expand `compressed` into exactly `output_size` bytes"""
    out = bytearray()
    pos = 0
    end = len(compressed)

    while len(out) < output_size:
        if pos >= end:
            raise CorruptionError(
                f"compressed data exhausted after {len(out)} of {output_size} bytes",
                offset=pos,
            )
        b = compressed[pos]
        pos += 1

        if b != escape_byte:
            out.append(b)
            continue

        if pos + 2 > end:
            raise CorruptionError(
                "compressed data ends inside an escape sequence", offset=pos - 1
            )
        lo = compressed[pos]
        hi = compressed[pos + 1]
        pos += 2

        if lo == 0 and hi == 0:
            out.append(escape_byte)
            continue

        count = hi >> 2
        distance = ((hi << 8) | lo) & 0x3FF
        src = len(out) - distance - 1
        if src < 0:
            raise CorruptionError(
                f"back-reference {distance + 1} bytes back with only {len(out)} "
                "bytes of output",
                offset=pos - 3,
            )

        for _ in range(count):
            if len(out) >= output_size:
                break
            out.append(out[src])
            src += 1

    return bytes(out)
