import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple

from . import cipher
from .errors import FormatError, IoError

log = logging.getLogger(__name__)

VOLUME_MAGIC = b"volume"
FOOTER_SIZE = 16


@dataclass(frozen=True)
class volume_footer:
    """16-byte trailer at the very end of the container

    layout (little-endian):
      [0x00:6]  magic, "volume"
      [0x06:4]  reserved
      [0x0a:2]  entry count
      [0x0c:4]  distance from end of file back to the data base
    """

    magic: bytes
    reserved: int
    entry_count: int
    data_base_delta: int

    SIZE = FOOTER_SIZE
    FORMAT = "<6sIHI"

    @classmethod
    def parse(cls, data: bytes) -> "volume_footer":
        """parse an already decoded footer"""
        if len(data) != cls.SIZE:
            raise FormatError(f"footer must be {cls.SIZE} bytes, got {len(data)}")
        magic, reserved, entry_count, delta = struct.unpack(cls.FORMAT, data)
        return cls(magic, reserved, entry_count, delta)

    def data_base(self, container_length: int) -> int:
        return container_length - self.data_base_delta


def source_length(source: BinaryIO) -> int:
    """total length of a seekable source"""
    try:
        return source.seek(0, 2)
    except (OSError, ValueError) as e:
        raise IoError(f"cannot determine container length: {e}") from e


def read_exact(source: BinaryIO, offset: int, size: int) -> bytes:
    """seek + read exactly `size` bytes"""
    try:
        source.seek(offset, 0)
        data = source.read(size)
    except (OSError, ValueError) as e:
        raise IoError(f"read of {size} bytes failed: {e}", offset=offset) from e
    if len(data) != size:
        raise IoError(f"truncated read, wanted {size} bytes, got {len(data)}", offset=offset)
    return data


def read_footer(
    source: BinaryIO, length: Optional[int] = None
) -> Tuple[volume_footer, int]:
    """read and validate the footer, return it with the absolute data base"""
    if length is None:
        length = source_length(source)
    if length < volume_footer.SIZE:
        raise FormatError(
            f"file too short for a volume footer ({length} bytes)", offset=0
        )

    offset = length - volume_footer.SIZE
    footer = volume_footer.parse(cipher.decode(read_exact(source, offset, volume_footer.SIZE)))

    if footer.magic != VOLUME_MAGIC:
        raise FormatError(
            f"bad volume magic, got {footer.magic.hex()}", offset=offset
        )

    data_base = footer.data_base(length)
    if data_base < 0:
        raise FormatError(
            f"data base delta 0x{footer.data_base_delta:x} exceeds file length {length}",
            offset=offset,
        )

    log.debug(
        f"footer: {footer.entry_count} entries, data base 0x{data_base:x}"
    )
    return footer, data_base
