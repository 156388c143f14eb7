import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, List, Optional

from . import cipher
from .errors import FormatError
from .footer import read_exact, source_length, volume_footer

log = logging.getLogger(__name__)

ENTRY_SIZE = 32


@dataclass(frozen=True)
class file_entry:
    """one 32-byte record of the file table

    layout (little-endian):
      [0x00:13] name, nul terminated
      [0x0d:1]  compressed flag
      [0x0e:4]  offset from the data base
      [0x12:4]  stored size
      [0x16:4]  decoded size
      [0x1a:5]  reserved
      [0x1f:1]  escape byte for the decompressor
    """

    name: str
    is_compressed: bool
    offset: int
    stored_size: int
    decoded_size: int
    reserved: bytes
    escape_byte: int

    SIZE = ENTRY_SIZE
    FORMAT = "<13sBIII5sB"

    @classmethod
    def parse(cls, data: bytes) -> "file_entry":
        """parse an already decoded record"""
        if len(data) != cls.SIZE:
            raise FormatError(f"file entry must be {cls.SIZE} bytes, got {len(data)}")
        (
            name_bytes,
            compressed,
            offset,
            stored_size,
            decoded_size,
            reserved,
            escape_byte,
        ) = struct.unpack(cls.FORMAT, data)
        # latin-1 keeps every byte of the stored name
        name = name_bytes.split(b"\x00", 1)[0].decode("latin-1")
        return cls(
            name,
            compressed != 0,
            offset,
            stored_size,
            decoded_size,
            reserved,
            escape_byte,
        )

    def data_offset(self, data_base: int) -> int:
        return data_base + self.offset


def read_file_table(
    source: BinaryIO, footer: volume_footer, length: Optional[int] = None
) -> List[file_entry]:
    """read the table that sits right before the footer, in on-disk order"""
    if length is None:
        length = source_length(source)

    table_size = footer.entry_count * file_entry.SIZE
    table_offset = length - table_size - volume_footer.SIZE
    if table_offset < 0:
        raise FormatError(
            f"file too short for {footer.entry_count} table entries "
            f"({table_size + volume_footer.SIZE} bytes needed, {length} available)"
        )
    if not table_size:
        return []

    table = cipher.decode(read_exact(source, table_offset, table_size))
    entries = [
        file_entry.parse(table[i : i + file_entry.SIZE])
        for i in range(0, table_size, file_entry.SIZE)
    ]
    log.debug(f"file table at 0x{table_offset:x}, {len(entries)} entries")
    return entries
