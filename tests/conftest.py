import struct
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import pytest

from hlvolume import cipher

EXE_PREFIX = b"MZ" + bytes(62)


@dataclass
class volume_item:
    name: str
    payload: bytes
    compressed: bool = False
    decoded_size: Optional[int] = None
    escape: int = 0
    offset: Optional[int] = None


def pack_entry(item: volume_item, offset: int) -> bytes:
    decoded_size = len(item.payload) if item.decoded_size is None else item.decoded_size
    return struct.pack(
        "<13sBIII5sB",
        item.name.encode("latin-1"),
        1 if item.compressed else 0,
        offset,
        len(item.payload),
        decoded_size,
        b"\x00" * 5,
        item.escape,
    )


def pack_footer(entry_count: int, data_base_delta: int, magic: bytes = b"volume") -> bytes:
    return cipher.encode(struct.pack("<6sIHI", magic, 0, entry_count, data_base_delta))


def build_volume(items: List[volume_item], prefix: bytes = EXE_PREFIX, magic: bytes = b"volume") -> bytes:
    """executable prefix, data region, file table, footer"""
    data = bytearray()
    records = []
    for item in items:
        offset = len(data) if item.offset is None else item.offset
        records.append(pack_entry(item, offset))
        data += cipher.encode(item.payload)

    table = cipher.encode(b"".join(records))
    total = len(prefix) + len(data) + len(table) + 16
    footer = pack_footer(len(items), total - len(prefix), magic)
    return prefix + bytes(data) + table + footer


@pytest.fixture
def make_volume(tmp_path):
    def _make(items, name="HL.EXE", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_volume(items, **kwargs))
        return path

    return _make
