"""
heartlight volume extractor

reads the obfuscated asset archive appended to HL.EXE and writes every
packed file back out as a standalone file.
"""

from .cipher import decode, encode
from .decompress import expand
from .errors import CorruptionError, FormatError, IoError, VolumeError
from .extract import __version__, volume_extractor
from .footer import volume_footer, read_footer
from .table import file_entry, read_file_table

__all__ = [
    "CorruptionError",
    "FormatError",
    "IoError",
    "VolumeError",
    "decode",
    "encode",
    "expand",
    "file_entry",
    "read_file_table",
    "read_footer",
    "volume_extractor",
    "volume_footer",
]
