from typing import Optional


class VolumeError(Exception):
    """base class for everything that can go wrong reading a volume"""

    def __init__(
        self,
        message: str,
        entry_name: Optional[str] = None,
        offset: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.entry_name = entry_name
        self.offset = offset

    def with_context(self, entry_name: str, offset: int) -> "VolumeError":
        """attach entry context unless a more specific one is already set"""
        if self.entry_name is None:
            self.entry_name = entry_name
        if self.offset is None:
            self.offset = offset
        return self

    def __str__(self) -> str:
        parts = []
        if self.entry_name is not None:
            parts.append(self.entry_name)
        if self.offset is not None:
            parts.append(f"offset 0x{self.offset:x}")
        if parts:
            return f"{', '.join(parts)}: {self.message}"
        return self.message


class FormatError(VolumeError):
    """input is not a volume, or its geometry does not fit the file"""


class IoError(VolumeError):
    """read/seek failure on the container or write failure on an output"""


class CorruptionError(VolumeError):
    """entry data ran out or pointed outside itself while decoding"""
