"""Little-endian cursor over instruction data.

Every read consumes exactly its width and advances the shared offset.
Reading past the end raises DecodeError instead of returning short data,
so a truncated payload fails the enclosing instruction only.
"""

import struct

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.launchpad.exceptions import DecodeError

PUBKEY_SIZE = 32

_U8 = struct.Struct("<B")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


class ByteCursor:
    """Sequential reader over a byte buffer with an explicit offset."""

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self._data = bytes(data)
        self.offset = offset

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self.offset, 0)

    def _take(self, width: int) -> bytes:
        end = self.offset + width
        if width < 0 or end > len(self._data):
            raise DecodeError(
                f"need {width} bytes at offset {self.offset}, have {self.remaining}"
            )
        chunk = self._data[self.offset : end]
        self.offset = end
        return chunk

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u32(self) -> int:
        return _U32.unpack(self._take(4))[0]

    def read_u64(self) -> int:
        return _U64.unpack(self._take(8))[0]

    def read_pubkey(self) -> Pubkey:
        return Pubkey.from_bytes(self._take(PUBKEY_SIZE))

    def read_string(self) -> str:
        """Read a u32 length prefix followed by that many UTF-8 bytes."""
        length = self.read_u32()
        raw = self._take(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"invalid UTF-8 string at offset {self.offset - length}: {e}") from e


class ByteWriter:
    """Counterpart of ByteCursor for building instruction data."""

    def __init__(self, prefix: bytes = b"") -> None:
        self._buf = bytearray(prefix)

    def write_u8(self, value: int) -> "ByteWriter":
        self._buf += _U8.pack(value)
        return self

    def write_u32(self, value: int) -> "ByteWriter":
        self._buf += _U32.pack(value)
        return self

    def write_u64(self, value: int) -> "ByteWriter":
        self._buf += _U64.pack(value)
        return self

    def write_pubkey(self, value: Pubkey) -> "ByteWriter":
        self._buf += bytes(value)
        return self

    def write_string(self, value: str) -> "ByteWriter":
        raw = value.encode("utf-8")
        self.write_u32(len(raw))
        self._buf += raw
        return self

    def to_bytes(self) -> bytes:
        return bytes(self._buf)
