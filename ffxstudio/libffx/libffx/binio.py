"""libffx.binio

Big-endian cursor over a byte buffer.

``BinaryReader`` is the read side: forward-only, bounds-checked, with an
explicit ``seek`` for the decoder to jump to a sibling offset it computed.
``BinaryWriter`` is the growable sink used by the encoder, with a reserve /
patch pair for length fields that are only known after the children are out.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .errors import OutOfBounds, Unsupported

_U32 = struct.Struct(">I")
_F32 = struct.Struct(">f")


def hexdump(data: bytes, offset: int, length: int = 16) -> str:
    start = max(0, offset)
    end = min(len(data), start + length)
    return " ".join(f"{b:02x}" for b in data[start:end])


@dataclass
class BinaryReader:
    data: bytes
    ofs: int = 0

    def tell(self) -> int:
        return self.ofs

    def seek(self, ofs: int) -> None:
        self.ofs = ofs

    def remaining(self) -> int:
        return max(0, len(self.data) - self.ofs)

    def at_end(self) -> bool:
        return self.ofs >= len(self.data)

    def read(self, n: int) -> bytes:
        if n < 0 or n > self.remaining():
            raise OutOfBounds(
                f"Unexpected EOF at {self.ofs}, need {n}, have {self.remaining()}",
                offset=self.ofs,
            )
        b = self.data[self.ofs : self.ofs + n]
        self.ofs += n
        return b

    def skip(self, n: int) -> None:
        self.read(n)

    def peek_u8(self) -> int:
        if self.at_end():
            raise OutOfBounds(f"Unexpected EOF at {self.ofs}, need 1", offset=self.ofs)
        return self.data[self.ofs]

    def read_fixed_string(self, n: int) -> str:
        # latin-1 maps every byte, so a garbage tag still decodes and can be
        # rejected by the allow-list instead of by the codec.
        return self.read(n).decode("latin-1")

    def read_u32_be(self) -> int:
        return _U32.unpack(self.read(4))[0]

    def read_f32_be(self) -> float:
        return _F32.unpack(self.read(4))[0]


@dataclass
class BinaryWriter:
    buf: bytearray = field(default_factory=bytearray)

    def tell(self) -> int:
        return len(self.buf)

    def write(self, b: bytes) -> None:
        self.buf += b

    def write_string(self, s: str) -> None:
        self.buf += s.encode("latin-1")

    def write_u32_be(self, n: int) -> None:
        self.buf += pack_u32(n)

    def write_f32_be(self, x: float) -> None:
        try:
            self.buf += _F32.pack(float(x))
        except OverflowError:
            raise Unsupported(f"Value {x} does not fit in a 32-bit float") from None

    def pad_even(self) -> None:
        if len(self.buf) % 2:
            self.buf += b"\x00"

    def reserve_u32(self) -> int:
        pos = len(self.buf)
        self.buf += b"\x00\x00\x00\x00"
        return pos

    def patch_u32_be(self, pos: int, n: int) -> None:
        self.buf[pos : pos + 4] = pack_u32(n)

    def getvalue(self) -> bytes:
        return bytes(self.buf)


def pack_u32(n: int) -> bytes:
    if not 0 <= n <= 0xFFFFFFFF:
        raise Unsupported(f"Value {n} does not fit in an unsigned 32-bit field")
    return _U32.pack(n)
