"""libffx.registry

Static table of the FFX chunk tags we know about.

Each tag maps to a ``ChunkKind`` describing how its payload is decoded and
encoded. The reader and the writer both go through this table so the payload
rules live in one place.

Only a handful of tags are really understood. Every other tag in
``KNOWN_TAGS`` is accepted as the start of a chunk and kept as opaque bytes;
the allow-list is what tells a real chunk apart from padding or a misaligned
read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from .binio import BinaryReader, pack_u32
from .model import Opaque, Payload, Scalar, Struct, Text

CONTAINER_TAGS = frozenset({"RIFX", "LIST"})

KNOWN_TAGS = frozenset({
    "RIFX", "LIST",
    "head", "beso", "tdot", "tdpl", "tdix",
    "tdmn", "tdsn", "tdsb", "tdsl", "tdpt", "tdpi", "tdps", "tdpk", "tdgp",
    "Fsld", "tdsc", "tdum", "tdst",
    "fnam", "prmm", "tdxp", "tglf", "tdpf",
    "parn", "tdb4", "parT", "sspc",
    "pard", "pdnm",
})


@dataclass(frozen=True)
class ChunkKind:
    tag: str
    is_container: bool
    decode: Optional[Callable[[bytes], Payload]]
    encode: Optional[Callable[[Payload], bytes]]


def is_valid_tag(tag: str) -> bool:
    return tag in KNOWN_TAGS


# -----------------------------
# Payload codecs
# -----------------------------

def _decode_opaque(data: bytes) -> Payload:
    return Opaque(bytes(data))


def _encode_opaque(payload: Payload) -> bytes:
    return _expect(payload, Opaque).data


def _decode_text(data: bytes) -> Payload:
    return Text(data.rstrip(b"\x00").decode("utf-8", errors="replace"))


def _encode_text(payload: Payload) -> bytes:
    return encode_string(_expect(payload, Text).text)


def encode_string(s: str) -> bytes:
    """UTF-8 bytes plus a single NUL terminator."""
    return s.encode("utf-8") + b"\x00"


def _decode_scalar(data: bytes) -> Payload:
    return Scalar(BinaryReader(data).read_u32_be())


def _encode_scalar(payload: Payload) -> bytes:
    return pack_u32(_expect(payload, Scalar).value)


def _struct_codec(names: Sequence[str], extended: Sequence[str] = ()):
    """Codec pair for a run of named u32 fields.

    ``extended`` fields are read only when the payload is longer than the base
    run (the tdb4 chunk comes in a 16-byte and a 32-byte flavour).
    """

    def decode(data: bytes) -> Payload:
        r = BinaryReader(data)
        wanted = list(names)
        if extended and len(data) > 4 * len(names):
            wanted += extended
        fields = tuple((name, r.read_u32_be()) for name in wanted)
        return Struct(fields, trailing=r.read(r.remaining()))

    def encode(payload: Payload) -> bytes:
        s = _expect(payload, Struct)
        return b"".join(pack_u32(value) for _, value in s.fields) + s.trailing

    return decode, encode


def _expect(payload: Payload, cls):
    if not isinstance(payload, cls):
        raise TypeError(f"expected {cls.__name__} payload, got {type(payload).__name__}")
    return payload


# -----------------------------
# The table
# -----------------------------

REGISTRY: Dict[str, ChunkKind] = {}


def _register(tags: Sequence[str], decode=None, encode=None, is_container: bool = False) -> None:
    for tag in tags:
        REGISTRY[tag] = ChunkKind(tag, is_container, decode, encode)


_register(sorted(CONTAINER_TAGS), is_container=True)
_register(("fnam", "tdmn", "tdsn", "pdnm"), decode=_decode_text, encode=_encode_text)
_register(("tdpt", "tdpi"), decode=_decode_scalar, encode=_encode_scalar)
_register(("tdsb",), *_struct_codec(("property_type", "value", "flags")))
_register(("tdsl",), *_struct_codec(("default_value", "min_value", "max_value", "precision")))
_register(("tdps",), *_struct_codec(("type", "flags")))
_register(("parn",), *_struct_codec(("count",)))
_register(
    ("tdb4",),
    *_struct_codec(
        ("value1", "value2", "value3", "value4"),
        ("value5", "value6", "value7", "value8"),
    ),
)
_register(("prmm", "tdxp", "tglf", "tdpf", "pard"), decode=_decode_opaque, encode=_encode_opaque)

OPAQUE = ChunkKind("????", False, _decode_opaque, _encode_opaque)


def lookup(tag: str) -> ChunkKind:
    """Kind for ``tag``; allowed tags without a typed codec come back opaque."""
    return REGISTRY.get(tag, OPAQUE)
