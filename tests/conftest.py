import struct

import pytest


def u32(n: int) -> bytes:
    return struct.pack(">I", n)


def chunk(tag: bytes, payload: bytes) -> bytes:
    """Hand-assembled chunk: header length excludes the header, odd payloads padded."""
    pad = b"\x00" if len(payload) % 2 else b""
    return tag + u32(len(payload)) + payload + pad


def container(tag: bytes, subtype: bytes, *children: bytes) -> bytes:
    body = subtype + b"".join(children)
    return tag + u32(len(body)) + body


@pytest.fixture
def opaque_file() -> bytes:
    return container(
        b"RIFX",
        b"FaFX",
        chunk(b"head", u32(1)),
        chunk(b"prmm", b"\x01\x02\x03\x04\x05"),
        container(b"LIST", b"tdgp", chunk(b"tdpk", b"\xab\xcd")),
    )
