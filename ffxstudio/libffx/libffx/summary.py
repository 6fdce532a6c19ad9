from __future__ import annotations

import os
from collections import Counter
from typing import Iterator, Optional, Tuple

from .binio import hexdump
from .model import Chunk, FfxSummary, Opaque, Scalar, Struct, Text
from .reader import DecoderOptions, parse

PREVIEW_BYTES = 16


def _looks_like_text(data: bytes) -> bool:
    if not data:
        return False
    printable = sum(1 for b in data if 32 <= b <= 126)
    return printable / len(data) > 0.8


def describe_value(chunk: Chunk) -> str:
    p = chunk.payload
    if isinstance(p, Text):
        return repr(p.text)
    if isinstance(p, Scalar):
        return str(p.value)
    if isinstance(p, Struct):
        text = " ".join(f"{k}={v}" for k, v in p.fields)
        if p.trailing:
            text += f" (+{len(p.trailing)} bytes)"
        return text
    if isinstance(p, Opaque):
        if _looks_like_text(p.data):
            return repr(p.data.decode("latin-1").strip("\x00 "))
        more = "..." if len(p.data) > PREVIEW_BYTES else ""
        return hexdump(p.data, 0, PREVIEW_BYTES) + more
    return ""


def describe_tree(root: Chunk, depth: int = 0) -> Iterator[Tuple[int, str]]:
    """(depth, label) per chunk, depth first."""
    if root.is_container:
        label = f"{root.tag} {root.subtype!r} ({root.declared_length} bytes, {len(root.children)} children)"
    else:
        label = f"{root.tag} ({root.declared_length} bytes) {describe_value(root)}".rstrip()
    yield depth, label
    for child in root.children:
        yield from describe_tree(child, depth + 1)


def summarize_ffx(path: str, options: Optional[DecoderOptions] = None) -> FfxSummary:
    size = os.path.getsize(path)
    with open(path, "rb") as f:
        data = f.read()

    result = parse(data, options)
    root = result.root
    chunks = list(root.iter_tree()) if root is not None else []

    counts = Counter(c.tag for c in chunks)
    names = [c.payload.text for c in chunks if c.tag == "tdsn" and isinstance(c.payload, Text)]

    return FfxSummary(
        path=path,
        file_size=size,
        root_tag=root.tag if root is not None else None,
        subtype=root.subtype if root is not None else None,
        chunk_count=len(chunks),
        tag_counts=sorted(counts.items()),
        names=names,
        issues=[str(issue) for issue in result.issues],
    )
