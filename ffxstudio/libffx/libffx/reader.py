"""libffx.reader

Best-effort FFX (RIFX) reader.

The FFX grammar is only partly reverse-engineered, so the reader never gives
up on a whole file because one chunk looks wrong:

- Each chunk is parsed at an offset: NUL padding is skipped, the tag must be
  in the registry's allow-list, and the declared length must pass a sanity
  check before anything is decoded.
- Containers (RIFX, LIST) read their sub-type and then children back to back,
  each child word aligned, until the parent's end is reached or a child cannot
  be parsed.
- A chunk that fails is simply absent from the tree. The failure is logged and
  recorded as a ``ParseIssue`` so callers can report which offsets were bad.

Length convention: the header length is the payload size, not counting the
8 header bytes. For containers the payload starts with the 4-byte sub-type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .binio import BinaryReader, hexdump
from .errors import FfxReadError, InvalidTag, LengthOutOfRange, NestingTooDeep, OutOfBounds
from .model import Chunk, Container
from .registry import is_valid_tag, lookup

log = logging.getLogger(__name__)

# Not a format limit: a guard against walking into garbage after a misaligned
# read. Raise it through DecoderOptions for files with large chunks.
DEFAULT_MAX_LENGTH = 10000
DEFAULT_MAX_DEPTH = 64


@dataclass(frozen=True)
class DecoderOptions:
    max_length: int = DEFAULT_MAX_LENGTH
    # When set, a child must end inside its parent. By default only its start
    # has to, and its extent is checked against the buffer.
    strict_containers: bool = False
    # containers nested deeper than this are dropped, keeping recursion bounded
    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass(frozen=True)
class ParseIssue:
    offset: int
    error: FfxReadError

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    def __str__(self) -> str:
        return f"@{self.offset}: {self.kind}: {self.error}"


@dataclass
class ParseResult:
    root: Optional[Chunk]
    issues: List[ParseIssue] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.root is not None


class _ChunkDecoder:
    """Owns the cursor for a single parse call."""

    def __init__(self, data: bytes, options: DecoderOptions):
        self.r = BinaryReader(data)
        self.options = options
        self.issues: List[ParseIssue] = []
        self.depth = 0

    def _fail(self, offset: int, error: FfxReadError) -> None:
        log.warning("%s at offset %d (context: %s)", error, offset, hexdump(self.r.data, offset - 8, 24))
        self.issues.append(ParseIssue(offset, error))

    def parse_chunk(self, offset: int, limit: Optional[int] = None) -> Optional[Chunk]:
        """Parse one chunk at ``offset``; None when nothing valid is there.

        ``limit`` is the parent's end offset. Padding that runs up to it ends
        the parent; strict containers also reject children that end past it.
        """
        try:
            return self._parse_chunk(offset, limit)
        except FfxReadError as exc:
            self._fail(exc.offset if exc.offset is not None else offset, exc)
            return None

    def _parse_chunk(self, offset: int, limit: Optional[int]) -> Optional[Chunk]:
        r = self.r
        r.seek(offset)

        # alignment filler between siblings
        while not r.at_end() and r.peek_u8() == 0:
            r.skip(1)
        if r.at_end() or (limit is not None and r.tell() >= limit):
            return None
        offset = r.tell()

        log.debug("chunk candidate at %d: %s", offset, hexdump(r.data, offset))

        tag = r.read_fixed_string(4)
        if not is_valid_tag(tag):
            self._fail(offset, InvalidTag(f"Invalid chunk tag {tag!r}", offset=offset))
            return None

        length = r.read_u32_be()
        end = offset + 8 + length
        if length > self.options.max_length or end > len(r.data):
            self._fail(
                offset,
                LengthOutOfRange(f"Invalid length {length} for {tag!r}", offset=offset),
            )
            return None
        if self.options.strict_containers and limit is not None and end > limit:
            self._fail(
                offset,
                LengthOutOfRange(f"{tag!r} ends at {end}, past its parent's end {limit}", offset=offset),
            )
            return None

        log.debug("found %s length=%d at %d", tag, length, offset)

        kind = lookup(tag)
        if kind.is_container:
            if length < 4:
                self._fail(offset, LengthOutOfRange(f"{tag!r} too short for a sub-type", offset=offset))
                return None
            if self.depth >= self.options.max_depth:
                self._fail(
                    offset,
                    NestingTooDeep(f"{tag!r} nested deeper than {self.options.max_depth}", offset=offset),
                )
                return None
            self.depth += 1
            try:
                return self._parse_container(tag, offset, length)
            finally:
                self.depth -= 1

        try:
            payload = kind.decode(r.read(length))
        except OutOfBounds as exc:
            # payload readers count from 0; report where the chunk is
            raise OutOfBounds(f"{tag!r} payload too short: {exc}", offset=offset) from exc
        return Chunk(tag=tag, offset=offset, declared_length=length, payload=payload)

    def _parse_container(self, tag: str, offset: int, length: int) -> Chunk:
        r = self.r
        subtype = r.read_fixed_string(4)
        end = offset + 8 + length
        log.debug("parsing %s %r from %d to %d", tag, subtype, r.tell(), end)

        children: List[Chunk] = []
        child_ofs = r.tell()
        while child_ofs < end:
            child = self.parse_chunk(child_ofs, end)
            if child is None:
                log.debug("no further children of %s %r at %d", tag, subtype, child_ofs)
                break
            children.append(child)
            child_ofs = child.offset + child.total_size

        return Chunk(
            tag=tag,
            offset=offset,
            declared_length=length,
            payload=Container(subtype, tuple(children)),
        )


def parse(data: bytes, options: Optional[DecoderOptions] = None) -> ParseResult:
    """Parse an FFX buffer into a chunk tree.

    Never raises for malformed input: the result's ``root`` is None when no
    chunk could be found at the start of the buffer, and ``issues`` lists every
    offset that could not be parsed.
    """
    decoder = _ChunkDecoder(bytes(data), options or DecoderOptions())
    root = decoder.parse_chunk(0)
    return ParseResult(root=root, issues=decoder.issues)


def parse_file(path: str, options: Optional[DecoderOptions] = None) -> ParseResult:
    with open(path, "rb") as f:
        data = f.read()
    return parse(data, options)
