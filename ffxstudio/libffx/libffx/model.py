from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union


# -----------------------------
# Chunk tree (read side)
#
# A parsed FFX file is a tree of immutable Chunk nodes. The payload of each
# node is exactly one of the variants below, chosen by the registry from the
# chunk's tag.
# -----------------------------


@dataclass(frozen=True)
class Opaque:
    """Bytes of a chunk we do not decode, kept verbatim."""

    data: bytes


@dataclass(frozen=True)
class Container:
    subtype: str
    children: Tuple["Chunk", ...] = ()


@dataclass(frozen=True)
class Scalar:
    value: int


@dataclass(frozen=True)
class Struct:
    """Named big-endian u32 fields, in on-disk order.

    ``trailing`` holds whatever the chunk carried past the last named field.
    """

    fields: Tuple[Tuple[str, int], ...]
    trailing: bytes = b""

    def as_dict(self) -> dict:
        return dict(self.fields)

    def __getitem__(self, name: str) -> int:
        for key, value in self.fields:
            if key == name:
                return value
        raise KeyError(name)


@dataclass(frozen=True)
class Text:
    text: str


Payload = Union[Opaque, Container, Scalar, Struct, Text]


@dataclass(frozen=True)
class Chunk:
    tag: str
    offset: int           # where the tag starts in the source buffer, -1 when built in memory
    declared_length: int  # payload length from the header (excludes the 8 header bytes)
    payload: Payload

    @property
    def is_container(self) -> bool:
        return isinstance(self.payload, Container)

    @property
    def subtype(self) -> Optional[str]:
        return self.payload.subtype if isinstance(self.payload, Container) else None

    @property
    def children(self) -> Tuple["Chunk", ...]:
        return self.payload.children if isinstance(self.payload, Container) else ()

    @property
    def total_size(self) -> int:
        # header + payload, word aligned
        n = 8 + self.declared_length
        return n + (n & 1)

    def find(self, tag: str) -> Optional["Chunk"]:
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def find_all(self, tag: str) -> List["Chunk"]:
        return [child for child in self.children if child.tag == tag]

    def iter_tree(self) -> Iterator["Chunk"]:
        yield self
        for child in self.children:
            yield from child.iter_tree()


# -----------------------------
# Effect model (write side)
# -----------------------------


class ControlType(enum.Enum):
    """UI parameter types, valued by the type code AE stores for them."""

    LAYER = 0
    ANGLE = 3
    CHECKBOX = 4
    COLOR = 5
    POINT = 6
    POPUP = 7
    SLIDER = 10

    @classmethod
    def from_name(cls, name: str) -> "ControlType":
        return cls[name.upper()]


@dataclass
class Color:
    red: int
    green: int
    blue: int

    def normalized(self) -> Tuple[float, float, float]:
        return (self.red / 255.0, self.green / 255.0, self.blue / 255.0)


@dataclass
class PopupDefault:
    options: List[str]
    selected: int = 1  # 1-based, as AE counts popup entries


DefaultValue = Union[None, bool, int, float, Tuple[float, float], Color, PopupDefault]


@dataclass
class Control:
    name: str
    ui_type: Union[ControlType, str]
    match_name: str
    id: int
    can_have_keyframes: bool = True
    can_be_invisible: bool = False
    hold: bool = False
    default: DefaultValue = None


@dataclass
class Effect:
    name: str
    match_name: str
    controls: List[Control] = field(default_factory=list)


# -----------------------------
# High-level DTO used by summarize_ffx
# -----------------------------

@dataclass
class FfxSummary:
    path: str
    file_size: int
    root_tag: Optional[str]
    subtype: Optional[str]
    chunk_count: int
    tag_counts: List[Tuple[str, int]]
    names: List[str]
    issues: List[str]
