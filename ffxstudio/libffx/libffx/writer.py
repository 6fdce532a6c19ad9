"""libffx.writer

FFX writer.

Two entry points share the same chunk encoder:

  - ``encode_tree`` re-serialises a chunk tree (for example one returned by
    the reader); opaque chunks come back byte for byte.
  - ``write`` / ``write_ffx`` lower an ``Effect`` to a fixed chunk template
    and serialise it.

The length field written for every chunk is the payload size, not counting
the 8-byte header, which is what ``libffx.reader`` expects. Odd payloads get
one NUL of padding that is not counted in the length.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Mapping
from typing import List, Sequence, Tuple

from .binio import BinaryWriter, pack_u32
from .errors import Unsupported
from .model import (
    Chunk,
    Color,
    Container,
    Control,
    ControlType,
    Effect,
    Opaque,
    Payload,
    PopupDefault,
    Scalar,
    Struct,
    Text,
)
from .registry import encode_string, lookup

log = logging.getLogger(__name__)

PARAM_BLOCK_SIZE = 156
HEAD_VERSION = 1

FLAG_KEYFRAMES = 0x1
FLAG_INVISIBLE = 0x2
FLAG_HOLD = 0x4

__all__ = [
    "PARAM_BLOCK_SIZE",
    "encode_chunk",
    "encode_string",
    "encode_tree",
    "lower_effect",
    "write",
    "write_chunks",
    "write_ffx",
]


# -----------------------------
# Chunk encoder
# -----------------------------

def encode_chunk(tag: str, payload: bytes) -> bytes:
    w = BinaryWriter()
    _write_header(w, tag)
    w.write_u32_be(len(payload))
    w.write(payload)
    w.pad_even()
    return w.getvalue()


def _write_header(w: BinaryWriter, tag: str) -> None:
    if len(tag) != 4:
        raise Unsupported(f"Chunk tags must be 4 characters long: {tag!r}")
    w.write_string(tag)


def _encode_into(w: BinaryWriter, chunk: Chunk) -> None:
    kind = lookup(chunk.tag)
    if not isinstance(chunk.payload, Container):
        if kind.is_container:
            raise Unsupported(f"{chunk.tag!r} needs a container payload")
        w.write(encode_chunk(chunk.tag, kind.encode(chunk.payload)))
        return

    _write_header(w, chunk.tag)
    length_at = w.reserve_u32()
    start = w.tell()
    _write_header(w, chunk.payload.subtype)
    for child in chunk.payload.children:
        _encode_into(w, child)
    w.patch_u32_be(length_at, w.tell() - start)
    w.pad_even()


def encode_tree(root: Chunk) -> bytes:
    """Serialise a chunk tree; container lengths are recomputed from the children."""
    w = BinaryWriter()
    _encode_into(w, root)
    return w.getvalue()


# -----------------------------
# In-memory chunk construction
# -----------------------------

def _leaf(tag: str, payload: Payload) -> Chunk:
    size = len(lookup(tag).encode(payload))
    return Chunk(tag=tag, offset=-1, declared_length=size, payload=payload)


def _container(tag: str, subtype: str, children: Sequence[Chunk]) -> Chunk:
    size = 4 + sum(child.total_size for child in children)
    return Chunk(tag=tag, offset=-1, declared_length=size, payload=Container(subtype, tuple(children)))


# -----------------------------
# Effect lowering
# -----------------------------

def _resolve_type(control: Control) -> ControlType:
    t = control.ui_type
    if isinstance(t, ControlType):
        return t
    if isinstance(t, str):
        try:
            return ControlType.from_name(t)
        except KeyError:
            pass
    raise Unsupported(f"Control {control.name!r}: unknown UI type {t!r}")


def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _default_floats(control: Control, ui_type: ControlType) -> Tuple[float, ...]:
    d = control.default
    bad = Unsupported(f"Control {control.name!r}: default {d!r} does not fit a {ui_type.name.lower()} control")

    if ui_type in (ControlType.SLIDER, ControlType.ANGLE):
        if d is None:
            return (0.0,)
        if _is_number(d):
            return (float(d),)
        raise bad

    if ui_type is ControlType.CHECKBOX:
        if d is None:
            return (0.0,)
        if isinstance(d, bool):
            return (1.0 if d else 0.0,)
        raise bad

    if ui_type is ControlType.COLOR:
        if d is None:
            return (0.0, 0.0, 0.0)
        if isinstance(d, Mapping):
            try:
                d = Color(d["red"], d["green"], d["blue"])
            except KeyError:
                raise bad from None
        if isinstance(d, Color):
            channels = (d.red, d.green, d.blue)
            if all(isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 255 for c in channels):
                return d.normalized()
        raise bad

    if ui_type is ControlType.POINT:
        if d is None:
            return (0.0, 0.0)
        if isinstance(d, (tuple, list)) and len(d) == 2 and all(_is_number(v) for v in d):
            return (float(d[0]), float(d[1]))
        raise bad

    if ui_type is ControlType.POPUP:
        if (
            isinstance(d, PopupDefault)
            and d.options
            and not any("|" in option for option in d.options)
            and 1 <= d.selected <= len(d.options)
        ):
            return (float(d.selected),)
        raise bad

    if ui_type is ControlType.LAYER and d is None:
        return ()
    raise bad


def _param_block(values: Sequence[float]) -> bytes:
    w = BinaryWriter()
    for value in values:
        w.write_f32_be(value)
    w.write(b"\x00" * (PARAM_BLOCK_SIZE - w.tell()))
    return w.getvalue()


def _control_flags(control: Control) -> int:
    flags = 0
    if control.can_have_keyframes:
        flags |= FLAG_KEYFRAMES
    if control.can_be_invisible:
        flags |= FLAG_INVISIBLE
    if control.hold:
        flags |= FLAG_HOLD
    return flags


def _lower_control(control: Control) -> Chunk:
    ui_type = _resolve_type(control)
    if not isinstance(control.id, int) or not 0 <= control.id <= 0xFFFFFFFF:
        raise Unsupported(f"Control {control.name!r}: id {control.id!r} is not an unsigned 32-bit value")

    values = _default_floats(control, ui_type)

    children: List[Chunk] = [
        _leaf("tdmn", Text(control.match_name)),
        _leaf("tdsn", Text(control.name)),
        _leaf("tdps", Struct((("type", ui_type.value), ("flags", _control_flags(control))))),
        _leaf("tdpi", Scalar(control.id)),
    ]
    if ui_type is ControlType.POPUP:
        children.append(_leaf("pdnm", Text("|".join(control.default.options))))
    children.append(_leaf("pard", Opaque(_param_block(values))))
    return _container("LIST", "tdgp", children)


def lower_effect(effect: Effect) -> Chunk:
    """Map an Effect onto the FFX chunk template.

    RIFX 'FaFX' holds a ``head`` and one LIST 'parT'; the parT list starts
    with the control count and the effect's names, followed by one LIST
    'tdgp' per control in the order given.
    """
    params = [_lower_control(control) for control in effect.controls]
    log.debug("lowered %d controls of %r", len(params), effect.match_name)

    part = _container(
        "LIST",
        "parT",
        [
            _leaf("parn", Struct((("count", len(params)),))),
            _leaf("tdmn", Text(effect.match_name)),
            _leaf("tdsn", Text(effect.name)),
            *params,
        ],
    )
    return _container("RIFX", "FaFX", [_leaf("head", Opaque(pack_u32(HEAD_VERSION))), part])


def write(effect: Effect) -> bytes:
    return encode_tree(lower_effect(effect))


# -----------------------------
# Files
# -----------------------------

def _write_atomic(data: bytes, out_path: str) -> None:
    # Write next to the target and rename, so a failed write leaves nothing behind.
    directory = os.path.dirname(os.path.abspath(out_path))
    fd, tmp = tempfile.mkstemp(prefix=".ffx-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, out_path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def write_ffx(effect: Effect, out_path: str) -> None:
    """Encode ``effect`` and write it to ``out_path``.

    Encoding happens before the file is touched; any error propagates and no
    partial file is left on disk.
    """
    _write_atomic(write(effect), out_path)


def write_chunks(root: Chunk, out_path: str) -> None:
    _write_atomic(encode_tree(root), out_path)
