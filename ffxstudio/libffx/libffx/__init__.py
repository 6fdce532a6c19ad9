"""libffx: read and write After Effects FFX presets."""

from .errors import (
    FfxError,
    FfxReadError,
    FfxWriteError,
    InvalidTag,
    LengthOutOfRange,
    NestingTooDeep,
    OutOfBounds,
    Unsupported,
)
from .model import Chunk, Color, Control, ControlType, Effect, PopupDefault
from .reader import DecoderOptions, ParseIssue, ParseResult, parse, parse_file
from .writer import encode_chunk, encode_string, encode_tree, lower_effect, write, write_chunks, write_ffx

__all__ = [
    "Chunk",
    "Color",
    "Control",
    "ControlType",
    "DecoderOptions",
    "Effect",
    "FfxError",
    "FfxReadError",
    "FfxWriteError",
    "InvalidTag",
    "LengthOutOfRange",
    "NestingTooDeep",
    "OutOfBounds",
    "ParseIssue",
    "ParseResult",
    "PopupDefault",
    "Unsupported",
    "encode_chunk",
    "encode_string",
    "encode_tree",
    "lower_effect",
    "parse",
    "parse_file",
    "write",
    "write_chunks",
    "write_ffx",
]
