"""libffx.errors

Error taxonomy shared by the reader and the writer.

Read-side errors never reach callers of :func:`libffx.reader.parse`: they are
caught at the enclosing chunk and recorded as a ``ParseIssue``. Write-side
errors always propagate.
"""

from __future__ import annotations

from typing import Optional


class FfxError(RuntimeError):
    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


class FfxReadError(FfxError):
    pass


class OutOfBounds(FfxReadError):
    """A cursor read needed more bytes than remain."""


class InvalidTag(FfxReadError):
    """Four bytes that are not in the known-tag allow-list."""


class LengthOutOfRange(FfxReadError):
    """A declared chunk length failed the sanity check."""


class FfxWriteError(FfxError):
    pass


class Unsupported(FfxWriteError):
    """A value the effect model cannot express on disk."""


class NestingTooDeep(FfxReadError):
    """Containers nested past the decoder's depth limit."""
