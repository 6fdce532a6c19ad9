#!/usr/bin/env python3
"""Re-encode an FFX file through libffx and compare it with the input.

Usage:
  python ffxstudio/roundtrip.py path/to/preset.ffx

Prints IDENTICAL when the re-encoded tree matches the input byte for byte.
Otherwise it prints where the two first differ and writes the re-encoded bytes
to <input>.roundtrip.ffx for inspection. Chunks the reader could not parse
are dropped, so the listed issues point at what the registry does not
understand yet.
"""

from __future__ import annotations

import os
import sys

# Allow running from repo root without installation
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
LIBFFX_ROOT = os.path.join(REPO_ROOT, "ffxstudio", "libffx")
if LIBFFX_ROOT not in sys.path:
    sys.path.insert(0, LIBFFX_ROOT)

from libffx.reader import parse  # type: ignore
from libffx.writer import encode_tree  # type: ignore


def first_difference(a: bytes, b: bytes) -> int:
    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return i
    return min(len(a), len(b))


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print("Usage: python ffxstudio/roundtrip.py <file.ffx>")
        return 2

    inp = os.path.abspath(argv[1])
    if not os.path.exists(inp):
        print(f"File not found: {inp}")
        return 2

    with open(inp, "rb") as f:
        data = f.read()

    result = parse(data)
    if result.root is None:
        print("No RIFX chunk found.")
        return 2
    for issue in result.issues:
        print(f"issue {issue}")

    out = encode_tree(result.root)
    if out == data:
        print(f"IDENTICAL ({len(data)} bytes)")
        return 0

    outp = inp + ".roundtrip.ffx"
    with open(outp, "wb") as f:
        f.write(out)
    print(f"DIFF at byte {first_difference(data, out)}: in={len(data)} out={len(out)}, wrote {outp}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
