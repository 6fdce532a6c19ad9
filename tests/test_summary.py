from conftest import chunk, container, u32
from libffx.model import Color, Control, ControlType, Effect
from libffx.reader import parse
from libffx.summary import describe_tree, summarize_ffx
from libffx.writer import write


def test_describe_tree_labels():
    data = container(
        b"RIFX",
        b"FaFX",
        chunk(b"head", u32(1)),
        chunk(b"tdsn", b"Blur\x00\x00"),
        chunk(b"tdps", u32(10) + u32(1)),
        chunk(b"prmm", b"plain text here"),
    )

    lines = list(describe_tree(parse(data).root))

    assert lines[0] == (0, "RIFX 'FaFX' (70 bytes, 4 children)")
    assert lines[1] == (1, "head (4 bytes) 00 00 00 01")
    assert lines[2] == (1, "tdsn (6 bytes) 'Blur'")
    assert lines[3] == (1, "tdps (8 bytes) type=10 flags=1")
    assert lines[4] == (1, "prmm (15 bytes) 'plain text here'")


def test_summarize_ffx(tmp_path):
    effect = Effect(
        "Glow", "Custom/Glow",
        [Control("Tint", ControlType.COLOR, "Custom/Glow/Tint", 1, default=Color(1, 2, 3))],
    )
    p = tmp_path / "glow.ffx"
    p.write_bytes(write(effect))

    s = summarize_ffx(str(p))

    assert s.file_size == len(p.read_bytes())
    assert (s.root_tag, s.subtype) == ("RIFX", "FaFX")
    assert s.names == ["Glow", "Tint"]
    assert dict(s.tag_counts)["LIST"] == 2
    assert s.chunk_count == sum(n for _, n in s.tag_counts)
    assert s.issues == []


def test_summarize_unparseable(tmp_path):
    p = tmp_path / "zeros.ffx"
    p.write_bytes(bytes(8))

    s = summarize_ffx(str(p))

    assert s.root_tag is None
    assert s.chunk_count == 0
