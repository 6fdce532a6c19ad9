from conftest import chunk, container, u32
from ffxcli.main import build_parser, demo_effect, main
from libffx.reader import DEFAULT_MAX_DEPTH, DEFAULT_MAX_LENGTH, parse
from libffx.writer import write


def test_demo_writes_parseable_file(tmp_path):
    out = tmp_path / "pseudo.ffx"

    assert main(["demo", "--out", str(out)]) == 0

    data = out.read_bytes()
    assert data == write(demo_effect())
    result = parse(data)
    assert result.issues == []
    assert len(result.root.find("LIST").find_all("LIST")) == 2


def test_dump_prints_tree(tmp_path, capsys):
    p = tmp_path / "pseudo.ffx"
    p.write_bytes(write(demo_effect()))

    assert main(["dump", str(p)]) == 0

    out = capsys.readouterr().out
    assert "RIFX" in out
    assert "Slider Control" in out


def test_dump_reports_unparseable_file(tmp_path, capsys):
    p = tmp_path / "zeros.ffx"
    p.write_bytes(bytes(16))

    assert main(["dump", str(p)]) == 2
    assert "No chunk found" in capsys.readouterr().out


def test_summary(tmp_path, capsys):
    p = tmp_path / "pseudo.ffx"
    p.write_bytes(write(demo_effect()))

    assert main(["summary", str(p)]) == 0

    out = capsys.readouterr().out
    assert "FaFX" in out
    assert "Color Control" in out


def test_verify_roundtrip_identical(tmp_path, capsys):
    p = tmp_path / "pseudo.ffx"
    p.write_bytes(write(demo_effect()))

    assert main(["verify-roundtrip", str(p)]) == 0
    assert "IDENTICAL" in capsys.readouterr().out


def test_verify_roundtrip_diff(tmp_path, capsys):
    # RIFX length understates the content; re-encoding corrects it
    p = tmp_path / "short.ffx"
    p.write_bytes(b"RIFX" + u32(12) + b"FaFX" + chunk(b"head", u32(1)))

    assert main(["verify-roundtrip", str(p)]) == 1
    assert "DIFF" in capsys.readouterr().out


def test_missing_file_is_an_error(tmp_path):
    assert main(["dump", str(tmp_path / "missing.ffx")]) == 1


def test_reader_flags():
    args = build_parser().parse_args(["dump", "x.ffx", "--max-length", "50000", "--strict"])

    assert args.max_length == 50000
    assert args.strict
    defaults = build_parser().parse_args(["summary", "x.ffx"])
    assert defaults.max_length == DEFAULT_MAX_LENGTH
    assert defaults.max_depth == DEFAULT_MAX_DEPTH
    assert build_parser().parse_args(["dump", "x.ffx", "--max-depth", "8"]).max_depth == 8


def test_max_length_flag_reaches_reader(tmp_path):
    p = tmp_path / "big.ffx"
    p.write_bytes(container(b"RIFX", b"FaFX", chunk(b"prmm", bytes(12000))))

    assert main(["dump", str(p)]) == 2
    assert main(["dump", str(p), "--max-length", "20000"]) == 0
