import struct

import pytest

from conftest import u32
from libffx.errors import OutOfBounds
from libffx.model import Opaque, Scalar, Struct, Text
from libffx.registry import KNOWN_TAGS, is_valid_tag, lookup
from libffx.writer import encode_chunk


def test_allow_list():
    assert is_valid_tag("RIFX")
    assert is_valid_tag("tdb4")
    assert not is_valid_tag("\x00\x00\x00\x00")
    assert not is_valid_tag("rifx")
    assert not is_valid_tag("ZZZZ")


def test_containers():
    assert lookup("RIFX").is_container
    assert lookup("LIST").is_container
    assert not lookup("tdsn").is_container


def test_allowed_tag_without_codec_is_opaque():
    kind = lookup("beso")
    assert not kind.is_container
    assert kind.decode(b"\x01\x02\x03") == Opaque(b"\x01\x02\x03")


def test_text_trims_trailing_nuls():
    assert lookup("tdsn").decode(b"Slider\x00\x00\x00\x00") == Text("Slider")
    assert lookup("fnam").decode(b"preset.ffx\x00\x00") == Text("preset.ffx")
    assert lookup("tdmn").encode(Text("ADBE Slider")) == b"ADBE Slider\x00"


def test_scalar_and_structs():
    assert lookup("tdpi").decode(u32(42)) == Scalar(42)

    tdsl = lookup("tdsl").decode(u32(5) + u32(0) + u32(100) + u32(2))
    assert tdsl.as_dict() == {"default_value": 5, "min_value": 0, "max_value": 100, "precision": 2}

    tdps = lookup("tdps").decode(u32(10) + u32(1))
    assert tdps["type"] == 10
    assert tdps["flags"] == 1
    with pytest.raises(KeyError):
        tdps["missing"]

    assert lookup("parn").decode(u32(3)) == Struct((("count", 3),))
    assert lookup("tdsb").decode(u32(1) + u32(2) + u32(3)).as_dict() == {
        "property_type": 1,
        "value": 2,
        "flags": 3,
    }


def test_tdb4_short_and_long_variants():
    decode = lookup("tdb4").decode

    short = decode(b"".join(u32(i) for i in range(1, 5)))
    assert [name for name, _ in short.fields] == ["value1", "value2", "value3", "value4"]
    assert short.trailing == b""

    long = decode(b"".join(u32(i) for i in range(1, 9)) + b"\xde\xad\xbe\xef")
    assert long["value8"] == 8
    assert long.trailing == b"\xde\xad\xbe\xef"

    # longer than 16 bytes but not a full second run of fields
    with pytest.raises(OutOfBounds):
        decode(b"\x00" * 20)


def test_short_struct_payload_raises():
    with pytest.raises(OutOfBounds):
        lookup("tdsl").decode(u32(1) + u32(2))


@pytest.mark.parametrize(
    "tag, payload",
    [
        ("tdsb", u32(1) + u32(2) + u32(3)),
        ("tdsl", u32(5) + u32(0) + u32(100) + u32(2)),
        ("tdps", u32(10) + u32(1)),
        ("parn", u32(2)),
        ("tdpt", u32(7)),
        ("tdpi", u32(123456)),
        ("tdb4", b"".join(u32(i) for i in range(4))),
        ("tdb4", b"".join(u32(i) for i in range(8)) + b"\x01\x02"),
        ("tdsn", b"Blur Amount" + b"\x00" * 21),
        ("tdmn", b"ADBE Gaussian Blur\x00\x00"),
    ],
)
def test_typed_leaves_never_grow_on_reencode(tag, payload):
    kind = lookup(tag)
    original = encode_chunk(tag, payload)

    again = encode_chunk(tag, kind.encode(kind.decode(payload)))

    assert len(again) <= len(original)


def test_opaque_leaves_reencode_identically():
    payload = bytes(range(33))
    kind = lookup("tdxp")

    assert encode_chunk("tdxp", kind.encode(kind.decode(payload))) == encode_chunk("tdxp", payload)


def test_every_allowed_tag_has_a_kind():
    for tag in KNOWN_TAGS:
        kind = lookup(tag)
        assert kind.is_container or kind.decode is not None


def test_pard_is_kept_opaque():
    # pard is opaque, its floats are read by callers
    data = struct.pack(">3f", 1.0, 0.0, 0.0) + b"\x00" * 144
    assert lookup("pard").decode(data).data[:4] == b"\x3f\x80\x00\x00"
