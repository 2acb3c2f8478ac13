import io
import json

import pytest

from nwfformats.arcfile import ArchiveEntry, ArchiveManifest
from nwfres.errors import IoError, SchemaParseError
from nwfres.schema import SchemaWriter, dumps, loads, read_schema, write_schema
from sbtf.nwfunpack import decode_stream


def make_manifest():
    return ArchiveManifest([
        ArchiveEntry("a.bin", 1, -2, 3, offset=63, size=3),
        ArchiveEntry("data/스테이지.map", -32768, 32767, -2147483648, offset=66, size=5),
        ArchiveEntry("z.txt", 0, 0, 2147483647),
    ])


def test_roundtrip_keeps_fields_and_order():
    manifest = make_manifest()
    restored = loads(dumps(manifest))
    assert restored.same_layout(manifest)
    assert [e.path for e in restored] == ["a.bin", "data/스테이지.map", "z.txt"]


def test_roundtrip_without_layout_fields():
    manifest = make_manifest()
    text = dumps(manifest, include_layout=False)
    assert "offset" not in text
    restored = loads(text)
    assert restored.same_layout(manifest)
    assert all(e.offset == 0 and e.size == 0 for e in restored)


def test_decoded_archive_roundtrip(sample_stream):
    manifest = decode_stream(sample_stream)
    assert loads(dumps(manifest)).same_layout(manifest)


def test_dumps_layout_is_informational_hex():
    document = json.loads(dumps(make_manifest()))
    assert document["format"] == "nwf"
    assert document["version"] == 1
    assert document["files"][0] == {"path": "a.bin", "flag1": 1, "flag2": -2, "flag3": 3, "offset": "0x3F", "size": "0x3"}


def test_dumps_keeps_non_ascii_readable():
    assert "스테이지" in dumps(make_manifest())


def test_loads_accepts_bare_list_and_hex_strings():
    text = json.dumps([{"path": "x.bin", "flag1": "0x10", "flag2": "-3", "flag3": 7}])
    manifest = loads(text)
    assert (manifest[0].flag1, manifest[0].flag2, manifest[0].flag3) == (16, -3, 7)


def test_loads_ignores_unknown_fields_and_bad_hints():
    text = json.dumps({"files": [{"path": "x.bin", "flag1": 0, "flag2": 0, "flag3": 0,
                                  "comment": "edited", "offset": "stale", "size": 12}]})
    manifest = loads(text)
    assert manifest[0].offset == 0
    assert manifest[0].size == 12


@pytest.mark.parametrize("text", [
    "not json",
    "42",
    json.dumps({"version": 1}),
    json.dumps({"files": {"path": "x"}}),
    json.dumps({"files": ["x.bin"]}),
])
def test_loads_rejects_malformed_structure(text):
    with pytest.raises(SchemaParseError):
        loads(text)


@pytest.mark.parametrize("record", [
    {"flag1": 0, "flag2": 0, "flag3": 0},
    {"path": "a", "flag2": 0, "flag3": 0},
    {"path": "a", "flag1": 0, "flag2": 0},
    {"path": 5, "flag1": 0, "flag2": 0, "flag3": 0},
    {"path": "", "flag1": 0, "flag2": 0, "flag3": 0},
    {"path": "a", "flag1": "abc", "flag2": 0, "flag3": 0},
    {"path": "a", "flag1": 1.5, "flag2": 0, "flag3": 0},
    {"path": "a", "flag1": True, "flag2": 0, "flag3": 0},
    {"path": "a", "flag1": 0, "flag2": 40000, "flag3": 0},
    {"path": "a", "flag1": 0, "flag2": 0, "flag3": 2 ** 31},
])
def test_loads_rejects_bad_records(record):
    good = {"path": "ok", "flag1": 0, "flag2": 0, "flag3": 0}
    with pytest.raises(SchemaParseError) as info:
        loads(json.dumps({"files": [good, record]}))
    assert info.value.index == 1


def test_writer_to_stream():
    buf = io.StringIO()
    SchemaWriter(include_layout=False).write(make_manifest(), buf)
    assert json.loads(buf.getvalue())["files"][2]["path"] == "z.txt"


def test_write_and_read_schema_file(tmp_path):
    path = tmp_path / "schema.json"
    write_schema(make_manifest(), str(path))
    assert read_schema(str(path)).same_layout(make_manifest())


def test_read_schema_missing_file(tmp_path):
    with pytest.raises(IoError):
        read_schema(str(tmp_path / "nope.json"))


def test_read_schema_not_utf8(tmp_path):
    path = tmp_path / "schema.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(SchemaParseError):
        read_schema(str(path))


def test_read_schema_rejects_legacy_xml(tmp_path):
    path = tmp_path / "schema.xml"
    path.write_text(
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<Package xmlns:i="http://www.w3.org/2001/XMLSchema-instance"><Files/></Package>\n',
        encoding="utf-8",
    )
    with pytest.raises(SchemaParseError) as info:
        read_schema(str(path))
    assert "XML" in str(info.value)
