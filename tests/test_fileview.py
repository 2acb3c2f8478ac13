import io
import os
import struct

import pytest

from nwfformats.arcfile import ArchiveEntry, ArchiveManifest, entry_disk_path
from nwfformats.fileview import FileView, Reader
from nwfres.errors import FormatError, IoError, TruncatedArchiveError
from nwfres.utility import to_int


def test_reader_reads_little_endian_values():
    reader = Reader(io.BytesIO(struct.pack("<hi", -2, 0x6E776660) + b"name"))
    assert reader.read_int16() == -2
    assert reader.read_int32() == 0x6E776660
    assert reader.read_string(4) == "name"
    assert reader.tell() == 10
    assert reader.remaining() == 0


def test_reader_short_read_reports_position():
    reader = Reader(io.BytesIO(b"\x01\x00\x00\x00\x02\x00"))
    reader.read_int32()
    with pytest.raises(TruncatedArchiveError) as info:
        reader.read_int32()
    assert info.value.position == 4
    assert (info.value.expected, info.value.available) == (4, 2)


def test_fileview_closes_on_exit(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"0123456789")
    with FileView(str(path)) as view:
        assert view.size == 10
        assert view.name == "data.bin"
        assert Reader(view.stream).read_bytes(4) == b"0123"
    assert view.file.closed


def test_fileview_missing_file(tmp_path):
    with pytest.raises(IoError) as info:
        FileView(str(tmp_path / "missing.nwf"))
    assert isinstance(info.value.__cause__, FileNotFoundError)


def test_manifest_header_length():
    manifest = ArchiveManifest([ArchiveEntry("a.bin", size=3), ArchiveEntry("bb.bin", size=5)])
    assert manifest.header_length() == 63
    assert ArchiveManifest().header_length() == 12


def test_manifest_same_layout_ignores_offsets():
    a = ArchiveManifest([ArchiveEntry("x", 1, 2, 3, offset=10, size=4)])
    b = ArchiveManifest([ArchiveEntry("x", 1, 2, 3)])
    assert a.same_layout(b)
    assert a != b
    assert not a.same_layout(ArchiveManifest([ArchiveEntry("x", 1, 2, 4)]))


@pytest.mark.parametrize("path", ["dir/sub/file.txt", "dir\\sub\\file.txt", "/dir//sub/./file.txt"])
def test_entry_disk_path_uses_host_separators(path):
    assert entry_disk_path("root", path) == os.path.join("root", "dir", "sub", "file.txt")


@pytest.mark.parametrize("path", ["../escaped.bin", "dir/../../x", "a\\..\\..\\b"])
def test_entry_disk_path_rejects_parent_references(path):
    with pytest.raises(FormatError) as info:
        entry_disk_path("root", path)
    assert info.value.path == path


@pytest.mark.parametrize("value, expected", [(5, 5), ("0x3F", 63), ("-12", -12), (" 7 ", 7)])
def test_to_int(value, expected):
    assert to_int(value) == expected


@pytest.mark.parametrize("value", [None, 1.0, True, "x1", [1]])
def test_to_int_rejects(value):
    with pytest.raises(ValueError):
        to_int(value)
