import io
import struct

import pytest

MAGIC = 0x6E776660


# 테스트용 .nwf 바이트열 생성 (nwfrepack과 독립적으로 직접 조립)
def build_nwf(files, reserved=0, count=None):
    header_len = 12 + sum(20 + len(path.encode("utf-8")) for path, _flags, _data in files)
    out = bytearray(struct.pack("<iii", MAGIC, reserved, len(files) if count is None else count))
    offset = header_len
    for path, (flag1, flag2, flag3), data in files:
        name = path.encode("utf-8")
        out += struct.pack("<i", len(name)) + name
        out += struct.pack("<hhiii", flag1, flag2, flag3, offset, len(data))
        offset += len(data)
    for _path, _flags, data in files:
        out += data
    return bytes(out)


SAMPLE_FILES = [
    ("a.bin", (1, -2, 3), b"abc"),
    ("bb.bin", (0, 0, 0), b"hello"),
    ("sounds/beast/roar.ogg", (7, 32767, -1), b"OggS" + bytes(range(60))),
]


@pytest.fixture
def nwf_builder():
    return build_nwf


@pytest.fixture
def sample_bytes():
    return build_nwf(SAMPLE_FILES)


@pytest.fixture
def sample_stream(sample_bytes):
    return io.BytesIO(sample_bytes)


@pytest.fixture
def sample_archive(tmp_path, sample_bytes):
    path = tmp_path / "sbtf_pub.nwf"
    path.write_bytes(sample_bytes)
    return path


@pytest.fixture
def source_dir(tmp_path):
    root = tmp_path / "src"
    for path, _flags, data in SAMPLE_FILES:
        target = root.joinpath(*path.split("/"))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    return root


@pytest.fixture
def sample_files():
    return list(SAMPLE_FILES)
