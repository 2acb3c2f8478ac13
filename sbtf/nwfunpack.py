# nwfunpack.py - Space Beast Terror Fright의 .nwf(sbtf_pub.nwf) 아카이브 읽기
#
# Header:   int32 magic(0x6E776660), int32 reserved, int32 entry_count
# Entry[i]: int32 name_len, byte[name_len] name(UTF-8),
#           int16 flag1, int16 flag2, int32 flag3, int32 offset, int32 size
# Content:  엔트리 테이블 순서대로 이어 붙인 파일 데이터
# 모든 정수는 리틀 엔디안.

import os
import logging
from typing import BinaryIO

from tqdm import tqdm

from nwfformats.arcfile import ArchiveEntry, ArchiveManifest, entry_disk_path
from nwfformats.fileview import FileView, Reader
from nwfres.errors import FormatError, IoError, NwfError, SizeSanityError, TruncatedArchiveError
from nwfres.utility import LittleEndian

NWF_MAGIC = 0x6E776660
# 언팩 시 엔트리 하나당 최대 크기 (50 MiB)
MAX_ENTRY_SIZE = 52428800


# 앞 4바이트만 검사. 4바이트 미만이면 예외 없이 False.
def verify_stream(stream: BinaryIO) -> bool:
    try:
        head = stream.read(4)
    except OSError as e:
        logging.warning(f"[nwfunpack] verify 읽기 실패: {e}")
        return False
    if head is None or len(head) < 4:
        logging.debug(f"[nwfunpack] verify: 4바이트 미만 ({0 if head is None else len(head)} bytes)")
        return False
    magic = LittleEndian.ToInt32(head, 0)
    logging.debug(f"[nwfunpack] verify: magic=0x{magic & 0xFFFFFFFF:08X}")
    return magic == NWF_MAGIC


def verify(path: str) -> bool:
    with FileView(path) as view:
        return verify_stream(view.stream)


class NwfOpener:
    # 헤더와 엔트리 테이블을 읽어 매니페스트 생성
    def read_manifest(self, stream: BinaryIO) -> ArchiveManifest:
        reader = Reader(stream)

        magic = reader.read_int32()
        if magic != NWF_MAGIC:
            raise FormatError(f"매직 넘버가 올바르지 않습니다: 0x{magic & 0xFFFFFFFF:08X}", position=0)

        reserved = reader.read_int32()
        if reserved != 0:
            logging.warning(f"[nwfunpack] 예약 필드가 0이 아님: 0x{reserved & 0xFFFFFFFF:08X}")

        count = reader.read_int32()
        if count < 0:
            raise FormatError(f"엔트리 수가 음수입니다: {count}", position=8)
        logging.info(f"[nwfunpack] 엔트리 수: {count}")

        manifest = ArchiveManifest(reserved=reserved)
        for i in range(count):
            try:
                manifest.append(self._read_entry(reader))
            except NwfError as e:
                if e.index is None:
                    e.index = i
                raise

        logging.info(f"[nwfunpack] 엔트리 테이블 읽기 완료 (헤더 길이 {reader.tell()} bytes)")
        return manifest

    def _read_entry(self, reader: Reader) -> ArchiveEntry:
        name_pos = reader.tell()
        name_len = reader.read_int32()
        if name_len < 0:
            raise FormatError(f"이름 길이가 음수입니다: {name_len}", position=name_pos)

        remaining = reader.remaining()
        if remaining is not None and name_len > remaining:
            raise TruncatedArchiveError(
                f"이름 길이 {name_len} bytes가 남은 데이터보다 큼",
                expected=name_len, available=remaining, position=reader.tell()
            )

        try:
            name = reader.read_string(name_len)
        except UnicodeDecodeError as e:
            raise FormatError(f"이름이 올바른 UTF-8이 아닙니다: {e.reason}", position=name_pos + 4 + e.start) from e

        flag1 = reader.read_int16()
        flag2 = reader.read_int16()
        flag3 = reader.read_int32()
        offset = reader.read_int32()
        size = reader.read_int32()

        logging.debug(f"[nwfunpack] {name}: flags=({flag1}, {flag2}, {flag3}), offset={offset}, size={size}")
        return ArchiveEntry(name, flag1, flag2, flag3, offset=offset, size=size)


def decode_stream(stream: BinaryIO) -> ArchiveManifest:
    return NwfOpener().read_manifest(stream)


def decode(path: str) -> ArchiveManifest:
    with FileView(path) as view:
        manifest = decode_stream(view.stream)
    logging.info(f"[nwfunpack] '{path}' 디코드 완료: {len(manifest)}개 엔트리")
    return manifest


class NwfUnpacker:
    def __init__(self, stream: BinaryIO, max_size: int = MAX_ENTRY_SIZE, progress: bool = False):
        self.stream = stream
        self.max_size = max_size
        self.progress = progress

    # 매니페스트 순서대로 추출. 하나라도 실패하면 나머지는 중단.
    def unpack(self, manifest: ArchiveManifest, output_dir: str) -> int:
        total = len(manifest)
        entries = enumerate(manifest)
        if self.progress:
            entries = tqdm(entries, total=total, desc="Unpacking", unit="file")

        written = 0
        for i, entry in entries:
            logging.info(f"[nwfunpack] Reading file {entry.path}... ({i + 1}/{total})")
            try:
                self.extract_entry(entry, output_dir)
            except NwfError as e:
                if e.index is None:
                    e.index = i
                if e.path is None:
                    e.path = entry.path
                logging.error(f"[nwfunpack] 추출 실패 ({i + 1}/{total}): {e}")
                raise
            written += 1

        return written

    def read_entry(self, entry: ArchiveEntry) -> bytes:
        if entry.size > self.max_size:
            raise SizeSanityError(
                f"파일 크기 검사 실패 (size {entry.size} > {self.max_size})",
                size=entry.size, limit=self.max_size, path=entry.path
            )
        if entry.size < 0 or entry.offset < 0:
            raise FormatError(f"잘못된 범위 (offset={entry.offset}, size={entry.size})", path=entry.path)

        try:
            self.stream.seek(entry.offset)
            data = self.stream.read(entry.size)
        except OSError as e:
            raise IoError(f"읽기 실패: {e}", path=entry.path, position=entry.offset) from e

        if len(data) != entry.size:
            raise TruncatedArchiveError(
                f"데이터가 부족합니다 ({entry.size} bytes 필요, {len(data)} bytes 남음)",
                expected=entry.size, available=len(data), path=entry.path, position=entry.offset
            )
        return data

    def extract_entry(self, entry: ArchiveEntry, output_dir: str) -> str:
        out_path = entry_disk_path(output_dir, entry.path)
        data = self.read_entry(entry)
        try:
            dir_name = os.path.dirname(out_path)
            if dir_name:
                os.makedirs(dir_name, exist_ok=True)
            with open(out_path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise IoError(f"쓰기 실패: {e}", path=entry.path) from e
        logging.debug(f"[nwfunpack] {entry.path} → {out_path} ({entry.size} bytes)")
        return out_path


def unpack_stream(stream: BinaryIO, manifest: ArchiveManifest, output_dir: str,
                  max_size: int = MAX_ENTRY_SIZE, progress: bool = False) -> int:
    return NwfUnpacker(stream, max_size=max_size, progress=progress).unpack(manifest, output_dir)


def unpack(path: str, manifest: ArchiveManifest, output_dir: str,
           max_size: int = MAX_ENTRY_SIZE, progress: bool = False) -> int:
    with FileView(path) as view:
        return unpack_stream(view.stream, manifest, output_dir, max_size=max_size, progress=progress)
