# nwfrepack.py - 스키마 + 원본 폴더로 .nwf 아카이브 재구성
#
# 1. RepackPlanner: 원본 파일 존재 확인 → 헤더 길이 계산 → 실제 파일 크기로 size/offset 재계산
# 2. NwfWriter: 헤더 + 엔트리 테이블 작성 후 테이블 순서대로 파일 데이터 복사
# offset/size는 Writer가 계산하지 않음. 반드시 Planner를 먼저 거칠 것.

import os
import struct
import logging
import tempfile
from typing import BinaryIO, Callable

from tqdm import tqdm

from nwfformats.arcfile import ArchiveManifest, entry_disk_path
from nwfres.errors import FormatError, IoError, MissingSourceFileError, NwfError
from nwfres.utility import INT32_MAX, LittleEndian
from sbtf.nwfunpack import NWF_MAGIC

COPY_CHUNK = 0x10000

ContentProvider = Callable[[str], BinaryIO]


class RepackPlanner:
    def __init__(self, source_dir: str):
        self.source_dir = source_dir

    def source_path(self, path: str) -> str:
        return entry_disk_path(self.source_dir, path)

    # 첫 번째로 없는 파일에서 바로 중단 (전체 목록을 모으지 않음)
    def check_sources(self, manifest: ArchiveManifest):
        for i, entry in enumerate(manifest):
            try:
                in_path = self.source_path(entry.path)
            except NwfError as e:
                e.index = i
                raise
            if not os.path.isfile(in_path):
                searched = os.path.abspath(in_path)
                raise MissingSourceFileError(
                    f"The schema wants file \"{entry.path}\", but I can't find it at {searched}",
                    path=entry.path, searched=searched, index=i
                )

    def plan(self, manifest: ArchiveManifest) -> ArchiveManifest:
        self.check_sources(manifest)

        # 오프셋보다 헤더 길이를 먼저 계산해야 함 (모든 오프셋은 테이블 뒤를 가리킴)
        header_length = manifest.header_length()
        current_offset = header_length
        logging.debug(f"[nwfrepack] 헤더 길이: {header_length} bytes ({len(manifest)}개 엔트리)")

        for i, entry in enumerate(manifest):
            in_path = self.source_path(entry.path)
            try:
                size = os.path.getsize(in_path)
            except OSError as e:
                raise IoError(f"파일 크기를 확인할 수 없습니다: {e}", path=entry.path, index=i) from e

            if size > INT32_MAX:
                raise FormatError(f"파일이 너무 큽니다 ({size} bytes)", path=entry.path, index=i)
            if current_offset > INT32_MAX:
                raise FormatError(f"오프셋이 int32 범위를 넘습니다: {current_offset}", path=entry.path, index=i)

            if entry.size and entry.size != size:
                logging.warning(f"[nwfrepack] {entry.path}: 스키마 size {entry.size} → 실제 {size}")

            entry.size = size
            entry.offset = current_offset
            current_offset += size

        logging.info(f"[nwfrepack] 오프셋 계산 완료 (예상 아카이브 크기 {current_offset} bytes)")
        return manifest


def plan(manifest: ArchiveManifest, source_dir: str) -> ArchiveManifest:
    return RepackPlanner(source_dir).plan(manifest)


class NwfWriter:
    def __init__(self, manifest: ArchiveManifest, progress: bool = False):
        self.manifest = manifest
        self.progress = progress

    def build_header(self) -> bytes:
        output = bytearray()
        # Magic number, reserved(항상 0), file count
        output += LittleEndian.GetBytes32(NWF_MAGIC)
        output += LittleEndian.GetBytes32(0)
        output += LittleEndian.GetBytes32(len(self.manifest))

        for i, entry in enumerate(self.manifest):
            name_bytes = entry.name_bytes
            try:
                output += LittleEndian.GetBytes32(len(name_bytes))
                output += name_bytes
                output += LittleEndian.GetBytes16(entry.flag1)
                output += LittleEndian.GetBytes16(entry.flag2)
                output += LittleEndian.GetBytes32(entry.flag3)
                output += LittleEndian.GetBytes32(entry.offset)
                output += LittleEndian.GetBytes32(entry.size)
            except struct.error as e:
                raise FormatError(f"엔트리 필드를 기록할 수 없습니다: {e}", path=entry.path, index=i) from e

        if len(output) != self.manifest.header_length():
            raise FormatError(f"헤더 길이 불일치: {len(output)} != {self.manifest.header_length()}")
        logging.info(f"[nwfrepack] 헤더 작성 완료 ({len(output)} bytes, 엔트리 {len(self.manifest)}개)")
        return bytes(output)

    def write(self, output: BinaryIO, content_provider: ContentProvider):
        try:
            output.write(self.build_header())
        except OSError as e:
            raise IoError(f"헤더 쓰기 실패: {e}") from e

        entries = enumerate(self.manifest)
        if self.progress:
            entries = tqdm(entries, total=len(self.manifest), desc="Repacking", unit="file")

        for i, entry in entries:
            try:
                with content_provider(entry.path) as src:
                    self._copy_exact(src, output, entry.size, entry.path)
            except NwfError as e:
                if e.index is None:
                    e.index = i
                raise
            except OSError as e:
                raise IoError(f"데이터 복사 실패: {e}", path=entry.path, index=i) from e
            logging.debug(f"[nwfrepack] {entry.path} 기록 (offset=0x{entry.offset:X}, size={entry.size})")

    @staticmethod
    def _copy_exact(src: BinaryIO, dst: BinaryIO, size: int, path: str):
        remaining = size
        while remaining > 0:
            chunk = src.read(min(COPY_CHUNK, remaining))
            if not chunk:
                raise IoError(f"원본 데이터가 {remaining} bytes 부족합니다 (파일이 변경되었나요?)", path=path)
            dst.write(chunk)
            remaining -= len(chunk)


def encode_stream(manifest: ArchiveManifest, output: BinaryIO, content_provider: ContentProvider,
                  progress: bool = False):
    NwfWriter(manifest, progress=progress).write(output, content_provider)


# 임시 파일에 먼저 쓰고 성공했을 때만 대상 경로로 교체 (실패 시 부분 아카이브를 남기지 않음)
def encode(manifest: ArchiveManifest, source_dir: str, out_path: str, progress: bool = False):
    def open_source(path: str) -> BinaryIO:
        return open(entry_disk_path(source_dir, path), "rb")

    out_dir = os.path.dirname(os.path.abspath(out_path))
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".nwf-", suffix=".tmp", dir=out_dir)
    except OSError as e:
        raise IoError(f"출력 파일을 만들 수 없습니다: {e}", path=out_path) from e

    try:
        with os.fdopen(fd, "wb") as out_file:
            encode_stream(manifest, out_file, open_source, progress=progress)
        # mkstemp는 0600으로 만들므로 일반 파일 생성과 같은 권한(umask 적용)으로 맞춤
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, out_path)
    except OSError as e:
        _discard(tmp_path)
        raise IoError(f"아카이브 저장 실패: {e}", path=out_path) from e
    except BaseException:
        _discard(tmp_path)
        raise

    logging.info(f"[nwfrepack] 리팩 성공 → {out_path}")


def _current_umask() -> int:
    # 조회 전용 API가 없어서 설정 후 바로 되돌림
    umask = os.umask(0)
    os.umask(umask)
    return umask


def _discard(tmp_path: str):
    try:
        os.remove(tmp_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logging.warning(f"[nwfrepack] 임시 파일 삭제 실패: {tmp_path} ({e})")


# plan + encode
def repack(manifest: ArchiveManifest, source_dir: str, out_path: str, progress: bool = False) -> ArchiveManifest:
    planned = plan(manifest, source_dir)
    encode(planned, source_dir, out_path, progress=progress)
    return planned
