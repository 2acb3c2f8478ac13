# fileview.py - .nwf 파일을 읽기 위한 뷰와 순차 리더
# FileView: 아카이브 파일 핸들을 소유 (열기 실패는 IoError)
# Reader: 임의의 바이너리 스트림 위에서 리틀 엔디안 값을 순차적으로 읽는 래퍼

import os
import struct
import logging
from typing import BinaryIO

from nwfres.errors import IoError, TruncatedArchiveError


class FileView:
    def __init__(self, filepath: str):
        self.filepath = filepath
        self.name = os.path.basename(filepath)
        try:
            self.file = open(filepath, "rb")
            self.size = os.fstat(self.file.fileno()).st_size
        except OSError as e:
            raise IoError(f"파일을 열 수 없습니다: {e}", path=filepath) from e
        self.stream = self.file

        logging.debug(f"[fileview] '{self.name}' 열림 (크기: {self.size} bytes)")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        if not self.file.closed:
            self.file.close()
            logging.debug(f"[fileview] '{self.name}' 닫힘")


# 스트림 위치를 직접 추적하는 순차 리더
class Reader:
    def __init__(self, stream: BinaryIO):
        self.stream = stream
        try:
            self.offset = stream.tell()
        except OSError as e:
            raise IoError(f"스트림 위치를 알 수 없습니다: {e}") from e

    def read_bytes(self, size: int) -> bytes:
        try:
            data = self.stream.read(size)
        except OSError as e:
            raise IoError(f"읽기 실패: {e}", position=self.offset) from e
        if data is None:
            data = b""
        if len(data) != size:
            raise TruncatedArchiveError(
                f"스트림이 예상보다 일찍 끝남 ({size} bytes 필요, {len(data)} bytes 읽음)",
                expected=size, available=len(data), position=self.offset
            )
        self.offset += size
        return data

    def read_int16(self) -> int:
        return struct.unpack('<h', self.read_bytes(2))[0]

    def read_int32(self) -> int:
        return struct.unpack('<i', self.read_bytes(4))[0]

    # 잘못된 바이트열은 UnicodeDecodeError 그대로 전달 (strict)
    def read_string(self, size: int, encoding: str = 'utf-8') -> str:
        return self.read_bytes(size).decode(encoding)

    def remaining(self):
        # 스트림 전체 크기를 알 수 있는 경우에만 사용
        try:
            here = self.stream.tell()
            end = self.stream.seek(0, os.SEEK_END)
            self.stream.seek(here)
        except (OSError, AttributeError, ValueError):
            return None
        return end - here

    def tell(self) -> int:
        return self.offset
