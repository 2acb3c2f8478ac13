# schema.py - 매니페스트 ↔ 편집 가능한 JSON 스키마 변환
# 리팩 시 중요함! path, flag1~3만 의미가 있고 offset/size는 참고용.
#
# {
#   "format": "nwf",
#   "version": 1,
#   "files": [
#     {"path": "data/a.bin", "flag1": 0, "flag2": 1, "flag3": 0, "offset": "0x3F", "size": "0x3"},
#     ...
#   ]
# }

import io
import json
import logging
from typing import Any

from nwfformats.arcfile import ArchiveEntry, ArchiveManifest
from nwfres.errors import IoError, SchemaParseError
from nwfres.utility import fits_int16, fits_int32, get_hex, to_int

SCHEMA_FORMAT = "nwf"
SCHEMA_VERSION = 1

REQUIRED_FIELDS = ("path", "flag1", "flag2", "flag3")


class SchemaWriter:
    def __init__(self, include_layout: bool = True):
        self.include_layout = include_layout

    def to_records(self, manifest: ArchiveManifest) -> list[dict[str, Any]]:
        records = []
        for entry in manifest:
            record = {
                "path": entry.path,
                "flag1": entry.flag1,
                "flag2": entry.flag2,
                "flag3": entry.flag3,
            }
            if self.include_layout:
                record["offset"] = get_hex(entry.offset)
                record["size"] = get_hex(entry.size)
            records.append(record)
        return records

    def dumps(self, manifest: ArchiveManifest) -> str:
        document = {
            "format": SCHEMA_FORMAT,
            "version": SCHEMA_VERSION,
            "files": self.to_records(manifest),
        }
        return json.dumps(document, ensure_ascii=False, indent=2) + "\n"

    def write(self, manifest: ArchiveManifest, output: io.TextIOBase):
        output.write(self.dumps(manifest))
        logging.info(f"[schema] {len(manifest)}개 엔트리 스키마 저장 완료")


class SchemaReader:
    def loads(self, text: str) -> ArchiveManifest:
        # 예전 툴의 schema.xml
        if text.lstrip("\ufeff \t\r\n").startswith("<"):
            raise SchemaParseError("XML 스키마는 지원하지 않습니다. schema 명령으로 JSON 스키마를 다시 만드세요.")
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaParseError(f"JSON 파싱 실패: {e.msg} (line {e.lineno}, column {e.colno})") from e

        # 레코드 리스트만 있는 파일도 허용
        if isinstance(document, list):
            records = document
        elif isinstance(document, dict):
            if "files" not in document:
                raise SchemaParseError("'files' 항목이 없습니다")
            records = document["files"]
            fmt = document.get("format")
            if fmt is not None and fmt != SCHEMA_FORMAT:
                logging.warning(f"[schema] 알 수 없는 format 값: {fmt!r}")
        else:
            raise SchemaParseError(f"최상위 구조가 잘못됨: {type(document).__name__}")

        if not isinstance(records, list):
            raise SchemaParseError(f"'files'는 리스트여야 합니다: {type(records).__name__}")

        manifest = ArchiveManifest()
        for index, record in enumerate(records):
            manifest.append(self._parse_record(index, record))

        logging.info(f"[schema] {len(manifest)}개 엔트리 불러옴")
        return manifest

    def _parse_record(self, index: int, record) -> ArchiveEntry:
        if not isinstance(record, dict):
            raise SchemaParseError(f"레코드가 객체가 아닙니다: {type(record).__name__}", index=index)

        for key in REQUIRED_FIELDS:
            if key not in record:
                raise SchemaParseError(f"필수 필드 누락: '{key}'", index=index, path=record.get("path"))

        path = record["path"]
        if not isinstance(path, str) or not path:
            raise SchemaParseError(f"path는 비어있지 않은 문자열이어야 합니다: {path!r}", index=index)

        flag1 = self._int_field(index, record, "flag1", fits_int16)
        flag2 = self._int_field(index, record, "flag2", fits_int16)
        flag3 = self._int_field(index, record, "flag3", fits_int32)

        # offset/size는 참고용. 잘못된 값이어도 무시 (리팩 때 재계산)
        offset = self._hint_field(record, "offset")
        size = self._hint_field(record, "size")

        return ArchiveEntry(path, flag1, flag2, flag3, offset=offset, size=size)

    @staticmethod
    def _int_field(index, record, key, fits) -> int:
        try:
            value = to_int(record[key])
        except ValueError as e:
            raise SchemaParseError(f"'{key}' 값이 정수가 아닙니다: {record[key]!r}",
                                   index=index, path=record.get("path")) from e
        if not fits(value):
            raise SchemaParseError(f"'{key}' 값이 범위를 벗어남: {value}", index=index, path=record.get("path"))
        return value

    @staticmethod
    def _hint_field(record, key) -> int:
        if key not in record:
            return 0
        try:
            return to_int(record[key])
        except ValueError:
            logging.debug(f"[schema] {record.get('path')}: '{key}' 참고값 무시 ({record[key]!r})")
            return 0


def dumps(manifest: ArchiveManifest, include_layout: bool = True) -> str:
    return SchemaWriter(include_layout).dumps(manifest)


def loads(text: str) -> ArchiveManifest:
    return SchemaReader().loads(text)


def write_schema(manifest: ArchiveManifest, path: str, include_layout: bool = True):
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            SchemaWriter(include_layout).write(manifest, f)
    except OSError as e:
        raise IoError(f"스키마 저장 실패: {e}", path=path) from e


def read_schema(path: str) -> ArchiveManifest:
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise SchemaParseError(f"스키마 파일이 UTF-8이 아닙니다: {e.reason}", path=path) from e
    except OSError as e:
        raise IoError(f"스키마 읽기 실패: {e}", path=path) from e
    return loads(text)
