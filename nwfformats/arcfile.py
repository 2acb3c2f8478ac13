# arcfile.py - NWF 아카이브의 메모리 내 표현 (엔트리 / 매니페스트)

import os
from typing import Iterator, List, Optional

from nwfres.errors import FormatError

# 글로벌 헤더: magic + reserved + count
HEADER_FIXED_SIZE = 12
# 엔트리 고정부: name_len(4) + flag1(2) + flag2(2) + flag3(4) + offset(4) + size(4)
ENTRY_FIXED_SIZE = 20


# 패킹된 파일 하나의 메타데이터
# flag1~3은 의미 불명. 해석하지 않고 그대로 보존함.
class ArchiveEntry:
    def __init__(self, path: str, flag1: int = 0, flag2: int = 0, flag3: int = 0,
                 offset: int = 0, size: int = 0):
        self.path = path
        self.flag1 = flag1
        self.flag2 = flag2
        self.flag3 = flag3
        self.offset = offset
        self.size = size

    @property
    def name_bytes(self) -> bytes:
        return self.path.encode("utf-8")

    # 테이블 내 이 엔트리 레코드의 길이 (이름은 문자 수가 아니라 바이트 수)
    @property
    def record_size(self) -> int:
        return ENTRY_FIXED_SIZE + len(self.name_bytes)

    def key(self):
        return (self.path, self.flag1, self.flag2, self.flag3)

    def __eq__(self, other):
        if not isinstance(other, ArchiveEntry):
            return NotImplemented
        return self.key() == other.key() and self.offset == other.offset and self.size == other.size

    def __repr__(self):
        return (
            f"<ArchiveEntry path={self.path!r}, flags=({self.flag1}, {self.flag2}, {self.flag3}), "
            f"offset=0x{self.offset:X}, size=0x{self.size:X}>"
        )


# 엔트리 순서 = 디스크 레이아웃 순서. 정렬하지 않음.
class ArchiveManifest:
    def __init__(self, entries: Optional[List[ArchiveEntry]] = None, reserved: int = 0):
        self.entries = list(entries) if entries is not None else []
        self.reserved = reserved

    def __len__(self):
        return len(self.entries)

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter(self.entries)

    def __getitem__(self, index):
        return self.entries[index]

    def __eq__(self, other):
        if not isinstance(other, ArchiveManifest):
            return NotImplemented
        return self.entries == other.entries

    def __repr__(self):
        return f"<ArchiveManifest entries={len(self.entries)}>"

    def append(self, entry: ArchiveEntry):
        self.entries.append(entry)

    # 헤더 길이 = 12 + Σ(20 + 이름 바이트 수). 모든 오프셋은 이 뒤를 가리킴.
    def header_length(self) -> int:
        return HEADER_FIXED_SIZE + sum(e.record_size for e in self.entries)

    # path, flag1~3만 비교 (offset/size는 리팩 때 다시 계산되므로 제외)
    def same_layout(self, other: "ArchiveManifest") -> bool:
        return [e.key() for e in self.entries] == [e.key() for e in other.entries]


# 아카이브 내 경로(/ 또는 \ 구분)를 호스트 경로로 변환
# root 밖을 가리키는 경로(..)는 FormatError
def entry_disk_path(root: str, path: str) -> str:
    parts = [p for p in path.replace("\\", "/").split("/") if p not in ("", ".")]
    if ".." in parts:
        raise FormatError(f"상위 경로 참조가 포함된 엔트리는 허용되지 않습니다: {path}", path=path)
    return os.path.join(root, *parts)
