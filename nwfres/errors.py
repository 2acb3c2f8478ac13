# errors.py - NWF 아카이브 처리 중 발생하는 예외 정의
# 각 예외는 엔트리 경로, 인덱스, 바이트 위치 같은 원인 정보와
# 런처가 사용할 종료 코드를 함께 가짐.

from typing import Optional

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_VERIFY_FAILED = 115


class NwfError(Exception):
    exit_code = EXIT_FAILURE

    def __init__(self, message: str, path: Optional[str] = None, index: Optional[int] = None,
                 position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.index = index
        self.position = position

    def __str__(self):
        context = []
        if self.index is not None:
            context.append(f"entry #{self.index}")
        if self.path is not None:
            context.append(f"path={self.path!r}")
        if self.position is not None:
            context.append(f"at 0x{self.position:X}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


# 매직 넘버 불일치, 음수 카운트/길이 등 포맷 자체가 잘못된 경우
class FormatError(NwfError):
    pass


# 헤더는 그럴듯하지만 스트림이 중간에 끝난 경우 (FormatError와 구분)
class TruncatedArchiveError(NwfError):
    def __init__(self, message: str, expected: Optional[int] = None, available: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.expected = expected
        self.available = available


class SchemaParseError(NwfError):
    pass


class MissingSourceFileError(NwfError):
    def __init__(self, message: str, path: Optional[str] = None, searched: Optional[str] = None, **kwargs):
        super().__init__(message, path=path, **kwargs)
        self.searched = searched


class SizeSanityError(NwfError):
    def __init__(self, message: str, size: Optional[int] = None, limit: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.size = size
        self.limit = limit


# OSError를 감싸는 용도. 원인은 __cause__ 로 전달됨
class IoError(NwfError):
    pass
