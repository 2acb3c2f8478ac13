# utility.py - NWF 툴 공용 헬퍼
# 엔디안 변환, 느슨한 정수 변환(스키마용), 로거 설정을 모아둠.

import os
import struct
import logging
from logging.handlers import RotatingFileHandler

# ============================
# Endian Utilities
# ============================
INT16_MIN, INT16_MAX = -0x8000, 0x7FFF
INT32_MIN, INT32_MAX = -0x80000000, 0x7FFFFFFF


class LittleEndian:
    @staticmethod
    def ToInt32(buf, index):
        return int.from_bytes(buf[index:index+4], 'little', signed=True)

    @staticmethod
    def GetBytes16(val: int) -> bytes:
        return struct.pack('<h', val)

    @staticmethod
    def GetBytes32(val: int) -> bytes:
        return struct.pack('<i', val)


def fits_int16(val) -> bool:
    return isinstance(val, int) and INT16_MIN <= val <= INT16_MAX


def fits_int32(val) -> bool:
    return isinstance(val, int) and INT32_MIN <= val <= INT32_MAX


# "0x3F" 같은 16진 문자열, 10진 문자열, int 모두 허용. bool은 거부.
def to_int(val):
    if isinstance(val, bool):
        raise ValueError(f"정수가 아님: {val!r}")
    if isinstance(val, int):
        return val
    if isinstance(val, str):
        return int(val.strip(), 0)
    raise ValueError(f"정수가 아님: {val!r}")


def get_hex(val):
    return f"0x{val:X}" if isinstance(val, int) and val >= 0 else val


# ============================
# 로거 설정
# ============================
class SafeRotatingFileHandler(RotatingFileHandler):
    def doRollover(self):
        try:
            super().doRollover()
        except OSError as e:
            logging.warning(f"[SafeRotatingFileHandler] 롤오버 실패 (무시됨): {e}")


def setup_logging(log_path: str = "nwf_runlog.txt", console_level=logging.WARNING,
                  max_bytes: int = 10_000_000, backup_count: int = 5):
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if log_path:
        log_dir = os.path.dirname(os.path.abspath(log_path))
        os.makedirs(log_dir, exist_ok=True)
        file_handler = SafeRotatingFileHandler(
            log_path,
            mode='a',
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    # 콘솔 로그도 병렬 출력
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    return logger
