# common.py - 실행 드라이버 공용 처리 (예외 → 종료 코드)

import logging

from nwfres.errors import EXIT_FAILURE, NwfError

EXIT_INTERRUPTED = 130

DEFAULT_OUTPUT_DIR = "output"
DEFAULT_SCHEMA_FILE = "schema.json"
DEFAULT_NWF_FILE = "sbtf_pub.nwf"
DEFAULT_LOG_FILE = "nwf_runlog.txt"


def run_guarded(task, *args, **kwargs) -> int:
    name = getattr(task, "__name__", "task")
    try:
        return task(*args, **kwargs)

    except NwfError as e:
        logging.error(f"[{name}] {type(e).__name__}: {e}")
        if e.__cause__ is not None:
            logging.debug(f"[{name}] 원인: {e.__cause__!r}")
        print(f"[오류] {e}")
        return e.exit_code

    except KeyboardInterrupt:
        print("\n[취소] 사용자에 의해 중단되었습니다.")
        logging.warning(f"[{name}] 사용자 중단 (Ctrl+C)")
        return EXIT_INTERRUPTED

    except Exception as e:
        logging.exception(f"[{name}] 예외 발생: {e}")
        print("예기치 않은 오류가 발생했습니다. 자세한 내용은 로그 파일을 확인하세요.")
        return EXIT_FAILURE
