# verify_nwf.py - 언팩 가능한 .nwf 파일인지 확인

import logging

from nwfres.errors import EXIT_OK, EXIT_VERIFY_FAILED
from sbtf.nwfunpack import verify
from execution.common import run_guarded


def verify_nwf(file_path: str) -> int:
    if verify(file_path):
        logging.info(f"[verify] 확인 완료: {file_path}")
        print("File successfully verified.")
        return EXIT_OK

    logging.warning(f"[verify] 매직 넘버 불일치: {file_path}")
    print("File verification failed. File must be a sbtf_pub.nwf from update 60.")
    return EXIT_VERIFY_FAILED


def main(file_path: str) -> int:
    return run_guarded(verify_nwf, file_path)
