# repack_nwf.py - JSON 스키마 + 원본 폴더 → sbtf_pub.nwf 리팩

import logging

from nwfres.errors import EXIT_OK
from nwfres.schema import read_schema
from sbtf.nwfrepack import encode, plan
from execution.common import DEFAULT_NWF_FILE, DEFAULT_OUTPUT_DIR, run_guarded


def repack_nwf(schema_path: str, source_dir: str = DEFAULT_OUTPUT_DIR, nwf_path: str = DEFAULT_NWF_FILE,
               progress: bool = True) -> int:
    logging.debug(f"[repack] 스키마: {schema_path}")
    logging.debug(f"[repack] 입력 폴더: {source_dir}")
    logging.debug(f"[repack] 출력 파일: {nwf_path}")

    manifest = read_schema(schema_path)
    manifest = plan(manifest, source_dir)
    encode(manifest, source_dir, nwf_path, progress=progress)

    print(f"[완료] 리팩 성공 → {nwf_path} ({len(manifest)}개 파일)")
    return EXIT_OK


def main(schema_path: str, source_dir: str = DEFAULT_OUTPUT_DIR, nwf_path: str = DEFAULT_NWF_FILE,
         progress: bool = True) -> int:
    return run_guarded(repack_nwf, schema_path, source_dir, nwf_path, progress=progress)
