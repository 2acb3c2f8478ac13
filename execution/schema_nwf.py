# schema_nwf.py - sbtf_pub.nwf 구조를 JSON 스키마로 저장 (리팩용)

import logging

from nwfres.errors import EXIT_OK
from nwfres.schema import write_schema
from sbtf.nwfunpack import decode
from execution.common import DEFAULT_SCHEMA_FILE, run_guarded


def schema_nwf(nwf_path: str, schema_path: str = DEFAULT_SCHEMA_FILE) -> int:
    logging.info(f"[schema] nwf_path: {nwf_path}, schema_path: {schema_path}")
    manifest = decode(nwf_path)
    write_schema(manifest, schema_path)
    print(f"[완료] {len(manifest)}개 엔트리 스키마 저장 → {schema_path}")
    return EXIT_OK


def main(nwf_path: str, schema_path: str = DEFAULT_SCHEMA_FILE) -> int:
    return run_guarded(schema_nwf, nwf_path, schema_path)
