# unpack_nwf.py - sbtf_pub.nwf 전체 언팩

import os
import time
import logging

from nwfres.errors import EXIT_OK
from sbtf.nwfunpack import MAX_ENTRY_SIZE, NwfUnpacker, decode_stream
from nwfformats.fileview import FileView
from execution.common import DEFAULT_OUTPUT_DIR, run_guarded


def unpack_nwf(nwf_path: str, output_dir: str = DEFAULT_OUTPUT_DIR, max_size: int = MAX_ENTRY_SIZE,
               progress: bool = True) -> int:
    logging.info(f"[unpack] nwf_path: {nwf_path}, output_dir: {output_dir}")
    os.makedirs(output_dir, exist_ok=True)

    start = time.time()
    with FileView(nwf_path) as view:
        manifest = decode_stream(view.stream)
        count = NwfUnpacker(view.stream, max_size=max_size, progress=progress).unpack(manifest, output_dir)
    elapsed = time.time() - start

    print(f"[완료] {count}개 파일 추출 → {output_dir} ({elapsed:.2f}초)")
    print("Done!")
    return EXIT_OK


def main(nwf_path: str, output_dir: str = DEFAULT_OUTPUT_DIR, max_size: int = MAX_ENTRY_SIZE,
         progress: bool = True) -> int:
    return run_guarded(unpack_nwf, nwf_path, output_dir, max_size=max_size, progress=progress)
