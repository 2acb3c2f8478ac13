# cli_launcher.py - SBTF NWF UnPacker / RePacker CLI
#
#   unpack <sbtf_pub.nwf> [-o output]
#   schema <sbtf_pub.nwf> [schema.json]
#   repack <schema.json> [output] [sbtf_pub.nwf]
#   verify <file>

import sys
import logging
import argparse

from nwfres.utility import setup_logging
from sbtf.nwfunpack import MAX_ENTRY_SIZE
from execution import repack_nwf, schema_nwf, unpack_nwf, verify_nwf
from execution.common import DEFAULT_LOG_FILE, DEFAULT_NWF_FILE, DEFAULT_OUTPUT_DIR, DEFAULT_SCHEMA_FILE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sbtftool", description="Space Beast Terror Fright .nwf unpacker / repacker")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE, help="Log file path (empty to disable)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show INFO logs on the console")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars")
    sub = parser.add_subparsers(dest="verb", required=True)

    p = sub.add_parser("unpack", help="Unpack a .nwf file")
    p.add_argument("nwf_file", help="Path to your sbtf_pub.nwf file")
    p.add_argument("-o", "--output", default=DEFAULT_OUTPUT_DIR, help="Directory to unpack files into")
    p.add_argument("--max-size", type=int, default=MAX_ENTRY_SIZE, help="Per-file size sanity limit in bytes")

    p = sub.add_parser("schema", help="Save the structure of a sbtf_pub.nwf file as JSON (for use in repacking)")
    p.add_argument("nwf_file", help="sbtf_pub.nwf file to generate schema from")
    p.add_argument("schema_file", nargs="?", default=DEFAULT_SCHEMA_FILE, help="Output file location")

    p = sub.add_parser("repack", help="Pack files back into .nwf")
    p.add_argument("schema_file", help="JSON schema file to use for the packing")
    p.add_argument("source_folder", nargs="?", default=DEFAULT_OUTPUT_DIR,
                   help="Source folder containing all the assets to put into the sbtf_pub.nwf file")
    p.add_argument("nwf_file", nargs="?", default=DEFAULT_NWF_FILE, help="Path of the output file")

    p = sub.add_parser("verify", help="Checks if the file is a valid .nwf file that can be unpacked.")
    p.add_argument("file_to_verify", help="The file that is being verified.")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file or None, logging.INFO if args.verbose else logging.WARNING)
    progress = not args.no_progress
    logging.info(f"==== 실행 시작: {args.verb} ====")

    if args.verb == "unpack":
        return unpack_nwf.main(args.nwf_file, args.output, max_size=args.max_size, progress=progress)
    if args.verb == "schema":
        return schema_nwf.main(args.nwf_file, args.schema_file)
    if args.verb == "repack":
        return repack_nwf.main(args.schema_file, args.source_folder, args.nwf_file, progress=progress)
    return verify_nwf.main(args.file_to_verify)


if __name__ == "__main__":
    code = main()
    logging.info("==== 실행 종료 ====")
    logging.shutdown()
    sys.exit(code)
