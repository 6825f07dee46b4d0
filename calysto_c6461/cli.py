"""
Command line assembler:

    c6461-assemble program.asm

writes txt/program_listing.txt and txt/program_load.txt.
"""

import argparse
import sys

from .assembler import assemble_file
from .errors import C6461Error

def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="c6461-assemble",
        description="Two-pass assembler for the C6461",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  c6461-assemble test.asm\n"
               "  c6461-assemble --outdir build test.asm\n")
    parser.add_argument("source", help="assembly source file (.asm)")
    parser.add_argument("--outdir", default="txt",
                        help="directory for the listing and load files (default: txt)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="do not report the files written")
    args = parser.parse_args(argv)

    try:
        assembly, listing, load = assemble_file(args.source, args.outdir)
    except C6461Error as exc:
        print("error: %s" % exc, file=sys.stderr)
        return 1
    if not args.quiet:
        print("Wrote listing: %s" % listing)
        print("Wrote load:    %s (%d word(s))" % (load, len(assembly.records)))
    return 0

if __name__ == "__main__":
    sys.exit(main())
