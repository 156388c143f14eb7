#!/usr/bin/env python3
"""list the file table of a Heartlight volume without extracting anything"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from .errors import VolumeError
from .extract import DEFAULT_INFILE, __version__, setup_logging, volume_extractor


def format_table(extractor: volume_extractor) -> List[str]:
    """one line per entry"""
    lines = []
    for entry in extractor.entries:
        flag = "lz" if entry.is_compressed else "--"
        lines.append(
            f"  {entry.name:<13} {flag} {entry.decoded_size:>8} {entry.stored_size:>8} "
            f"{entry.data_offset(extractor.data_base):>8x}  esc {entry.escape_byte:02x}"
        )
    return lines


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="List the files packed into the Heartlight executable"
    )
    parser.add_argument('infile', nargs='?', type=Path, default=Path(DEFAULT_INFILE),
                        help=f'volume to inspect (default: "{DEFAULT_INFILE}")')
    parser.add_argument('-v', '--verbose', action='store_true', help="verbose output")
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.infile.is_file():
        logging.error(f"input file not found: {args.infile}")
        return 1

    try:
        extractor = volume_extractor(args.infile)
        extractor.load()
    except VolumeError as e:
        logging.error(f"cannot read volume: {e}")
        return 1

    for line in format_table(extractor):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
