#!/usr/bin/env python3
"""
Heartlight volume extractor.

Extracts the graphics and sound assets packed into the tail of the Heartlight
executable. Every entry is written to the output directory under its stored
name, replacing any file of the same name.
"""

import argparse
import concurrent.futures
import contextlib
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from . import cipher
from .decompress import expand
from .errors import CorruptionError, FormatError, IoError, VolumeError
from .footer import read_exact, read_footer, source_length, volume_footer
from .table import file_entry, read_file_table

__version__ = "1.0.0"

log = logging.getLogger(__name__)

DEFAULT_INFILE = "HL.EXE"
DEFAULT_OUTDIR = "extracted"


def setup_logging(verbose: bool):
    """Configure logging output."""
    level = logging.DEBUG if verbose else logging.INFO
    format_str = "%(levelname)s: %(message)s" if not verbose else "%(asctime)s %(levelname)s: %(message)s"
    logging.basicConfig(level=level, format=format_str)


def output_name(entry: file_entry) -> str:
    """entry name checked for use as a plain file name"""
    name = entry.name
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise FormatError(f"unusable entry name {name!r}", entry_name=name)
    return name


def write_atomic(path: Path, data: bytes) -> None:
    """write through a temporary sibling so a failure never leaves a short file"""
    tmp = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as f:
            tmp = Path(f.name)
            f.write(data)
        os.replace(tmp, path)
    except OSError as e:
        if tmp is not None:
            with contextlib.suppress(OSError):
                tmp.unlink()
        raise IoError(f"failed to write {path}: {e}", entry_name=path.name) from e


class volume_extractor:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.length = 0
        self.footer: Optional[volume_footer] = None
        self.data_base = 0
        self.entries: List[file_entry] = []

    def load(self) -> None:
        """read footer and file table"""
        try:
            with open(self.path, "rb") as source:
                self.length = source_length(source)
                self.footer, self.data_base = read_footer(source, self.length)
                self.entries = read_file_table(source, self.footer, self.length)
        except OSError as e:
            raise IoError(f"cannot read {self.path}: {e}") from e
        log.info(f"found {len(self.entries)} file entries")

    def decode_entry(self, source: BinaryIO, entry: file_entry) -> bytes:
        """read, decode and, if flagged, decompress one entry"""
        offset = entry.data_offset(self.data_base)
        try:
            data = cipher.decode(read_exact(source, offset, entry.stored_size))
            if entry.is_compressed:
                try:
                    return expand(data, entry.escape_byte, entry.decoded_size)
                except CorruptionError as e:
                    # stream positions map 1:1 onto container bytes
                    if e.offset is not None:
                        e.offset += offset
                    raise

            if len(data) < entry.decoded_size:
                raise CorruptionError(
                    f"stored size {entry.stored_size} is smaller than "
                    f"decoded size {entry.decoded_size}"
                )
            if len(data) > entry.decoded_size:
                log.warning(
                    f"{entry.name}: stored size {entry.stored_size} exceeds "
                    f"decoded size {entry.decoded_size}, truncating"
                )
                data = data[: entry.decoded_size]
            return data
        except VolumeError as e:
            raise e.with_context(entry.name, offset)

    def _decode_detached(self, entry: file_entry) -> bytes:
        # worker threads each get their own handle
        try:
            with open(self.path, "rb") as source:
                return self.decode_entry(source, entry)
        except OSError as e:
            raise IoError(
                f"cannot read {self.path}: {e}",
                entry_name=entry.name,
                offset=entry.data_offset(self.data_base),
            ) from e

    def _report(self, entry: file_entry) -> None:
        if entry.is_compressed:
            sizes = f"{entry.decoded_size:>5} ({entry.stored_size:>5} compressed)"
        else:
            sizes = f"{entry.decoded_size:>5} (  not compressed)"
        log.info(
            f"extracting {entry.name:<13} size: {sizes}, "
            f"offset: 0x{entry.data_offset(self.data_base):x}"
        )

    def _emit(self, output_dir: Path, name: str, entry: file_entry, data: bytes) -> None:
        try:
            write_atomic(output_dir / name, data)
        except VolumeError as e:
            raise e.with_context(entry.name, entry.data_offset(self.data_base))

    def extract_all(self, output_dir: Union[str, Path], jobs: int = 1) -> int:
        """extract every entry in table order, return the number written

        the first error aborts the run; files already written stay in place.
        """
        if self.footer is None:
            self.load()
        if jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {jobs}")

        output_dir = Path(output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoError(f"cannot create output directory {output_dir}: {e}") from e

        names = [output_name(entry) for entry in self.entries]

        if jobs == 1 or len(self.entries) < 2:
            try:
                with open(self.path, "rb") as source:
                    for entry, name in zip(self.entries, names):
                        self._report(entry)
                        self._emit(output_dir, name, entry, self.decode_entry(source, entry))
            except OSError as e:
                raise IoError(f"cannot read {self.path}: {e}") from e
        else:
            executor = concurrent.futures.ThreadPoolExecutor(max_workers=jobs)
            try:
                results = executor.map(self._decode_detached, self.entries)
                for entry, name, data in zip(self.entries, names, results):
                    self._report(entry)
                    self._emit(output_dir, name, entry, data)
            finally:
                executor.shutdown(wait=True, cancel_futures=True)

        log.info(f"extracted {len(self.entries)} files to {output_dir}")
        return len(self.entries)


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return n


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Extract graphics and sound assets from the Heartlight executable",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s                              # HL.EXE -> ./extracted
  %(prog)s --infile=game/HL.EXE         # read a different executable
  %(prog)s --outdir=assets -j 4         # decode with four workers
        """)

    parser.add_argument('--infile', type=Path, default=Path(DEFAULT_INFILE),
                        help=f'extract data from FILE (default: "{DEFAULT_INFILE}")')
    parser.add_argument('--outdir', type=Path, default=Path(DEFAULT_OUTDIR),
                        help=f'write extracted files to DIR (default: "{DEFAULT_OUTDIR}")')
    parser.add_argument('-j', '--jobs', type=positive_int, default=1,
                        help="number of entries decoded in parallel (default: 1)")
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
        extractor.extract_all(args.outdir, jobs=args.jobs)
    except VolumeError as e:
        logging.error(f"extraction failed: {e}")
        return 1
    except OSError as e:
        logging.error(f"i/o error: {e}")
        return 1
    except KeyboardInterrupt:
        logging.error("interrupted by user")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
