from pathlib import Path
from typing import Iterable, Iterator, Optional, TextIO
import gzip

from loguru import logger

from kmer_profile.errors import FatalIOError
from kmer_profile.preprocessing.kmer_counter import RunStatistics

AMBIGUOUS_BASE = "N"
DEFAULT_MAX_READ_LENGTH = 1 << 20
GZIP_MAGIC = b"\x1f\x8b"


def open_sequence_file(path: str | Path) -> TextIO:
    """Open a FASTQ file for text reading, decompressing gzip input whatever its name."""
    path = Path(path)
    try:
        with open(path, "rb") as f:
            magic = f.read(len(GZIP_MAGIC))
        if magic == GZIP_MAGIC:
            return gzip.open(path, "rt", encoding="ascii", errors="replace")
        return open(path, "r", encoding="ascii", errors="replace")
    except OSError as exc:
        raise FatalIOError(f"Error opening file {path}: {exc}") from exc


def _strip_terminator(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def iter_sequences(
    lines: Iterable[str],
    stats: RunStatistics,
    max_read_length: int = DEFAULT_MAX_READ_LENGTH,
) -> Iterator[str]:
    """Yield the accepted sequence lines of a 4-line-per-record stream.

    Line numbers start at 1; the 2nd line of every quartet is the sequence.
    Reads containing ``N`` and reads longer than ``max_read_length`` are
    skipped. ``stats`` is updated as records are consumed, so a caller that
    stops iterating early still sees consistent counters.
    """
    line_number = 0
    for line_number, line in enumerate(lines, start=1):
        if line_number % 4 != 2:
            continue
        stats.total_records += 1
        sequence = _strip_terminator(line)

        if len(sequence) > max_read_length:
            stats.skipped_overlong += 1
            logger.warning(
                f"Skipping read at line {line_number}: length {len(sequence)} "
                f"exceeds maximum {max_read_length}"
            )
            continue
        if AMBIGUOUS_BASE in sequence:
            stats.skipped_ambiguous += 1
            logger.debug(f"Skipping read at line {line_number}: contains '{AMBIGUOUS_BASE}'")
            continue

        stats.total_reads_accepted += 1
        if stats.observed_read_length == 0:
            stats.observed_read_length = len(sequence)
        yield sequence

    if line_number % 4:
        logger.warning(
            f"Sequence stream ended inside a record ({line_number} lines, "
            "not a multiple of 4)"
        )


class FastqSequenceReader:
    """
    Stream accepted read sequences from a (optionally gzipped) FASTQ file.

    Iterating opens the file, so the reader is single-pass per iteration and
    an unreadable file fails before any sequence is produced.
    """
    def __init__(self, fastq_file: str | Path, max_read_length: int = DEFAULT_MAX_READ_LENGTH,
                 stats: Optional[RunStatistics] = None):
        self.fastq_file = Path(fastq_file)
        self.max_read_length = max_read_length
        self.stats = stats if stats is not None else RunStatistics()

    def __iter__(self) -> Iterator[str]:
        logger.info(f"Streaming reads from {self.fastq_file}")
        with open_sequence_file(self.fastq_file) as handle:
            try:
                yield from iter_sequences(handle, self.stats, self.max_read_length)
            except (OSError, EOFError) as exc:
                raise FatalIOError(f"Error reading {self.fastq_file}: {exc}") from exc

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        pass
