from dataclasses import dataclass, asdict
from typing import Iterable

from loguru import logger

from kmer_profile.preprocessing.vocabulary import VocabularyStore


@dataclass
class RunStatistics:
    """Counters collected while streaming reads through the window counter."""
    total_windows_matched: int = 0
    total_reads_accepted: int = 0
    # Length of the first accepted read; later reads are not checked against it.
    observed_read_length: int = 0
    total_records: int = 0
    skipped_ambiguous: int = 0
    skipped_overlong: int = 0
    total_windows_scanned: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def count_windows(record: str, store: VocabularyStore, stats: RunStatistics) -> int:
    """Slide a window of length ``store.k`` over ``record`` and count matches.

    Every start offset from 0 to ``len(record) - k`` is looked up, so
    overlapping occurrences each count once per position. Returns the number
    of matched windows in this record.
    """
    k = store.k
    n_windows = len(record) - k + 1
    if n_windows <= 0:
        return 0

    matched = 0
    lookup = store.lookup
    for i in range(n_windows):
        entry = lookup(record[i:i + k])
        if entry is not None:
            entry.count += 1
            matched += 1

    stats.total_windows_scanned += n_windows
    stats.total_windows_matched += matched
    return matched


def count_reads(reads: Iterable[str], store: VocabularyStore, stats: RunStatistics) -> RunStatistics:
    """Run the window counter over every read of a stream."""
    for read in reads:
        count_windows(read, store, stats)
    logger.info(
        f"Counted {stats.total_windows_matched:,} matching windows "
        f"in {stats.total_reads_accepted:,} reads"
    )
    return stats
