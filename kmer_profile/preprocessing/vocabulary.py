from bisect import bisect_left
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple
import string

from loguru import logger

from kmer_profile.errors import FatalIOError, MalformedVocabularyEntry

TRIM_CHARS = string.whitespace + '"'


@dataclass(slots=True)
class VocabularyEntry:
    """One k-mer of the vocabulary and its (raw or rescaled) count."""
    sequence: str
    count: float = 0.0


@dataclass(frozen=True)
class RejectedLine:
    line_number: int
    text: str
    reason: str


class VocabularyStore:
    """
    Sorted table of vocabulary k-mers.

    The key set is fixed at construction; only the ``count`` field of each
    entry changes afterwards. Lookups use binary search over the sorted keys.
    """

    def __init__(self, entries: Iterable[VocabularyEntry], k: int,
                 rejected: Optional[List[RejectedLine]] = None):
        ordered = sorted(entries, key=lambda entry: entry.sequence)
        for entry in ordered:
            if len(entry.sequence) != k:
                raise ValueError(f"Entry {entry.sequence!r} does not have length {k}")
        self.k = k
        self._entries: Tuple[VocabularyEntry, ...] = tuple(ordered)
        self._keys: Tuple[str, ...] = tuple(entry.sequence for entry in ordered)
        self.rejected: List[RejectedLine] = list(rejected or [])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[VocabularyEntry]:
        return iter(self._entries)

    @property
    def sequences(self) -> Tuple[str, ...]:
        return self._keys

    def lookup(self, candidate: str) -> Optional[VocabularyEntry]:
        """Return the entry whose sequence equals ``candidate``, or None."""
        idx = bisect_left(self._keys, candidate)
        if idx < len(self._keys) and self._keys[idx] == candidate:
            return self._entries[idx]
        return None

    def counts(self) -> List[float]:
        return [entry.count for entry in self._entries]

    def total(self) -> float:
        return sum(entry.count for entry in self._entries)

    def reset_counts(self) -> None:
        for entry in self._entries:
            entry.count = 0.0


def parse_vocabulary_line(line: str, line_number: int, k: int) -> Optional[str]:
    """Trim a raw vocabulary line and return the k-mer it holds.

    Returns None for blank lines. Raises MalformedVocabularyEntry when the
    trimmed content is not exactly ``k`` characters long.
    """
    trimmed = line.strip(TRIM_CHARS)
    if not trimmed:
        return None
    if len(trimmed) != k:
        raise MalformedVocabularyEntry(
            line_number,
            trimmed,
            f"Invalid k-mer length in file: '{trimmed}' (length: {len(trimmed)})",
        )
    return trimmed


def build_vocabulary(lines: Iterable[str], k: int) -> VocabularyStore:
    """Build a sorted VocabularyStore from raw text lines.

    Lines with the wrong length and repeated k-mers are skipped with a
    warning and recorded in ``store.rejected``.
    """
    if k < 1:
        raise ValueError(f"k must be positive, got {k}")
    seen = set()
    entries: List[VocabularyEntry] = []
    rejected: List[RejectedLine] = []

    for line_number, line in enumerate(lines, start=1):
        try:
            kmer = parse_vocabulary_line(line, line_number, k)
            if kmer is None:
                continue
            if kmer in seen:
                raise MalformedVocabularyEntry(
                    line_number, kmer, f"Duplicate k-mer in file: '{kmer}'"
                )
        except MalformedVocabularyEntry as exc:
            logger.warning(str(exc))
            rejected.append(RejectedLine(exc.line_number, exc.text, str(exc)))
            continue
        seen.add(kmer)
        entries.append(VocabularyEntry(sequence=kmer))

    store = VocabularyStore(entries, k, rejected)
    if not len(store):
        logger.warning(f"Vocabulary is empty: no k-mer of length {k} was accepted")
    else:
        logger.info(f"Loaded {len(store)} k-mers (k={k}), rejected {len(rejected)} lines")
    return store


def load_vocabulary(path: str | Path, k: int) -> VocabularyStore:
    """Read a vocabulary file and build its store."""
    path = Path(path)
    logger.info(f"Loading k-mer vocabulary from {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return build_vocabulary(f, k)
    except (OSError, UnicodeDecodeError) as exc:
        raise FatalIOError(f"Error opening k-mer file {path}: {exc}") from exc
