"""
K-mer frequency profiling of sequencing reads.

Counts how often each k-mer of a fixed vocabulary occurs in the reads of a
FASTQ file and rescales the counts so that they sum to the size of the full
k-mer space (4^k for DNA), giving a signature that is comparable across
datasets sequenced at different depths.

Key Components:
- preprocessing/vocabulary.py: sorted k-mer vocabulary with binary-search lookup
- preprocessing/fastq_reader.py: streaming FASTQ sequence reader (gzip aware)
- preprocessing/kmer_counter.py: sliding-window exact-match counting
- preprocessing/normalizer.py: rescaling of counts to alphabet_size^k
- pipeline.py: configuration, orchestration and run metadata
"""

from .preprocessing.vocabulary import (
    VocabularyEntry,
    VocabularyStore,
    build_vocabulary,
    load_vocabulary,
)
from .preprocessing.fastq_reader import FastqSequenceReader, iter_sequences
from .preprocessing.kmer_counter import RunStatistics, count_windows, count_reads
from .preprocessing.normalizer import normalize_counts
from .pipeline import run_profile

__all__ = [
    "VocabularyEntry",
    "VocabularyStore",
    "build_vocabulary",
    "load_vocabulary",
    "FastqSequenceReader",
    "iter_sequences",
    "RunStatistics",
    "count_windows",
    "count_reads",
    "normalize_counts",
    "run_profile",
]
