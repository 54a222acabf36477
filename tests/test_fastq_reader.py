import gzip
import random

import pytest

from kmer_profile.errors import FatalIOError
from kmer_profile.preprocessing.fastq_reader import FastqSequenceReader, iter_sequences
from kmer_profile.preprocessing.kmer_counter import RunStatistics


def _records(*sequences):
    lines = []
    for i, seq in enumerate(sequences):
        lines.extend([f"@r{i}\n", seq + "\n", "+\n", "I" * len(seq) + "\n"])
    return lines


def test_yields_only_sequence_lines():
    stats = RunStatistics()

    reads = list(iter_sequences(_records("ACGT", "GGCC"), stats))

    assert reads == ["ACGT", "GGCC"]
    assert stats.total_reads_accepted == 2
    assert stats.total_records == 2


def test_read_with_n_is_skipped():
    stats = RunStatistics()

    reads = list(iter_sequences(_records("ACGNT"), stats))

    assert reads == []
    assert stats.total_reads_accepted == 0
    assert stats.skipped_ambiguous == 1


def test_observed_length_comes_from_first_accepted_read():
    stats = RunStatistics()

    reads = list(iter_sequences(_records("NNNNNN", "ACG", "ACGTACGT"), stats))

    assert reads == ["ACG", "ACGTACGT"]
    assert stats.observed_read_length == 3


def test_only_line_terminator_is_stripped():
    stats = RunStatistics()
    lines = ["@r\n", " ACGT \r\n", "+\n", "IIIIII\n"]

    assert list(iter_sequences(lines, stats)) == [" ACGT "]


def test_last_line_without_terminator():
    stats = RunStatistics()

    assert list(iter_sequences(["@r\n", "ACGT"], stats)) == ["ACGT"]


def test_overlong_reads_are_rejected():
    stats = RunStatistics()

    reads = list(iter_sequences(_records("A" * 20, "ACGT"), stats, max_read_length=10))

    assert reads == ["ACGT"]
    assert stats.skipped_overlong == 1


def test_stream_can_be_abandoned_between_records():
    stats = RunStatistics()
    reads = iter_sequences(_records("AAAA", "CCCC", "GGGG"), stats)

    assert next(reads) == "AAAA"

    assert stats.total_reads_accepted == 1


def test_reader_handles_gzip(write_fastq):
    path = write_fastq(["ACGTACGT", "TTNTT", "CCCC"])
    reader = FastqSequenceReader(path)

    with reader:
        reads = list(reader)

    assert reads == ["ACGTACGT", "CCCC"]
    assert reader.stats.total_reads_accepted == 2
    assert reader.stats.skipped_ambiguous == 1


def test_reader_handles_plain_text(write_fastq):
    path = write_fastq(["ACGT"], name="reads.fastq")

    assert list(FastqSequenceReader(path)) == ["ACGT"]


def test_gzip_is_detected_from_content_not_name(tmp_path):
    path = tmp_path / "reads.fastq"
    with gzip.open(path, "wt") as f:
        f.write("@r0\nAAAAAAAAAA\n+\nIIIIIIIIII\n")

    assert list(FastqSequenceReader(path)) == ["AAAAAAAAAA"]


def test_plain_text_named_gz_is_read_as_text(write_fastq):
    path = write_fastq(["ACGT"], name="reads.fastq")
    renamed = path.rename(path.with_name("reads.fastq.gz"))

    assert list(FastqSequenceReader(renamed)) == ["ACGT"]


def test_missing_file_is_fatal(tmp_path):
    reader = FastqSequenceReader(tmp_path / "missing.fastq.gz")

    with pytest.raises(FatalIOError):
        list(reader)


def test_corrupt_gzip_is_fatal(tmp_path):
    path = tmp_path / "broken.fastq.gz"
    path.write_bytes(b"\x1f\x8bthis is not gzip data\n")

    with pytest.raises(FatalIOError):
        list(FastqSequenceReader(path))


def test_truncated_gzip_keeps_counts_read_so_far(tmp_path):
    path = tmp_path / "truncated.fastq.gz"
    rng = random.Random(0)
    records = []
    for i in range(2000):
        seq = "".join(rng.choice("ACGT") for _ in range(50))
        records.append(f"@r{i}\n{seq}\n+\n{'I' * 50}\n")
    payload = gzip.compress("".join(records).encode("ascii"))
    path.write_bytes(payload[: len(payload) // 2])
    reader = FastqSequenceReader(path)

    with pytest.raises(FatalIOError):
        list(reader)
    assert reader.stats.total_reads_accepted > 0
