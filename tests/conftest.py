import gzip
import sys
from pathlib import Path

import pytest

# Ensure the project root is on PYTHONPATH so tests can import "kmer_profile"
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def fastq_text(sequences):
    lines = []
    for i, seq in enumerate(sequences, start=1):
        lines.extend([f"@read{i}", seq, "+", "I" * len(seq)])
    return "\n".join(lines) + "\n"


@pytest.fixture
def write_fastq(tmp_path):
    def _write(sequences, name="reads.fastq.gz"):
        path = tmp_path / name
        text = fastq_text(sequences)
        if name.endswith(".gz"):
            with gzip.open(path, "wt") as f:
                f.write(text)
        else:
            path.write_text(text)
        return path
    return _write


@pytest.fixture
def write_kmers(tmp_path):
    def _write(lines, name="kmers.csv"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path
    return _write


@pytest.fixture(autouse=True)
def reset_logging():
    # sink resolves sys.stderr at write time
    yield
    from loguru import logger

    logger.remove()
    logger.add(lambda message: sys.stderr.write(message), level="DEBUG")
