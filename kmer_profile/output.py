from pathlib import Path
from typing import Optional, TextIO

import pandas as pd
from loguru import logger

from kmer_profile.errors import FatalIOError
from kmer_profile.preprocessing.vocabulary import VocabularyStore


def format_profile_line(sequence: str, count: float, precision: int = 6) -> str:
    return f"{sequence}:{count:.{precision}f}"


def write_profile(store: VocabularyStore, output_path: str | Path, echo: Optional[TextIO] = None,
                  precision: int = 6) -> Path:
    """Write ``<kmer>:<count>`` lines in the store's sorted order.

    When ``echo`` is given, every line is also written to that stream.
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="ascii") as f:
            for entry in store:
                line = format_profile_line(entry.sequence, entry.count, precision)
                f.write(line + "\n")
                if echo is not None:
                    echo.write(line + "\n")
    except OSError as exc:
        raise FatalIOError(f"Error opening output file {output_path}: {exc}") from exc
    logger.info(f"Wrote {len(store)} k-mer frequencies to {output_path}")
    return output_path


def profile_to_frame(store: VocabularyStore) -> pd.DataFrame:
    return pd.DataFrame(
        {"kmer": list(store.sequences), "count": store.counts()},
        columns=["kmer", "count"],
    )


def save_profile_table(df: pd.DataFrame, output_csv: str | Path):
    try:
        Path(output_csv).parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_csv, index=False)
    except OSError as exc:
        raise FatalIOError(f"Error writing profile table {output_csv}: {exc}") from exc
