from typing import Literal
import math

import numpy as np
from loguru import logger

from kmer_profile.errors import DegenerateNormalizationError
from kmer_profile.preprocessing.vocabulary import VocabularyStore

ZeroTotalPolicy = Literal["error", "zero"]
SUM_TOLERANCE = 1e-6


def normalization_target(alphabet_size: int, k: int) -> float:
    """Size of the full k-mer space, ``alphabet_size ** k``."""
    if alphabet_size < 1 or k < 1:
        raise ValueError(f"alphabet_size and k must be positive, got {alphabet_size}, {k}")
    try:
        return float(alphabet_size ** k)
    except OverflowError as exc:
        raise DegenerateNormalizationError(
            f"Normalization target {alphabet_size}^{k} does not fit in a float"
        ) from exc


def normalize_counts(
    store: VocabularyStore,
    alphabet_size: int = 4,
    k: int | None = None,
    on_zero_total: ZeroTotalPolicy = "error",
) -> float:
    """Rescale the store's counts in place so that they sum to ``alphabet_size ** k``.

    Parameters
    ----------
    store : VocabularyStore
        Store whose counts are rescaled.
    alphabet_size : int
        Number of symbols in the alphabet (4 for DNA).
    k : int, optional
        K-mer length; defaults to the store's own ``k``.
    on_zero_total : {"error", "zero"}
        What to do when no k-mer was counted. ``"error"`` raises
        DegenerateNormalizationError, ``"zero"`` keeps every count at 0.

    Returns
    -------
    float : The raw total the counts were divided by.
    """
    k = store.k if k is None else k
    target = normalization_target(alphabet_size, k)
    counts = np.fromiter((entry.count for entry in store), dtype=np.float64, count=len(store))
    total = float(counts.sum())

    if total == 0.0:
        if on_zero_total == "zero":
            logger.warning("No vocabulary k-mer was matched; leaving all counts at zero")
            store.reset_counts()
            return 0.0
        raise DegenerateNormalizationError(
            f"Cannot normalize: total count is zero over {len(store)} k-mers"
        )
    if not math.isfinite(total) or total < 0:
        raise DegenerateNormalizationError(f"Cannot normalize: invalid total count {total}")

    scaled = counts * target / total
    for entry, value in zip(store, scaled):
        entry.count = float(value)

    rescaled_total = float(scaled.sum())
    if not np.isclose(rescaled_total, target, rtol=SUM_TOLERANCE, atol=0.0):
        raise ArithmeticError(
            f"Normalized counts sum to {rescaled_total}, expected {target}"
        )
    logger.info(f"Normalized {len(store)} k-mer counts: raw total {total:g} -> {target:g}")
    return total
