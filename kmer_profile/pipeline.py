import yaml
from pathlib import Path
from datetime import datetime, timezone
import json
import sys
from typing import Optional, TextIO
from pydantic import ValidationError

from kmer_profile.errors import ConfigError, FatalIOError
from kmer_profile.schemas import ProfileConfig, RunSummary
from kmer_profile.utils.logging_setup import setup_logging
from kmer_profile.preprocessing.vocabulary import load_vocabulary
from kmer_profile.preprocessing.fastq_reader import FastqSequenceReader
from kmer_profile.preprocessing.kmer_counter import RunStatistics, count_reads
from kmer_profile.preprocessing.normalizer import normalize_counts, normalization_target
from kmer_profile.output import write_profile, profile_to_frame, save_profile_table

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / 'config' / 'pipeline.yaml'


def load_config(config_path: str | Path | None = None) -> dict:
    """Load the raw run configuration from a YAML file.

    Without a path, ``config/pipeline.yaml`` next to the package is used when it
    exists (source checkouts); otherwise the built-in defaults apply.
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.is_file():
            return {}
        config_path = DEFAULT_CONFIG_PATH
    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise FatalIOError(f"Error opening config file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def merge_overrides(cfg: dict, overrides: Optional[dict]) -> dict:
    """Return ``cfg`` with nested ``overrides`` applied; None values are ignored."""
    merged = {key: dict(value) if isinstance(value, dict) else value for key, value in cfg.items()}
    for section, values in (overrides or {}).items():
        if isinstance(values, dict):
            target = merged.setdefault(section, {})
            if not isinstance(target, dict):
                raise ConfigError(f"Config section '{section}' must be a mapping")
            target.update({key: value for key, value in values.items() if value is not None})
        elif values is not None:
            merged[section] = values
    return merged


def build_config(config_path: str | Path | None = None, overrides: Optional[dict] = None) -> ProfileConfig:
    raw = merge_overrides(load_config(config_path), overrides)
    try:
        return ProfileConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def run_profile(
    fastq_path: str | Path,
    kmers_path: str | Path,
    output_path: str | Path,
    config_path: str | Path | None = None,
    overrides: Optional[dict] = None,
    echo_stream: Optional[TextIO] = None,
) -> dict:
    """Count vocabulary k-mers in a FASTQ file and write the normalized profile.

    Parameters
    ----------
    fastq_path : FASTQ file with the reads, gzipped or plain.
    kmers_path : Vocabulary file, one k-mer per line.
    output_path : Destination of the ``<kmer>:<frequency>`` lines.
    config_path : YAML configuration file (``config/pipeline.yaml`` by default).
    overrides : Nested mapping applied on top of the configuration file.
    echo_stream : Stream used when ``output.echo`` is enabled (stdout by default).

    Returns
    -------
    dict : Run metadata (paths, configuration and statistics).
    """
    cfg = build_config(config_path, overrides)
    logger_obj = setup_logging(cfg.logging.logs_dir, cfg.logging.level)
    logger_obj.info(f'Starting k-mer profile with fastq={fastq_path}, kmers={kmers_path}, k={cfg.kmer.k}')

    store = load_vocabulary(kmers_path, cfg.kmer.k)

    stats = RunStatistics()
    reader = FastqSequenceReader(fastq_path, max_read_length=cfg.reads.max_read_length, stats=stats)
    count_reads(reader, store, stats)
    logger_obj.info(
        f"Accepted {stats.total_reads_accepted:,} of {stats.total_records:,} reads "
        f"({stats.skipped_ambiguous:,} with N, {stats.skipped_overlong:,} too long); "
        f"read length {stats.observed_read_length}"
    )

    raw_total = normalize_counts(
        store,
        alphabet_size=cfg.kmer.alphabet_size,
        k=cfg.kmer.k,
        on_zero_total=cfg.normalization.on_zero_total,
    )

    echo = None
    if cfg.output.echo:
        echo = echo_stream if echo_stream is not None else sys.stdout
    output_path = write_profile(store, output_path, echo=echo, precision=cfg.output.precision)

    table_path = None
    if cfg.output.table_csv:
        table_path = Path(cfg.output.table_csv)
        save_profile_table(profile_to_frame(store), table_path)
        logger_obj.info(f'Profile table written to {table_path}')

    summary = RunSummary(
        vocabulary_size=len(store),
        rejected_vocabulary_lines=len(store.rejected),
        raw_total=raw_total,
        target_total=normalization_target(cfg.kmer.alphabet_size, cfg.kmer.k),
        **stats.to_dict(),
    )
    meta = {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'fastq': str(fastq_path),
        'kmers': str(kmers_path),
        'output': str(output_path),
        'table_csv': str(table_path) if table_path else None,
        'config': cfg.model_dump(),
        'statistics': summary.model_dump(),
    }

    if cfg.output.metadata_json:
        meta_path = Path(cfg.output.metadata_json)
        try:
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            with open(meta_path, 'w') as f:
                json.dump(meta, f, indent=2)
        except OSError as exc:
            raise FatalIOError(f"Error writing metadata {meta_path}: {exc}") from exc
        logger_obj.info(f'Metadata written to {meta_path}')
    return meta
