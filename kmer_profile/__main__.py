import argparse
import sys
from typing import Optional, Sequence

from loguru import logger

from kmer_profile.errors import KmerProfileError
from kmer_profile.pipeline import run_profile


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kmer_profile",
        description="Count vocabulary k-mers in a FASTQ file and normalize them to 4^k",
    )
    parser.add_argument("fastq_file", help="Input FASTQ file (gzip or plain text)")
    parser.add_argument("kmers_file", help="Vocabulary file with one k-mer per line")
    parser.add_argument("output_file", help="Output file for <kmer>:<frequency> lines")
    parser.add_argument("--config", "-c", default=None, help="YAML configuration file (default config/pipeline.yaml)")
    parser.add_argument("--kmer-length", "-k", type=int, default=None, help="K-mer length (default 8)")
    parser.add_argument(
        "--echo", action="store_true", default=None, help="Also print the profile to stdout"
    )
    parser.add_argument(
        "--on-zero-total",
        choices=["error", "zero"],
        default=None,
        help="Fail, or write zero counts, when no k-mer is matched",
    )
    parser.add_argument("--table", default=None, help="Also write the profile as CSV")
    parser.add_argument("--metadata", default=None, help="Write run statistics as JSON")
    parser.add_argument("--log-level", default=None, help="Logging level (default INFO)")
    parser.add_argument("--log-dir", default=None, help="Directory for a rotating log file")
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict:
    return {
        "kmer": {"k": args.kmer_length},
        "normalization": {"on_zero_total": args.on_zero_total},
        "output": {"echo": args.echo, "table_csv": args.table, "metadata_json": args.metadata},
        "logging": {"level": args.log_level, "logs_dir": args.log_dir},
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        run_profile(
            args.fastq_file,
            args.kmers_file,
            args.output_file,
            config_path=args.config,
            overrides=overrides_from_args(args),
        )
    except KmerProfileError as exc:
        logger.error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
