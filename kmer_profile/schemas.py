from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Literal

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class KmerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    k: int = Field(8, ge=1, le=32, description="Length of every vocabulary k-mer")
    alphabet_size: int = Field(4, ge=1, le=256, description="Alphabet size used for the normalization target")


class ReadSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_read_length: int = Field(1 << 20, ge=1, description="Sequence lines longer than this are rejected")


class NormalizationSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    on_zero_total: Literal["error", "zero"] = Field(
        "error", description="Fail, or keep zero counts, when no k-mer was matched"
    )


class OutputSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    precision: int = Field(6, ge=0, le=17, description="Digits after the decimal point")
    echo: bool = Field(False, description="Also print the profile to stdout")
    table_csv: Optional[str] = Field(None, description="Optional CSV export of the profile")
    metadata_json: Optional[str] = Field(None, description="Optional JSON file with run statistics")


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: LogLevel = "INFO"
    logs_dir: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, value):
        # loguru level names are case-sensitive
        return value.upper() if isinstance(value, str) else value


class ProfileConfig(BaseModel):
    """Complete configuration of a profiling run."""
    model_config = ConfigDict(extra="forbid")

    kmer: KmerSettings = Field(default_factory=KmerSettings)
    reads: ReadSettings = Field(default_factory=ReadSettings)
    normalization: NormalizationSettings = Field(default_factory=NormalizationSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class RunSummary(BaseModel):
    """Statistics reported at the end of a run."""
    vocabulary_size: int = Field(..., ge=0)
    rejected_vocabulary_lines: int = Field(..., ge=0)
    total_reads_accepted: int = Field(..., ge=0)
    total_records: int = Field(..., ge=0)
    skipped_ambiguous: int = Field(..., ge=0)
    skipped_overlong: int = Field(..., ge=0)
    observed_read_length: int = Field(..., ge=0)
    total_windows_scanned: int = Field(..., ge=0)
    total_windows_matched: int = Field(..., ge=0)
    raw_total: float = Field(..., ge=0)
    target_total: float = Field(..., gt=0)
