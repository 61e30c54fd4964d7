"""Configuration management for the amplicon aligner."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from .exceptions import ConfigurationError


@dataclass
class AlignerConfig:
    """Aligner run settings."""

    amplicon_file: Path
    read1_file: Path
    read2_file: Path
    output_prefix: str = "output"
    min_insert_size: int = 5
    max_quality: int = 40
    phred_offset: int = 33
    max_mismatch_fraction: float = 0.05
    max_mapping_quality: int = 60
    sync_check_reads: int = 14
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.amplicon_file = Path(self.amplicon_file)
        self.read1_file = Path(self.read1_file)
        self.read2_file = Path(self.read2_file)
        self.output_prefix = str(self.output_prefix)

        for parameter in ("amplicon_file", "read1_file", "read2_file"):
            path = getattr(self, parameter)
            if not path.exists():
                raise ConfigurationError(f"Input file not found: {path}", parameter=parameter)

        if not self.output_prefix:
            raise ConfigurationError("Output prefix must not be empty", parameter="output_prefix")

        if self.min_insert_size < 0:
            raise ConfigurationError(f"Invalid min_insert_size: {self.min_insert_size}")

        if self.max_quality <= 0 or self.max_quality > 93:
            raise ConfigurationError(f"Invalid max_quality: {self.max_quality}")

        if self.phred_offset not in (33, 64):
            raise ConfigurationError(f"Invalid phred_offset: {self.phred_offset}")

        if not 0.0 <= self.max_mismatch_fraction <= 1.0:
            raise ConfigurationError(f"Invalid max_mismatch_fraction: {self.max_mismatch_fraction}")

        if self.max_mapping_quality < 0 or self.max_mapping_quality > 254:
            raise ConfigurationError(f"Invalid max_mapping_quality: {self.max_mapping_quality}")

        if self.sync_check_reads < 1:
            raise ConfigurationError(f"Invalid sync_check_reads: {self.sync_check_reads}")

        if str(self.log_level).upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")

    @property
    def sam_file(self) -> Path:
        """Path of the SAM output."""
        return Path(f"{self.output_prefix}.sam")

    @property
    def stats_file(self) -> Path:
        """Path of the mapping statistics report."""
        return Path(f"{self.output_prefix}_MappingStats.txt")

    @property
    def sample_name(self) -> str:
        """Sample name used for read group tags."""
        return Path(self.output_prefix).name

    @classmethod
    def from_yaml(cls, yaml_file: Path, **overrides) -> "AlignerConfig":
        """Load configuration from YAML file, letting keyword overrides win."""
        yaml_file = Path(yaml_file)
        if not yaml_file.exists():
            raise ConfigurationError(f"Config file not found: {yaml_file}")

        try:
            with open(yaml_file, 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML config: {e}", config_file=str(yaml_file))

        if not isinstance(data, dict):
            raise ConfigurationError("Expected a mapping at the top level", config_file=str(yaml_file))

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown parameters: {', '.join(unknown)}", config_file=str(yaml_file)
            )

        data.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid config parameters: {e}", config_file=str(yaml_file))

    @classmethod
    def from_args(cls, args: dict) -> "AlignerConfig":
        """Create configuration from command-line arguments."""
        # Map command-line argument names to config field names
        arg_mapping = {
            'amplicons': 'amplicon_file',
            'read1': 'read1_file',
            'read2': 'read2_file',
            'prefix': 'output_prefix',
            'log_level': 'log_level',
        }

        config_args = {}
        for arg_name, config_name in arg_mapping.items():
            if arg_name in args and args[arg_name] is not None:
                config_args[config_name] = args[arg_name]

        try:
            return cls(**config_args)
        except TypeError as e:
            raise ConfigurationError(f"Missing required arguments: {e}")
