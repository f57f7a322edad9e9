"""
DC42 Extraction Configuration
=============================

Defaults for the ``dc42 extract`` command. Configuration can come from:
- Default values (defined here)
- Environment variables (ExtractConfig.from_env)
- Command-line options, which always take precedence

Environment variables (all optional):
    DC42_OUTPUT_DIR: Directory to extract into
    DC42_INCLUDE_TAGS: Also write the tag block (1/true/yes/on)
    DC42_VERIFY: Verify checksums before writing (1/true/yes/on)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os


_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class ExtractConfig:
    """
    Configuration for image extraction.

    Attributes:
        output_dir: Where to write files (None = input file name without suffix)
        include_tags: Write the tag block as a .tags file when present
        verify: Report checksum verdicts before writing
        data_extension: Suffix for the extracted data block
        tag_extension: Suffix for the extracted tag block
    """
    output_dir: Optional[Path] = None
    include_tags: bool = False
    verify: bool = False
    data_extension: str = ".dsk"
    tag_extension: str = ".tags"

    @classmethod
    def from_env(cls) -> "ExtractConfig":
        """Create an ExtractConfig from DC42_* environment variables."""
        config = cls()

        if output_dir := os.environ.get("DC42_OUTPUT_DIR"):
            config.output_dir = Path(output_dir)

        if include_tags := os.environ.get("DC42_INCLUDE_TAGS"):
            config.include_tags = _env_flag(include_tags)

        if verify := os.environ.get("DC42_VERIFY"):
            config.verify = _env_flag(verify)

        return config

    def resolve_output_dir(self, input_path: Path) -> Path:
        """Get the output directory, defaulting to the input's stem."""
        if self.output_dir is not None:
            return self.output_dir
        return Path(input_path.stem)
