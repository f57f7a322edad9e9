"""
dc42 - Disk Copy 4.2 Image Tool
===============================

This module implements the command-line interface for reading Disk Copy
4.2 images. It provides tools for inspecting, verifying, and extracting
the data and tag blocks of an image.

Commands
--------
- **extract**: Write the data block (.dsk) and optionally the tag block (.tags)
- **info**: Show the decoded header
- **verify**: Check the stored data and tag checksums
- **tags**: List the MFS tag records stored in the tag block

Usage Examples
--------------
Extract an image into a directory named after the file:
    $ dc42 extract "MacWrite 4.5.image"

Extract with tags and checksum verification into ./out:
    $ dc42 extract -o out --include-tags --verify "MacWrite 4.5.image"

Show header information:
    $ dc42 info "MacWrite 4.5.image"

Verify checksums (exit code 4 on mismatch):
    $ dc42 verify "MacWrite 4.5.image"
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional

import click

from dc42 import __version__
from dc42.cli.errors import ExitCode, handle_cli_exception
from dc42.config import ExtractConfig
from dc42.image import ChecksumReport, DiskCopyImage

logger = logging.getLogger(__name__)

# Characters rejected in file names on Windows, macOS or Linux
_INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores the verbosity selected on the command group.
    """

    def __init__(self) -> None:
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.INFO
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def sanitize_name(name: str, fallback: str) -> str:
    """
    Make an image name safe to use as a file name.

    Invalid characters are replaced with underscores. Names that are
    empty (or only dots and spaces) are replaced by fallback.
    """
    safe = _INVALID_NAME_CHARS.sub("_", name).strip()
    if not safe.strip("."):
        return fallback
    return safe


def _load_image(input_file: Path, verbose: bool) -> DiskCopyImage:
    """Read an image, turning any failure into a CLI exit."""
    try:
        return DiskCopyImage.from_file(input_file)
    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Read")


def _echo_summary(image: DiskCopyImage) -> None:
    header = image.header
    click.echo(f"Image Name:    {header.image_name}")
    click.echo(f"Disk Encoding: {header.encoding.get_description()}")
    click.echo(f"Disk Format:   {header.format.get_description()}")
    click.echo(f"Data Size:     {header.data_size} bytes")
    click.echo(f"Tag Size:      {header.tag_size} bytes")


def _echo_checksums(report: ChecksumReport) -> None:
    if report.data_valid:
        click.echo(f"Data checksum valid: 0x{report.calculated_data_checksum:08X}")
    else:
        click.echo(
            f"Data checksum MISMATCH: expected 0x{report.stored_data_checksum:08X}, "
            f"got 0x{report.calculated_data_checksum:08X}"
        )
        logger.warning("Data block checksum does not match header")

    if report.tag_valid:
        click.echo(f"Tag checksum valid:  0x{report.calculated_tag_checksum:08X}")
    else:
        click.echo(
            f"Tag checksum MISMATCH: expected 0x{report.stored_tag_checksum:08X}, "
            f"got 0x{report.calculated_tag_checksum:08X}"
        )
        logger.warning("Tag block checksum does not match header")


PARTIAL_SUFFIX = ".part"


def _write_outputs(outputs: list[tuple[str, Path, bytes]]) -> None:
    """
    Write every output file or none of them.

    Each file is first written under a temporary ".part" name. The files
    are renamed into place only after all writes succeed; on failure the
    temporary files are removed and the error is re-raised.
    """
    written = []
    try:
        for _, path, data in outputs:
            partial = path.with_name(path.name + PARTIAL_SUFFIX)
            written.append((partial, path))
            partial.write_bytes(data)
        for partial, path in written:
            partial.replace(path)
    except Exception:
        for partial, _ in written:
            if partial.is_file():
                partial.unlink()
        raise


INPUT_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="dc42")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Disk Copy 4.2 image tool.

    Inspect, verify, and extract Apple Disk Copy 4.2 (.image, .dc42) files.

    \b
    Commands:
      extract   Write the data (and tag) blocks to files
      info      Show header information
      verify    Check data and tag checksums
      tags      List MFS tag records

    \b
    Examples:
      dc42 extract -o out --include-tags disk.image
      dc42 info disk.image
      dc42 verify disk.image
    """
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Extract Command
# =============================================================================

@main.command("extract")
@click.argument("input_file", type=INPUT_FILE)
@click.option(
    "-o", "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (default: input file name without extension)",
)
@click.option(
    "--include-tags/--no-include-tags",
    default=None,
    help="Also write the tag block as <name>.tags",
)
@click.option(
    "--verify/--no-verify",
    default=None,
    help="Report checksum verdicts before extracting",
)
@pass_context
def cmd_extract(
    ctx: Context,
    input_file: Path,
    output: Optional[Path],
    include_tags: Optional[bool],
    verify: Optional[bool],
) -> None:
    """
    Extract the data block of a Disk Copy 4.2 image.

    Writes <name>.dsk, and <name>.tags with --include-tags when the image
    has tag data. <name> is the image name with unsafe characters replaced.
    A checksum mismatch is reported but does not stop extraction.

    \b
    Examples:
      dc42 extract disk.image
      dc42 extract -o out --include-tags --verify disk.image
    """
    config = ExtractConfig.from_env()
    if output is not None:
        config.output_dir = output
    if include_tags is not None:
        config.include_tags = include_tags
    if verify is not None:
        config.verify = verify

    image = _load_image(input_file, ctx.verbose)
    _echo_summary(image)

    if config.verify:
        _echo_checksums(image.verify_checksums())

    try:
        output_dir = config.resolve_output_dir(input_file)
        output_dir.mkdir(parents=True, exist_ok=True)

        safe_name = sanitize_name(image.header.image_name, input_file.stem)

        outputs = [
            ("data", output_dir / f"{safe_name}{config.data_extension}", image.image_data)
        ]
        if config.include_tags and image.tag_data:
            outputs.append(
                ("tags", output_dir / f"{safe_name}{config.tag_extension}", image.tag_data)
            )
        elif config.include_tags:
            logger.debug("Image has no tag data; skipping .tags file")

        _write_outputs(outputs)
        for kind, path, data in outputs:
            click.echo(f"Wrote {kind}: {path.name} ({len(data)} bytes)")

        click.echo(f"Extraction complete: {output_dir}")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument("input_file", type=INPUT_FILE)
@pass_context
def cmd_info(ctx: Context, input_file: Path) -> None:
    """
    Show detailed information about a Disk Copy 4.2 image.

    \b
    Example:
      dc42 info disk.image
    """
    image = _load_image(input_file, ctx.verbose)
    info = image.get_info()

    click.echo(f"Image Information: {input_file}")
    click.echo("=" * 40)
    click.echo(f"Image Name:    {info['image_name']}")
    click.echo(f"Disk Encoding: {info['encoding']}")
    click.echo(f"Disk Format:   {info['format']}")
    click.echo(f"Sectors:       {info['sector_count']}")
    click.echo()
    click.echo("Blocks:")
    click.echo(f"  Data:  {info['data_size']} bytes (checksum {info['data_checksum']})")
    click.echo(f"  Tags:  {info['tag_size']} bytes (checksum {info['tag_checksum']})")


# =============================================================================
# Verify Command
# =============================================================================

@main.command("verify")
@click.argument("input_file", type=INPUT_FILE)
@pass_context
def cmd_verify(ctx: Context, input_file: Path) -> None:
    """
    Verify the data and tag checksums of a Disk Copy 4.2 image.

    Exits with status 4 when either checksum does not match.

    \b
    Example:
      dc42 verify disk.image
    """
    image = _load_image(input_file, ctx.verbose)
    report = image.verify_checksums()
    _echo_checksums(report)

    if not report.is_valid:
        sys.exit(ExitCode.CHECKSUM_MISMATCH)

    click.echo(f"Verification PASSED: {input_file}")


# =============================================================================
# Tags Command
# =============================================================================

@main.command("tags")
@click.argument("input_file", type=INPUT_FILE)
@click.option(
    "-n", "--limit",
    type=click.IntRange(min=0),
    default=None,
    help="Show at most this many records",
)
@pass_context
def cmd_tags(ctx: Context, input_file: Path, limit: Optional[int]) -> None:
    """
    List the MFS tag records stored in the tag block.

    Each 12-byte record holds the file number, flags, logical block
    number and last modification date for one sector.

    \b
    Example:
      dc42 tags -n 20 disk.image
    """
    image = _load_image(input_file, ctx.verbose)

    if not image.tag_data:
        click.echo("Image has no tag data")
        return

    click.echo(f"{'Sector':>6} {'File':>10} {'Flags':>6} {'Block':>6}  Modified")
    click.echo("-" * 56)

    for sector, tag in enumerate(image.iter_tags()):
        if limit is not None and sector >= limit:
            break
        modified = tag.last_modification_date.strftime("%Y-%m-%d %H:%M:%S")
        click.echo(
            f"{sector:>6} {tag.file_number:>10} 0x{tag.flags:04X} "
            f"{tag.logical_block_number:>6}  {modified}"
        )


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
