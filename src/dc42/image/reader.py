"""
DC42 Image Reader
=================

This module reads complete Disk Copy 4.2 images from binary streams.

DiskCopyImage
-------------
The DiskCopyImage class reads the 84-byte header, checks that the data
block size matches the disk encoding, then reads the data block and the
tag block. The result owns copies of both blocks and is never modified
after construction.

Checksums are not verified while reading. Call verify_checksums() on the
image when integrity checking is wanted.

Usage Examples
--------------
Reading an image file:
    >>> from dc42.image import DiskCopyImage
    >>> image = DiskCopyImage.from_file("System Tools.image")
    >>> print(f"{image.header.image_name}: {image.header.encoding.name}")

Reading from an open stream:
    >>> with open("System Tools.image", "rb") as f:
    ...     image = DiskCopyImage.from_stream(f)

Verifying checksums:
    >>> report = image.verify_checksums()
    >>> print("OK" if report.is_valid else "Checksum mismatch")
"""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union
import logging

from dc42.errors import (
    DC42FormatError,
    InvalidDataSizeError,
    InvalidHeaderError,
    NullSourceError,
    TruncatedDataError,
    TruncatedHeaderError,
    TruncatedReadError,
    TruncatedTagError,
    UnsupportedEncodingError,
    UnsupportedSourceError,
)
from dc42.image.checksum import ChecksumReport, build_checksum_report
from dc42.image.records import (
    HEADER_SIZE,
    TAG_SIZE,
    DC42Header,
    DiskEncoding,
    MfsTag,
)

logger = logging.getLogger(__name__)

SECTOR_SIZE = 512

# Upper bound on a single read() request
READ_CHUNK_SIZE = 1 << 20

# Data block sizes for the encodings the reader can validate
EXPECTED_DATA_SIZES = {
    DiskEncoding.GCR_400K: 409_600,
    DiskEncoding.GCR_800K: 819_200,
    DiskEncoding.MFM_720K: 737_280,
    DiskEncoding.MFM_1440K: 1_474_560,
}


def expected_data_size(encoding: DiskEncoding) -> Optional[int]:
    """
    Get the fixed data block size for an encoding.

    Returns:
        Size in bytes, or None if the encoding has no supported size
    """
    return EXPECTED_DATA_SIZES.get(encoding)


# =============================================================================
# Stream Helpers
# =============================================================================

def _check_source(source: BinaryIO) -> None:
    """Reject sources that are missing, unreadable or unseekable."""
    if source is None:
        raise NullSourceError()

    if not callable(getattr(source, "read", None)):
        raise UnsupportedSourceError(f"{type(source).__name__} has no read() method")

    readable = getattr(source, "readable", None)
    if callable(readable) and not readable():
        raise UnsupportedSourceError("stream is not readable")

    seekable = getattr(source, "seekable", None)
    if callable(seekable) and not seekable():
        raise UnsupportedSourceError("stream is not seekable")


def _read_exactly(
    source: BinaryIO, size: int, error: type[TruncatedReadError]
) -> bytes:
    """
    Read exactly size bytes, looping over short reads.

    Requests are capped at READ_CHUNK_SIZE so a bogus size from the
    header never turns into one huge allocation.

    Raises:
        TruncatedReadError: (the given subclass) if the stream ends early
    """
    buffer = bytearray()
    while len(buffer) < size:
        chunk = source.read(min(size - len(buffer), READ_CHUNK_SIZE))
        if not chunk:
            raise error(size, len(buffer))
        buffer.extend(chunk)
    return bytes(buffer)


# =============================================================================
# Disk Copy Image
# =============================================================================

@dataclass(frozen=True)
class DiskCopyImage:
    """
    A complete Disk Copy 4.2 image.

    Attributes:
        header: The validated image header
        image_data: The data block (header.data_size bytes)
        tag_data: The tag block (header.tag_size bytes, may be empty)

    Example:
        >>> image = DiskCopyImage.from_file("MacWrite 4.5.image")
        >>> len(image.image_data) == image.header.data_size
        True
    """
    header: DC42Header
    image_data: bytes = field(repr=False)
    tag_data: bytes = field(repr=False)

    @classmethod
    def from_stream(cls, source: BinaryIO) -> "DiskCopyImage":
        """
        Read an image from a readable, seekable binary stream.

        Reading starts at the stream's current position. Nothing is
        read past the end of the tag block.

        Args:
            source: Binary stream positioned at the start of the image

        Returns:
            A DiskCopyImage with both blocks loaded

        Raises:
            NullSourceError: If source is None
            UnsupportedSourceError: If source is not readable and seekable
            TruncatedHeaderError: If fewer than 84 bytes are available
            InvalidHeaderError: If the header fails validation
            UnsupportedEncodingError: If the encoding has no known size
            InvalidDataSizeError: If data_size is odd or wrong for the encoding
            TruncatedDataError: If the data block is incomplete
            TruncatedTagError: If the tag block is incomplete
        """
        _check_source(source)

        raw_header = _read_exactly(source, HEADER_SIZE, TruncatedHeaderError)
        try:
            header = DC42Header.from_bytes(raw_header)
        except DC42FormatError as e:
            raise InvalidHeaderError(e) from e

        expected = expected_data_size(header.encoding)
        if expected is None:
            raise UnsupportedEncodingError(header.encoding)

        if header.data_size % 2 != 0 or header.data_size != expected:
            raise InvalidDataSizeError(header.data_size, expected)

        image_data = _read_exactly(source, header.data_size, TruncatedDataError)
        tag_data = _read_exactly(source, header.tag_size, TruncatedTagError)

        logger.debug(
            f"Read image '{header.image_name}': "
            f"{len(image_data)} data bytes, {len(tag_data)} tag bytes"
        )
        return cls(header=header, image_data=image_data, tag_data=tag_data)

    @classmethod
    def from_bytes(cls, data: bytes) -> "DiskCopyImage":
        """Read an image from an in-memory buffer."""
        return cls.from_stream(BytesIO(data))

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "DiskCopyImage":
        """
        Read an image from a file on disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
            DiskCopyError: If the file is not a valid DC42 image
        """
        filepath = Path(filepath)
        with filepath.open("rb") as f:
            return cls.from_stream(f)

    # =========================================================================
    # Public Query Methods
    # =========================================================================

    @property
    def sector_count(self) -> int:
        """Number of 512-byte sectors in the data block."""
        return len(self.image_data) // SECTOR_SIZE

    def verify_checksums(self) -> ChecksumReport:
        """
        Recalculate both block checksums and compare them with the header.

        Returns:
            A ChecksumReport; a mismatch is reported, not raised
        """
        return build_checksum_report(
            self.image_data,
            self.tag_data,
            self.header.data_checksum,
            self.header.tag_checksum,
        )

    def iter_tags(self) -> Iterator[MfsTag]:
        """
        Iterate over the tag block as 12-byte MFS tag records.

        A trailing partial record is ignored.

        Yields:
            MfsTag instances in sector order
        """
        view = memoryview(self.tag_data)
        for offset in range(0, len(view) - TAG_SIZE + 1, TAG_SIZE):
            yield MfsTag.from_bytes(view[offset:offset + TAG_SIZE])

    def get_info(self) -> dict:
        """
        Get summary information about the image.

        Returns:
            Dictionary with image information
        """
        return {
            "image_name": self.header.image_name,
            "encoding": self.header.encoding.get_description(),
            "format": self.header.format.get_description(),
            "data_size": self.header.data_size,
            "tag_size": self.header.tag_size,
            "data_checksum": f"0x{self.header.data_checksum:08X}",
            "tag_checksum": f"0x{self.header.tag_checksum:08X}",
            "sector_count": self.sector_count,
        }


# =============================================================================
# Convenience Functions
# =============================================================================

def read_image(source: BinaryIO) -> DiskCopyImage:
    """
    Read a DC42 image from a binary stream.

    This is a convenience function for DiskCopyImage.from_stream().
    """
    return DiskCopyImage.from_stream(source)


def read_image_file(filepath: Union[str, Path]) -> DiskCopyImage:
    """
    Read a DC42 image from disk.

    This is a convenience function for DiskCopyImage.from_file().
    """
    return DiskCopyImage.from_file(filepath)
