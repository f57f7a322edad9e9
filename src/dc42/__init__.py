"""
DC42 Tools - Apple Disk Copy 4.2 Image Reader
=============================================

This package reads and validates Apple Disk Copy 4.2 (DC42) disk image
files: an 84-byte header followed by a data block and an optional tag
block, each protected by a checksum.

Main Components
---------------
- **image**: Header decoding, image reading, checksums and MFS tags
- **cli**: The ``dc42`` command-line tool (extract, info, verify, tags)
- **config**: Extraction defaults, overridable from the environment

Quick Start
-----------
Read an image:
    >>> from dc42 import DiskCopyImage
    >>> image = DiskCopyImage.from_file("MacWrite 4.5.image")
    >>> image.header.encoding
    <DiskEncoding.GCR_400K: 0>

Verify checksums:
    >>> image.verify_checksums().is_valid
    True

Or use the command-line tool:
    $ dc42 info "MacWrite 4.5.image"
    $ dc42 extract --verify --include-tags -o out/ "MacWrite 4.5.image"

Reference Documentation
-----------------------
- DC42 format: https://www.discferret.com/wiki/Apple_DiskCopy_4.2

Version History
---------------
1.0.0 - Initial release with header decoder, image reader and dc42 CLI
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from dc42.errors import (
    DiskCopyError,
    DC42FormatError,
    InvalidLengthError,
    NameTooLongError,
    UnknownEncodingError,
    UnknownFormatError,
    BadMagicNumberError,
    ImageReadError,
    NullSourceError,
    UnsupportedSourceError,
    InvalidHeaderError,
    UnsupportedEncodingError,
    InvalidDataSizeError,
    TruncatedReadError,
    TruncatedHeaderError,
    TruncatedDataError,
    TruncatedTagError,
)

from dc42.image import (
    DiskEncoding,
    DiskFormat,
    DC42Header,
    MfsTag,
    DiskCopyImage,
    ChecksumReport,
    calculate_checksum,
    verify_checksum,
    parse_header,
    parse_tag,
    read_image,
    read_image_file,
)

__all__ = [
    # Version info
    "__version__",
    # Image handling
    "DiskEncoding",
    "DiskFormat",
    "DC42Header",
    "MfsTag",
    "DiskCopyImage",
    "ChecksumReport",
    "calculate_checksum",
    "verify_checksum",
    "parse_header",
    "parse_tag",
    "read_image",
    "read_image_file",
    # Exception hierarchy
    "DiskCopyError",
    "DC42FormatError",
    "InvalidLengthError",
    "NameTooLongError",
    "UnknownEncodingError",
    "UnknownFormatError",
    "BadMagicNumberError",
    "ImageReadError",
    "NullSourceError",
    "UnsupportedSourceError",
    "InvalidHeaderError",
    "UnsupportedEncodingError",
    "InvalidDataSizeError",
    "TruncatedReadError",
    "TruncatedHeaderError",
    "TruncatedDataError",
    "TruncatedTagError",
]
