"""
Disk Copy 4.2 Image Handling
============================

This module provides support for reading Apple Disk Copy 4.2 (DC42)
disk image files, the format used by classic Macintosh and Lisa tooling
to distribute floppy disks.

This module provides:
- **DiskCopyImage**: Read and validate a complete image
- **DC42Header**: Decode and validate the 84-byte header
- **MfsTag**: Decode the 12-byte per-sector MFS tag records
- **Checksum utilities**: Calculate and verify block checksums

Quick Start
-----------
Reading an image:

    >>> from dc42.image import DiskCopyImage
    >>> image = DiskCopyImage.from_file("MacWrite 4.5.image")
    >>> print(image.header.image_name, image.header.data_size)

Checking integrity:

    >>> report = image.verify_checksums()
    >>> report.data_valid, report.tag_valid
    (True, True)

Supported Encodings
-------------------
The reader validates the data size against the encoding and accepts:
- **GCR 400K**: 409,600 bytes
- **GCR 800K**: 819,200 bytes
- **MFM 720K**: 737,280 bytes
- **MFM 1.44MB**: 1,474,560 bytes

Headers with other encodings decode, but images using them are rejected.

Reference
---------
- https://www.discferret.com/wiki/Apple_DiskCopy_4.2
"""

# =============================================================================
# Public API Exports
# =============================================================================

# Record type definitions and enums
from dc42.image.records import (
    # Enums
    DiskEncoding,
    DiskFormat,
    # Data structures
    DC42Header,
    MfsTag,
    # Constants
    HEADER_SIZE,
    NAME_SIZE,
    MAGIC_NUMBER,
    TAG_SIZE,
    MAC_EPOCH,
    # Functions
    parse_header,
    parse_tag,
    mac_timestamp_to_datetime,
)

# Checksum utilities
from dc42.image.checksum import (
    calculate_checksum,
    verify_checksum,
    build_checksum_report,
    ChecksumReport,
)

# Reader classes and functions
from dc42.image.reader import (
    DiskCopyImage,
    EXPECTED_DATA_SIZES,
    SECTOR_SIZE,
    expected_data_size,
    read_image,
    read_image_file,
)

# =============================================================================
# Module-level __all__ for explicit exports
# =============================================================================

__all__ = [
    # Enums
    "DiskEncoding",
    "DiskFormat",
    # Data structures
    "DC42Header",
    "MfsTag",
    # Constants
    "HEADER_SIZE",
    "NAME_SIZE",
    "MAGIC_NUMBER",
    "TAG_SIZE",
    "MAC_EPOCH",
    "EXPECTED_DATA_SIZES",
    "SECTOR_SIZE",
    # Decoders
    "parse_header",
    "parse_tag",
    "mac_timestamp_to_datetime",
    # Checksum utilities
    "calculate_checksum",
    "verify_checksum",
    "build_checksum_report",
    "ChecksumReport",
    # Reader
    "DiskCopyImage",
    "expected_data_size",
    "read_image",
    "read_image_file",
]
