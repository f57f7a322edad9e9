"""
DC42 Record Type Definitions
============================

This module defines the fixed-size structures found in a Disk Copy 4.2
image: the 84-byte image header and the 12-byte MFS tag record.

Image Structure Overview
------------------------
A DC42 file contains:
1. Header (84 bytes): Name, block sizes, checksums, encoding, format, magic
2. Data Block (data_size bytes): Raw sector data, 512 bytes per sector
3. Tag Block (tag_size bytes, optional): 12 bytes of tag data per sector

All multi-byte fields are big-endian.

Header Layout
-------------
    Offset  Size    Description
    ------  ----    -----------
    0       1       Image name length (Pascal string, 0-63)
    1       63      Image name (ASCII, padded)
    64      4       Data block size in bytes
    68      4       Tag block size in bytes
    72      4       Data block checksum
    76      4       Tag block checksum
    80      1       Disk encoding
    81      1       Disk format
    82      2       Private word (magic number, 0x0100)

Reference
---------
- https://www.discferret.com/wiki/Apple_DiskCopy_4.2
- Inside Macintosh: Files (MFS file tags)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import IntEnum
import logging
import struct

from dc42.errors import (
    BadMagicNumberError,
    InvalidLengthError,
    NameTooLongError,
    UnknownEncodingError,
    UnknownFormatError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

HEADER_SIZE = 84
NAME_SIZE = 63
MAGIC_NUMBER = 0x0100

TAG_SIZE = 12

# Classic Mac OS timestamps count seconds from midnight, 1 January 1904 (UTC)
MAC_EPOCH = datetime(1904, 1, 1, tzinfo=timezone.utc)

# Offsets 64-83: sizes, checksums, encoding, format, magic
_HEADER_TAIL = struct.Struct(">IIIIBBH")
_TAG = struct.Struct(">IHHI")

# Name bytes outside 7-bit ASCII decode as "?"
_NAME_TRANSLATION = bytes(range(0x80)) + b"?" * 0x80


# =============================================================================
# Enumeration Types
# =============================================================================

class DiskEncoding(IntEnum):
    """
    Physical disk encoding (header byte 80).

    Only the first four encodings have a fixed data size that the
    image reader can validate; see dc42.image.reader.
    """
    GCR_400K = 0x00         # 400K single-sided Mac disk
    GCR_800K = 0x01         # 800K double-sided Mac disk
    MFM_720K = 0x02         # 720K double-density
    MFM_1440K = 0x03        # 1.44MB high-density
    MFM_1680K = 0x04        # 1.68MB DMF
    TWIGGY = 0x54           # Lisa Twiggy (FileWare)
    NON_STANDARD = 0x5D

    @classmethod
    def from_byte(cls, value: int) -> "DiskEncoding":
        """Convert an encoding byte, raising UnknownEncodingError if undefined."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownEncodingError(value) from None

    def get_description(self) -> str:
        """Get a human-readable description of the encoding."""
        descriptions = {
            DiskEncoding.GCR_400K: "GCR 400K",
            DiskEncoding.GCR_800K: "GCR 800K",
            DiskEncoding.MFM_720K: "MFM 720K",
            DiskEncoding.MFM_1440K: "MFM 1.44MB",
            DiskEncoding.MFM_1680K: "MFM 1.68MB",
            DiskEncoding.TWIGGY: "Twiggy",
            DiskEncoding.NON_STANDARD: "Non-standard",
        }
        return descriptions.get(self, f"Unknown (0x{self:02X})")


class DiskFormat(IntEnum):
    """Disk format byte (header byte 81)."""
    MAC_OS_X = 0x00
    TWIGGY = 0x01
    MAC_400K = 0x02
    LISA_400K = 0x12
    MAC_800K = 0x22
    PRODOS_800K = 0x24
    NON_STANDARD = 0x93
    INVALID = 0x96

    @classmethod
    def from_byte(cls, value: int) -> "DiskFormat":
        """Convert a format byte, raising UnknownFormatError if undefined."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownFormatError(value) from None

    def get_description(self) -> str:
        """Get a human-readable description of the format."""
        descriptions = {
            DiskFormat.MAC_OS_X: "Mac OS X",
            DiskFormat.TWIGGY: "Twiggy",
            DiskFormat.MAC_400K: "Macintosh 400K",
            DiskFormat.LISA_400K: "Lisa 400K",
            DiskFormat.MAC_800K: "Macintosh 800K",
            DiskFormat.PRODOS_800K: "ProDOS 800K",
            DiskFormat.NON_STANDARD: "Non-standard",
            DiskFormat.INVALID: "Invalid",
        }
        return descriptions.get(self, f"Unknown (0x{self:02X})")


# =============================================================================
# Image Header
# =============================================================================

@dataclass(frozen=True)
class DC42Header:
    """
    Disk Copy 4.2 image header (84 bytes at the start of the file).

    from_bytes() validates the raw fields in a fixed order. Constructing a
    header directly runs the same range checks in __post_init__, so a
    DC42Header is always fully valid.

    Attributes:
        image_name_length: Length byte of the Pascal-style name (0-63)
        image_name: The name, decoded from image_name_length bytes only
        data_size: Size of the data block in bytes
        tag_size: Size of the tag block in bytes (0 if absent)
        data_checksum: Stored checksum of the data block
        tag_checksum: Stored checksum of the tag block
        encoding: Physical disk encoding
        format: Disk format byte
        magic_number: Private word, always 0x0100
    """
    image_name_length: int
    image_name: str
    data_size: int
    tag_size: int
    data_checksum: int
    tag_checksum: int
    encoding: DiskEncoding
    format: DiskFormat
    magic_number: int

    def __post_init__(self):
        if self.image_name_length > NAME_SIZE:
            raise NameTooLongError(self.image_name_length, NAME_SIZE)
        if len(self.image_name) != self.image_name_length:
            raise InvalidLengthError(
                "image name", self.image_name_length, len(self.image_name)
            )
        object.__setattr__(self, "encoding", DiskEncoding.from_byte(self.encoding))
        object.__setattr__(self, "format", DiskFormat.from_byte(self.format))
        if self.magic_number != MAGIC_NUMBER:
            raise BadMagicNumberError(self.magic_number, MAGIC_NUMBER)

    @classmethod
    def from_bytes(cls, data: bytes) -> "DC42Header":
        """
        Decode and validate an 84-byte header.

        Validation stops at the first failing check, in this order:
        length, name length, encoding, format, magic number.

        Args:
            data: Exactly 84 bytes (bytes, bytearray or memoryview)

        Returns:
            A validated DC42Header

        Raises:
            InvalidLengthError: If data is not exactly 84 bytes
            NameTooLongError: If the name length byte exceeds 63
            UnknownEncodingError: If the encoding byte is undefined
            UnknownFormatError: If the format byte is undefined
            BadMagicNumberError: If the private word is not 0x0100
        """
        view = memoryview(data).cast("B")
        if len(view) != HEADER_SIZE:
            raise InvalidLengthError("DC42 header", HEADER_SIZE, len(view))

        name_length = view[0]
        if name_length > NAME_SIZE:
            raise NameTooLongError(name_length, NAME_SIZE)

        (
            data_size,
            tag_size,
            data_checksum,
            tag_checksum,
            encoding_byte,
            format_byte,
            magic_number,
        ) = _HEADER_TAIL.unpack_from(view, 1 + NAME_SIZE)

        encoding = DiskEncoding.from_byte(encoding_byte)
        disk_format = DiskFormat.from_byte(format_byte)

        if magic_number != MAGIC_NUMBER:
            raise BadMagicNumberError(magic_number, MAGIC_NUMBER)

        # Padding after the declared length is ignored
        image_name = (
            bytes(view[1:1 + name_length]).translate(_NAME_TRANSLATION).decode("ascii")
        )

        header = cls(
            image_name_length=name_length,
            image_name=image_name,
            data_size=data_size,
            tag_size=tag_size,
            data_checksum=data_checksum,
            tag_checksum=tag_checksum,
            encoding=encoding,
            format=disk_format,
            magic_number=magic_number,
        )
        logger.debug(
            f"Parsed header '{image_name}': {encoding.name}, {disk_format.name}, "
            f"data {data_size} bytes, tags {tag_size} bytes"
        )
        return header


def parse_header(data: bytes) -> DC42Header:
    """
    Decode and validate an 84-byte DC42 header.

    This is a convenience function for DC42Header.from_bytes().
    """
    return DC42Header.from_bytes(data)


# =============================================================================
# MFS Tag Record
# =============================================================================

def mac_timestamp_to_datetime(seconds: int) -> datetime:
    """
    Convert a classic Mac OS timestamp to a UTC datetime.

    No range checking is done; every unsigned 32-bit value maps to a
    date between 1904 and 2040.
    """
    return MAC_EPOCH + timedelta(seconds=seconds)


@dataclass(frozen=True)
class MfsTag:
    """
    MFS file tag (12 bytes stored for each sector in the tag block).

    Structure:
        Offset  Size    Description
        ------  ----    -----------
        0       4       File number
        4       2       Flags
        6       2       Logical block number within the file
        8       4       Last modification date (Mac OS timestamp)
    """
    file_number: int
    flags: int
    logical_block_number: int
    last_modification_date: datetime

    @classmethod
    def from_bytes(cls, data: bytes) -> "MfsTag":
        """
        Decode a 12-byte MFS tag.

        Raises:
            InvalidLengthError: If data is not exactly 12 bytes
        """
        view = memoryview(data).cast("B")
        if len(view) != TAG_SIZE:
            raise InvalidLengthError("MFS tag", TAG_SIZE, len(view))

        file_number, flags, block, timestamp = _TAG.unpack_from(view)
        return cls(
            file_number=file_number,
            flags=flags,
            logical_block_number=block,
            last_modification_date=mac_timestamp_to_datetime(timestamp),
        )


def parse_tag(data: bytes) -> MfsTag:
    """Decode a 12-byte MFS tag record."""
    return MfsTag.from_bytes(data)
