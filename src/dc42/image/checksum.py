"""
DC42 Checksum Calculations
==========================

This module provides the checksum used by Disk Copy 4.2 for both the
data block and the tag block.

Algorithm
---------
- The buffer is read as big-endian 16-bit words, left to right
- A trailing odd byte is not included
- For each word: add it to a 32-bit accumulator (wrapping), then rotate
  the accumulator right by one bit (bit 0 moves to bit 31)

The checksums stored in the header are advisory. Neither the header
decoder nor the image reader ever checks them; verification is an
explicit step performed by the caller.

Reference
---------
- https://www.discferret.com/wiki/Apple_DiskCopy_4.2
"""

from dataclasses import dataclass
import logging
import struct

logger = logging.getLogger(__name__)

CHECKSUM_MASK = 0xFFFFFFFF

_WORD = struct.Struct(">H")


def calculate_checksum(data: bytes) -> int:
    """
    Calculate the Disk Copy 4.2 checksum of a buffer.

    Args:
        data: Bytes-like object (bytes, bytearray or memoryview)

    Returns:
        32-bit checksum value (0x00000000 - 0xFFFFFFFF)

    Example:
        >>> calculate_checksum(b"")
        0
        >>> hex(calculate_checksum(bytes([0x00, 0x01])))
        '0x80000000'
    """
    view = memoryview(data).cast("B")
    even_length = len(view) & ~1

    checksum = 0
    for (word,) in _WORD.iter_unpack(view[:even_length]):
        checksum = (checksum + word) & CHECKSUM_MASK
        checksum = (checksum >> 1) | ((checksum & 1) << 31)

    return checksum


def verify_checksum(data: bytes, expected: int) -> bool:
    """
    Check a buffer against a stored checksum.

    Args:
        data: The block to checksum
        expected: The checksum stored in the image header

    Returns:
        True if the calculated checksum equals expected
    """
    return calculate_checksum(data) == expected


@dataclass(frozen=True)
class ChecksumReport:
    """
    Result of verifying both checksums of an image.

    Attributes:
        stored_data_checksum: Data checksum from the header
        calculated_data_checksum: Checksum of the data block
        stored_tag_checksum: Tag checksum from the header
        calculated_tag_checksum: Checksum of the tag block
    """
    stored_data_checksum: int
    calculated_data_checksum: int
    stored_tag_checksum: int
    calculated_tag_checksum: int

    @property
    def data_valid(self) -> bool:
        return self.stored_data_checksum == self.calculated_data_checksum

    @property
    def tag_valid(self) -> bool:
        return self.stored_tag_checksum == self.calculated_tag_checksum

    @property
    def is_valid(self) -> bool:
        return self.data_valid and self.tag_valid


def build_checksum_report(
    image_data: bytes,
    tag_data: bytes,
    stored_data_checksum: int,
    stored_tag_checksum: int,
) -> ChecksumReport:
    """
    Calculate both block checksums and pair them with the stored values.

    Args:
        image_data: The data block
        tag_data: The tag block (may be empty)
        stored_data_checksum: Data checksum from the header
        stored_tag_checksum: Tag checksum from the header

    Returns:
        A ChecksumReport; mismatches are reported, never raised
    """
    report = ChecksumReport(
        stored_data_checksum=stored_data_checksum,
        calculated_data_checksum=calculate_checksum(image_data),
        stored_tag_checksum=stored_tag_checksum,
        calculated_tag_checksum=calculate_checksum(tag_data),
    )
    logger.debug(
        f"Checksums: data 0x{report.calculated_data_checksum:08X} "
        f"(stored 0x{stored_data_checksum:08X}), "
        f"tag 0x{report.calculated_tag_checksum:08X} "
        f"(stored 0x{stored_tag_checksum:08X})"
    )
    return report
