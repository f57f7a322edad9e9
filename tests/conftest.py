"""
Shared fixtures for building Disk Copy 4.2 test images.

Images are assembled field by field with struct.pack so the tests do not
depend on the code under test to produce their input.
"""

import struct
from typing import Callable, Optional

import pytest

from dc42.image import calculate_checksum


HEADER_FORMAT = ">B63sIIIIBBH"

GCR_400K_SIZE = 409_600
GCR_800K_SIZE = 819_200


def build_header(
    name: bytes = b"Test Disk",
    data_size: int = GCR_800K_SIZE,
    tag_size: int = 0,
    data_checksum: int = 0,
    tag_checksum: int = 0,
    encoding: int = 0x01,
    disk_format: int = 0x22,
    magic: int = 0x0100,
    name_length: Optional[int] = None,
) -> bytes:
    """
    Pack an 84-byte DC42 header.

    name_length defaults to len(name); pass it explicitly to build
    headers whose length byte disagrees with the name field.
    """
    if name_length is None:
        name_length = len(name)
    return struct.pack(
        HEADER_FORMAT,
        name_length,
        name,
        data_size,
        tag_size,
        data_checksum,
        tag_checksum,
        encoding,
        disk_format,
        magic,
    )


def build_image(
    data: bytes,
    tags: bytes = b"",
    name: bytes = b"Test Disk",
    encoding: int = 0x01,
    disk_format: int = 0x22,
    data_checksum: Optional[int] = None,
    tag_checksum: Optional[int] = None,
) -> bytes:
    """
    Assemble a complete image: header + data block + tag block.

    Checksums default to the correct values for the supplied blocks.
    """
    if data_checksum is None:
        data_checksum = calculate_checksum(data)
    if tag_checksum is None:
        tag_checksum = calculate_checksum(tags)
    header = build_header(
        name=name,
        data_size=len(data),
        tag_size=len(tags),
        data_checksum=data_checksum,
        tag_checksum=tag_checksum,
        encoding=encoding,
        disk_format=disk_format,
    )
    return header + data + tags


@pytest.fixture
def header_factory() -> Callable[..., bytes]:
    """Factory for raw 84-byte headers (see build_header)."""
    return build_header


@pytest.fixture
def image_factory() -> Callable[..., bytes]:
    """Factory for complete raw images (see build_image)."""
    return build_image


@pytest.fixture
def sample_tag_bytes() -> bytes:
    """
    Two MFS tag records followed by a 5-byte partial record.

    Record 0: file 42, flags 0x0100, block 7, 2000-01-01T00:00:00Z
    Record 1: file 43, flags 0x0000, block 0, 1904-01-01T00:00:00Z
    """
    return (
        struct.pack(">IHHI", 42, 0x0100, 7, 3_029_529_600)
        + struct.pack(">IHHI", 43, 0x0000, 0, 0)
        + b"\x01\x02\x03\x04\x05"
    )


@pytest.fixture
def gcr400k_data() -> bytes:
    """A 400K data block with a repeating, non-zero byte pattern."""
    pattern = bytes(range(256))
    return (pattern * (GCR_400K_SIZE // len(pattern)))[:GCR_400K_SIZE]
