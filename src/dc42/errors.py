"""
DC42 Error Hierarchy
====================

This module defines the exception hierarchy for the DC42 toolkit.
All exceptions inherit from DiskCopyError, allowing callers to catch all
image-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
DiskCopyError (base)
├── DC42FormatError (fixed-size structure decoding)
│   ├── InvalidLengthError - buffer is not the exact structure size
│   ├── NameTooLongError - Pascal name length byte exceeds 63
│   ├── UnknownEncodingError - encoding byte is not a known variant
│   ├── UnknownFormatError - format byte is not a known variant
│   └── BadMagicNumberError - private word is not 0x0100
└── ImageReadError (reading a whole image from a stream)
    ├── NullSourceError - no source was supplied
    ├── UnsupportedSourceError - source is not readable and seekable
    ├── InvalidHeaderError - header failed to decode (wraps the cause)
    ├── UnsupportedEncodingError - encoding has no known data size
    ├── InvalidDataSizeError - data size does not match the encoding
    └── TruncatedReadError - source ended early
        ├── TruncatedHeaderError
        ├── TruncatedDataError
        └── TruncatedTagError

Every exception keeps the offending value as an attribute so callers can
report it without parsing the message. Checksum mismatches are not errors;
see dc42.image.checksum.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class DiskCopyError(Exception):
    """
    Base exception for all DC42 errors.

        try:
            image = DiskCopyImage.from_file("System Tools.image")
        except DiskCopyError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Structure Decoding Exceptions
# =============================================================================

class DC42FormatError(DiskCopyError):
    """Base exception for errors decoding a fixed-size DC42 structure."""
    pass


class InvalidLengthError(DC42FormatError):
    """
    Buffer has the wrong length for the structure being decoded.

    Raised by the header decoder (84 bytes) and the MFS tag decoder
    (12 bytes).
    """

    def __init__(self, structure: str, expected: int, actual: int):
        self.structure = structure
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{structure} must be exactly {expected} bytes, got {actual}"
        )


class NameTooLongError(DC42FormatError):
    """Image name length byte is larger than the 63-byte name field."""

    def __init__(self, length: int, maximum: int = 63):
        self.length = length
        self.maximum = maximum
        super().__init__(
            f"image name length {length} exceeds maximum of {maximum}"
        )


class UnknownEncodingError(DC42FormatError):
    """Disk encoding byte does not match any known encoding."""

    def __init__(self, value: int):
        self.value = value
        super().__init__(f"unknown disk encoding 0x{value:02X}")


class UnknownFormatError(DC42FormatError):
    """Disk format byte does not match any known format."""

    def __init__(self, value: int):
        self.value = value
        super().__init__(f"unknown disk format 0x{value:02X}")


class BadMagicNumberError(DC42FormatError):
    """The private word at offset 82 is not 0x0100."""

    def __init__(self, actual: int, expected: int = 0x0100):
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"incorrect magic number 0x{actual:04X} (expected 0x{expected:04X})"
        )


# =============================================================================
# Image Reading Exceptions
# =============================================================================

class ImageReadError(DiskCopyError):
    """Base exception for errors reading a complete image from a source."""
    pass


class NullSourceError(ImageReadError):
    """No source was supplied to the reader."""

    def __init__(self) -> None:
        super().__init__("image source must not be None")


class UnsupportedSourceError(ImageReadError):
    """
    Source cannot be used by the reader.

    Raised when the object has no read() method, or when it reports
    that it is not readable or not seekable.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"unsupported image source: {reason}")


class InvalidHeaderError(ImageReadError):
    """
    The 84-byte header was read but failed validation.

    The decoder error is available as ``cause`` and is also chained as
    ``__cause__``.
    """

    def __init__(self, cause: DC42FormatError):
        self.cause = cause
        super().__init__(f"invalid DC42 header: {cause}")


class UnsupportedEncodingError(ImageReadError):
    """
    Encoding is valid but has no fixed data size the reader can check.

    Only GCR 400K/800K and MFM 720K/1440K images are supported.
    """

    def __init__(self, encoding: int):
        self.encoding = encoding
        name = getattr(encoding, "name", None) or f"0x{encoding:02X}"
        super().__init__(f"disk encoding '{name}' is not supported")


class InvalidDataSizeError(ImageReadError):
    """Header data size is odd or does not match the encoding's size."""

    def __init__(self, data_size: int, expected: int):
        self.data_size = data_size
        self.expected = expected
        super().__init__(
            f"invalid data size {data_size} (expected {expected})"
        )


class TruncatedReadError(ImageReadError):
    """
    Source ended before a block could be read completely.

    Attributes:
        block: Which block was being read ("header", "data" or "tag")
        expected: Number of bytes requested
        actual: Number of bytes that were available
    """

    block: str = "block"

    def __init__(self, expected: int, actual: int, block: Optional[str] = None):
        if block is not None:
            self.block = block
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"truncated {self.block}: expected {expected} bytes, got {actual}"
        )


class TruncatedHeaderError(TruncatedReadError):
    """Fewer than 84 bytes were available for the header."""
    block = "header"


class TruncatedDataError(TruncatedReadError):
    """Fewer than data_size bytes were available for the data block."""
    block = "data block"


class TruncatedTagError(TruncatedReadError):
    """Fewer than tag_size bytes were available for the tag block."""
    block = "tag block"
