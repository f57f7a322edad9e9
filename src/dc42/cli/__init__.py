"""
DC42 Command-Line Interface
===========================

This package provides the ``dc42`` command-line tool for inspecting and
extracting Disk Copy 4.2 images. It is implemented as a Click-based CLI
application with comprehensive help and error reporting.
"""

__all__ = ["dc42"]
