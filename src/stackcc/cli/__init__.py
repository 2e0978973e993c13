"""
stackcc Command-Line Interface
==============================

This package provides the command-line tools of stackcc:

- **minicc**: Mini compiler (optionally drives nasm/ld to build an executable)

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["minicc"]
