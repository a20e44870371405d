"""
miniplc0 Command-Line Interface
===============================

This package provides the command-line tool for the compiler:

- **plc0c**: tokenize or compile a miniplc0 source file

The tool is a Click-based CLI application with help text and uniform
error reporting.
"""

__all__ = ["plc0c"]
