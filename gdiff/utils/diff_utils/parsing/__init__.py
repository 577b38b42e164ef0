"""
Parsing utilities for the diff_utils package.

This module turns raw unified diff text into the structured diff model.
"""

from .diff_parser import parse, parse_file_header, parse_hunk_header, DiffBuilder, ParserState
