"""Utilities module for common helper functions.

This module contains:
- Binary content detection
- Line splitting that keeps track of missing final newlines
"""

from litstage.utils.content import looks_binary, split_lines, DEFAULT_SNIFF_SIZE

__all__ = [
    'looks_binary', 'split_lines', 'DEFAULT_SNIFF_SIZE',
]
