"""Helpers for inspecting raw file content."""

from typing import List, Union

DEFAULT_SNIFF_SIZE = 8192

# Control bytes that commonly appear in text files
_TEXT_CONTROLS = frozenset(b'\t\n\r\f\b\x1b')

# Share of control bytes above which content is treated as binary
CONTROL_RATIO = 0.3


def looks_binary(data: Union[bytes, bytearray, memoryview], sniff_size: int = DEFAULT_SNIFF_SIZE) -> bool:
    """
    Guess whether content is binary by looking at its first bytes.
    
    Content is binary when the sniffed prefix contains a NUL byte, or when
    more than 30% of it is made of non-whitespace control characters.
    Empty content is text.
    
    Args:
        data: Raw content
        sniff_size: Number of leading bytes to inspect
        
    Returns:
        bool: True if the content looks binary
    """
    prefix = bytes(data[:sniff_size])
    if not prefix:
        return False
    if b'\x00' in prefix:
        return True
    
    controls = sum(1 for byte in prefix if byte < 0x20 and byte not in _TEXT_CONTROLS)
    return controls / len(prefix) > CONTROL_RATIO


def split_lines(text: str) -> List[str]:
    """
    Split text on newlines only, keeping each line's terminator.

    Unlike ``str.splitlines`` this leaves form feeds and other Unicode line
    boundaries inside the line, so line numbers match what diff tools report.
    """
    if not text:
        return []

    lines = [line + '\n' for line in text.split('\n')]
    if text.endswith('\n'):
        lines.pop()
    else:
        lines[-1] = lines[-1][:-1]
    return lines
