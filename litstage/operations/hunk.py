"""Diff hunks: generation, parsing and forward/reverse application."""

import re
from difflib import SequenceMatcher
from typing import List, Optional, Tuple

from litstage.utils.content import split_lines

NO_NEWLINE = '\\ No newline at end of file'

RE_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


class DiffHunk:
    """
    Represents a single hunk (continuous block of changes) in a diff.

    ``lines`` hold the literal patch body: context lines start with a space,
    removals with '-', additions with '+', and a line that lacks a trailing
    newline is followed by a ``\\ No newline at end of file`` marker.
    """

    def __init__(self, old_start: int, old_count: int, new_start: int, new_count: int,
                 lines: Optional[List[str]] = None):
        self.old_start = old_start
        self.old_count = old_count
        self.new_start = new_start
        self.new_count = new_count
        self.lines: List[str] = list(lines or [])

    def add_line(self, line: str):
        """Add a raw patch line to this hunk."""
        self.lines.append(line)

    def add_content(self, prefix: str, line: str):
        """Add a file line (with or without its terminator) under a prefix."""
        if line.endswith('\n'):
            self.lines.append(prefix + line[:-1])
        else:
            self.lines.append(prefix + line)
            self.lines.append(NO_NEWLINE)

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"

    @property
    def patch_text(self) -> str:
        """The hunk as it appears in a unified diff."""
        return '\n'.join([self.header] + self.lines) + '\n'

    @property
    def touches_file_start(self) -> bool:
        """True if either side of the hunk begins at the first line."""
        return self.old_start == 1 or self.new_start == 1

    @classmethod
    def parse(cls, text: str) -> 'DiffHunk':
        """
        Parse a hunk from unified diff text.

        Raises:
            ValueError: If the text does not start with a hunk header
        """
        lines = text.split('\n')
        if lines and lines[-1] == '':
            lines.pop()
        match = RE_HUNK_HEADER.match(lines[0]) if lines else None
        if not match:
            raise ValueError(f"Not a hunk header: {lines[0] if lines else text!r}")

        old_start, old_count, new_start, new_count = match.groups()
        return cls(
            int(old_start),
            int(old_count) if old_count is not None else 1,
            int(new_start),
            int(new_count) if new_count is not None else 1,
            lines[1:],
        )

    def sides(self) -> Tuple[List[str], List[str]]:
        """
        Rebuild the old and new line runs this hunk covers.

        Returns:
            (old_lines, new_lines), each line carrying its terminator

        Raises:
            ValueError: If a body line has an unknown prefix
        """
        old: List[str] = []
        new: List[str] = []
        last = None

        for line in self.lines:
            prefix, content = line[:1], line[1:]
            if line.startswith('\\'):
                # Strip the newline from the line the marker follows
                if last in (' ', '-') and old:
                    old[-1] = old[-1][:-1]
                if last in (' ', '+') and new:
                    new[-1] = new[-1][:-1]
                continue
            if prefix == '':
                prefix = ' '
            if prefix == ' ':
                old.append(content + '\n')
                new.append(content + '\n')
            elif prefix == '-':
                old.append(content + '\n')
            elif prefix == '+':
                new.append(content + '\n')
            else:
                raise ValueError(f"Unexpected hunk line: {line!r}")
            last = prefix

        return old, new

    def applied(self, text: str, reversed: bool = False) -> Optional[str]:
        """
        Apply this hunk to text, or reverse it.

        The old side must match the text exactly, at the line the header names
        or, failing that, at the nearest other position.

        Args:
            text: Current file content
            reversed: Undo the hunk instead of applying it

        Returns:
            The patched text, or None if the hunk does not apply
        """
        try:
            old, new = self.sides()
        except ValueError:
            return None

        start, count = self.old_start, self.old_count
        if reversed:
            old, new = new, old
            start, count = self.new_start, self.new_count

        lines = split_lines(text)
        expected = start - 1 if count > 0 else start
        pos = _locate(lines, old, expected)
        if pos is None:
            return None

        return ''.join(lines[:pos] + new + lines[pos + len(old):])

    def __eq__(self, other) -> bool:
        if not isinstance(other, DiffHunk):
            return NotImplemented
        return (self.old_start, self.old_count, self.new_start, self.new_count, self.lines) == \
            (other.old_start, other.old_count, other.new_start, other.new_count, other.lines)

    def __hash__(self):
        return hash((self.old_start, self.old_count, self.new_start, self.new_count, tuple(self.lines)))

    def __str__(self):
        return self.header

    def __repr__(self):
        return f"DiffHunk({self.header}, lines={len(self.lines)})"


def _locate(lines: List[str], target: List[str], expected: int) -> Optional[int]:
    """Find where ``target`` occurs in ``lines``, preferring ``expected``."""
    size = len(target)
    last = len(lines) - size
    if last < 0:
        return None

    if not target:
        return expected if 0 <= expected <= len(lines) else None

    def matches(pos: int) -> bool:
        return lines[pos:pos + size] == target

    expected = min(max(expected, 0), last)
    if matches(expected):
        return expected

    for offset in range(1, last + 1):
        for pos in (expected - offset, expected + offset):
            if 0 <= pos <= last and matches(pos):
                return pos
    return None


def _unified_range(start: int, stop: int) -> Tuple[int, int]:
    """Header start and count for a 0-based [start, stop) line range."""
    length = stop - start
    beginning = start + 1
    if not length:
        beginning -= 1
    return beginning, length


def make_hunks(old_text: str, new_text: str, context: int = 3) -> List[DiffHunk]:
    """
    Compute the hunks that turn ``old_text`` into ``new_text``.

    Args:
        old_text: Original content
        new_text: Changed content
        context: Number of unchanged lines around each change

    Returns:
        List of DiffHunk, empty when the texts are equal
    """
    if old_text == new_text:
        return []

    a = split_lines(old_text)
    b = split_lines(new_text)
    hunks = []

    matcher = SequenceMatcher(None, a, b, autojunk=False)
    for group in matcher.get_grouped_opcodes(context):
        first, last = group[0], group[-1]
        old_start, old_count = _unified_range(first[1], last[2])
        new_start, new_count = _unified_range(first[3], last[4])
        hunk = DiffHunk(old_start, old_count, new_start, new_count)

        for tag, i1, i2, j1, j2 in group:
            if tag == 'equal':
                for line in a[i1:i2]:
                    hunk.add_content(' ', line)
                continue
            if tag in ('replace', 'delete'):
                for line in a[i1:i2]:
                    hunk.add_content('-', line)
            if tag in ('replace', 'insert'):
                for line in b[j1:j2]:
                    hunk.add_content('+', line)

        hunks.append(hunk)

    return hunks
