"""Operations module for the diff and staging logic.

This module contains:
- Text/binary classification
- Diff computation and the commit diff cache
- File status resolution
- Whole-file and hunk-level staging
- Blame
"""

from litstage.operations.classify import FileContext, TextClassifier
from litstage.operations.hunk import DiffHunk, make_hunks
from litstage.operations.diff import (DiffEngine, DiffDelta, Diff, DiffCache,
                                      PatchSource, PatchMaker, PatchResult)
from litstage.operations.status import DeltaStatus, FileStatus, StatusResolver
from litstage.operations.staging import StagingManager
from litstage.operations.patch import HunkPatcher
from litstage.operations.blame import BlameEngine, Blame, BlameHunk

__all__ = [
    'FileContext', 'TextClassifier',
    'DiffHunk', 'make_hunks',
    'DiffEngine', 'DiffDelta', 'Diff', 'DiffCache', 'PatchSource', 'PatchMaker', 'PatchResult',
    'DeltaStatus', 'FileStatus', 'StatusResolver',
    'StagingManager',
    'HunkPatcher',
    'BlameEngine', 'Blame', 'BlameHunk',
]
