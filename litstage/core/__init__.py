"""Core functionality for litstage.

This module contains the core data structures:
- Repository objects (Blob, Tree, Commit)
- Repository session and object store access
- Index/staging area
- Reference resolution
- Configuration, logging and errors

For diff, status and staging operations, see litstage.operations
"""

from litstage.core.objects import LitObject, Blob, Tree, TreeEntry, EntryKind, Commit
from litstage.core.repository import Repository
from litstage.core.hash import hash_object, hash_blob, hash_file
from litstage.core.index import Index, IndexEntry
from litstage.core.refs import RefManager
from litstage.core.config import Config, get_config
from litstage.core.errors import (LitStageError, RepositoryError, ObjectNotFoundError,
                                  PatchMismatchError, UnexpectedError)
from litstage.core.log import configure_logging

__all__ = [
    'LitObject',
    'Blob',
    'Tree',
    'TreeEntry',
    'EntryKind',
    'Commit',
    'Repository',
    'Index',
    'IndexEntry',
    'RefManager',
    'Config',
    'get_config',
    'hash_object',
    'hash_blob',
    'hash_file',
    'LitStageError',
    'RepositoryError',
    'ObjectNotFoundError',
    'PatchMismatchError',
    'UnexpectedError',
    'configure_logging',
]
