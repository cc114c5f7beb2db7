"""litstage - diff and hunk staging for lit repositories."""

__version__ = '0.1.0'

from litstage.core.repository import Repository
from litstage.core.objects import LitObject, Blob, Tree, Commit
from litstage.core.errors import LitStageError, PatchMismatchError, UnexpectedError

__all__ = [
    'Repository',
    'LitObject',
    'Blob',
    'Tree',
    'Commit',
    'LitStageError',
    'PatchMismatchError',
    'UnexpectedError',
]
