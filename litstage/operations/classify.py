"""Text/binary classification of repository files."""

import logging
import mimetypes
import posixpath
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from litstage.core.errors import LitStageError
from litstage.core.objects import Commit
from litstage.utils.content import looks_binary, DEFAULT_SNIFF_SIZE

logger = logging.getLogger(__name__)

# Extensionless names that are always text
TEXT_NAMES = frozenset([
    'AUTHORS', 'CONTRIBUTING', 'COPYING', 'LICENSE', 'Makefile', 'README',
])

# application/* types that are text in practice
TEXT_APPLICATION_TYPES = frozenset([
    'application/json',
    'application/javascript',
    'application/x-javascript',
    'application/xml',
    'application/x-sh',
    'application/x-csh',
    'application/x-tex',
    'application/x-latex',
    'application/x-python-code',
    'application/x-httpd-php',
    'application/x-yaml',
    'application/yaml',
    'application/toml',
    'application/sql',
    'application/x-sql',
])


class ContextKind(Enum):
    COMMIT = 'commit'
    INDEX = 'index'
    WORKSPACE = 'workspace'


@dataclass(frozen=True)
class FileContext:
    """Where a file's content comes from: a commit, the index or the workspace."""
    kind: ContextKind
    commit: Optional[Commit] = None

    @classmethod
    def at_commit(cls, commit: Commit) -> 'FileContext':
        return cls(ContextKind.COMMIT, commit)


FileContext.INDEX = FileContext(ContextKind.INDEX)
FileContext.WORKSPACE = FileContext(ContextKind.WORKSPACE)


def is_text_extension(name: str) -> bool:
    """True if the file extension maps to a text type in the MIME registry."""
    ext = posixpath.splitext(name)[1]
    if not ext:
        return False

    mime_type, _ = mimetypes.guess_type(name, strict=False)
    if mime_type is None:
        return False
    return mime_type.startswith('text/') or mime_type in TEXT_APPLICATION_TYPES


class TextClassifier:
    """
    Decides whether a file should be diffed as text.

    Checks, first match wins: well-known text file names, the extension's
    MIME type, then a sniff of the actual content from the given context.
    Never raises; anything that cannot be read is not text.
    """

    def __init__(self, repo):
        self.repo = repo

    @property
    def sniff_size(self) -> int:
        return self.repo.config.get_int('core', 'sniffsize', DEFAULT_SNIFF_SIZE)

    def is_text(self, path: str, context: FileContext) -> bool:
        name = posixpath.basename(path)
        if not name:
            return False

        if name in TEXT_NAMES or is_text_extension(name):
            return True

        data = self._content(path, context)
        if data is None:
            return False
        return not looks_binary(data, self.sniff_size)

    def _content(self, path: str, context: FileContext) -> Optional[bytes]:
        try:
            if context.kind is ContextKind.COMMIT:
                blob = self.repo.blob_at(self.repo.tree(context.commit), path)
                return blob.data if blob is not None else None

            if context.kind is ContextKind.INDEX:
                blob = self.repo.staged_blob(path)
                return blob.data if blob is not None else None

            with open(self.repo.file_path(path), 'rb') as f:
                return f.read(self.sniff_size)
        except (OSError, LitStageError) as e:
            logger.debug("No content for %s in %s: %s", path, context.kind.value, e)
            return None
