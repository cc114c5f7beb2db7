"""Repository management for litstage."""

import logging
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple
from .errors import ObjectNotFoundError, RepositoryError, UnexpectedError
from .index import Index
from .objects import LitObject, Blob, Tree, TreeEntry, Commit

logger = logging.getLogger(__name__)

LIT_DIR = '.lit'


class Repository:
    """
    A lit repository session.

    Gives access to the object store, refs, index and workspace, and owns
    the session state shared by the diff and staging operations (the diff
    cache). Operations are synchronous; callers serialize mutating calls.
    """

    def __init__(self, path: str = '.'):
        """
        Initialize repository.

        Args:
            path: Path to repository root (defaults to current directory)
        """
        self.work_tree = Path(path).resolve()
        self.lit_dir = self.work_tree / LIT_DIR
        self.objects_dir = self.lit_dir / 'objects'
        self.refs_dir = self.lit_dir / 'refs'
        self.heads_dir = self.refs_dir / 'heads'
        self.tags_dir = self.refs_dir / 'tags'
        self.head_file = self.lit_dir / 'HEAD'
        self.index_file = self.lit_dir / 'index'
        self.config_file = self.lit_dir / 'config'

        # Lazily created collaborators (avoids circular imports)
        self._ref_manager = None
        self._config = None
        self._diff_engine = None
        self._diff_cache = None
        self._classifier = None
        self._status_resolver = None
        self._staging = None
        self._patcher = None
        self._blame_engine = None

    @property
    def refs(self):
        """Get RefManager instance."""
        if self._ref_manager is None:
            from .refs import RefManager
            self._ref_manager = RefManager(self)
        return self._ref_manager

    @property
    def config(self):
        """Get Config instance for this repository."""
        if self._config is None:
            from .config import get_config
            self._config = get_config(self)
        return self._config

    @property
    def diff_cache(self):
        """Commit diffs computed during this session."""
        if self._diff_cache is None:
            from litstage.operations.diff import DiffCache
            self._diff_cache = DiffCache()
        return self._diff_cache

    @property
    def diff(self):
        """Get DiffEngine instance."""
        if self._diff_engine is None:
            from litstage.operations.diff import DiffEngine
            self._diff_engine = DiffEngine(self)
        return self._diff_engine

    @property
    def classifier(self):
        """Get TextClassifier instance."""
        if self._classifier is None:
            from litstage.operations.classify import TextClassifier
            self._classifier = TextClassifier(self)
        return self._classifier

    @property
    def status(self):
        """Get StatusResolver instance."""
        if self._status_resolver is None:
            from litstage.operations.status import StatusResolver
            self._status_resolver = StatusResolver(self)
        return self._status_resolver

    @property
    def staging(self):
        """Get StagingManager instance."""
        if self._staging is None:
            from litstage.operations.staging import StagingManager
            self._staging = StagingManager(self)
        return self._staging

    @property
    def patcher(self):
        """Get HunkPatcher instance."""
        if self._patcher is None:
            from litstage.operations.patch import HunkPatcher
            self._patcher = HunkPatcher(self)
        return self._patcher

    @property
    def blamer(self):
        """Get BlameEngine instance."""
        if self._blame_engine is None:
            from litstage.operations.blame import BlameEngine
            self._blame_engine = BlameEngine(self)
        return self._blame_engine

    def init(self) -> 'Repository':
        """
        Initialize a new repository.

        Creates the .lit directory structure:
        .lit/
        ├── objects/       # Object database
        ├── refs/
        │   ├── heads/     # Branch references
        │   └── tags/      # Tag references
        ├── HEAD           # Current branch/commit
        └── config         # Repository configuration

        Returns:
            Repository: self for method chaining

        Raises:
            RepositoryError: If repository already exists
        """
        if self.lit_dir.exists():
            raise RepositoryError(f"Repository already exists at {self.lit_dir}")

        self.lit_dir.mkdir()
        self.objects_dir.mkdir()
        self.refs_dir.mkdir()
        self.heads_dir.mkdir()
        self.tags_dir.mkdir()

        self.head_file.write_text('ref: refs/heads/main\n')
        self.config_file.write_text('[core]\n\trepositoryformatversion = 0\n')

        logger.info("Initialized empty repository in %s", self.lit_dir)
        return self

    @classmethod
    def find_repository(cls, path: str = '.') -> Optional['Repository']:
        """
        Find repository by searching up the directory tree.

        Args:
            path: Starting path for search

        Returns:
            Repository if found, None otherwise
        """
        current = Path(path).resolve()

        while True:
            if (current / LIT_DIR).is_dir():
                return cls(str(current))

            # Reached filesystem root
            if current == current.parent:
                return None

            current = current.parent

    # Object store

    def object_path(self, hash: str) -> Path:
        """
        Get filesystem path for an object.

        Objects are stored in subdirectories named by the first 2 characters
        of the hash, with the remaining 38 characters as the filename.
        """
        return self.objects_dir / hash[:2] / hash[2:]

    def write_object(self, obj: LitObject) -> str:
        """
        Write object to repository.

        Objects are stored compressed with zlib. The format is:
        <type> <size>\0<content>

        Returns:
            str: SHA-1 hash of the object
        """
        hash = obj.hash
        path = self.object_path(hash)

        if path.exists():
            return hash

        data = obj.serialize()
        header = f"{obj.type} {len(data)}\0".encode()

        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + '.tmp')
        tmp_path.write_bytes(zlib.compress(header + data))
        tmp_path.replace(path)

        return hash

    def read_object(self, hash: str) -> LitObject:
        """
        Read object from repository.

        Args:
            hash: 40-character SHA-1 hash

        Returns:
            LitObject: Deserialized object (Blob, Tree, or Commit)

        Raises:
            ObjectNotFoundError: If the object is not stored
            UnexpectedError: If the stored object is malformed
        """
        if not hash:
            raise ObjectNotFoundError(hash)

        path = self.object_path(hash)

        if not path.is_file():
            raise ObjectNotFoundError(hash)

        try:
            content = zlib.decompress(path.read_bytes())
            null_idx = content.index(b'\0')
            obj_type, size_str = content[:null_idx].decode().split(' ', 1)
            size = int(size_str)
        except (zlib.error, ValueError) as e:
            raise UnexpectedError(f"Corrupt object {hash}: {e}") from e

        data = content[null_idx + 1:]
        if len(data) != size:
            raise UnexpectedError(f"Object size mismatch: expected {size}, got {len(data)}")

        if obj_type == 'blob':
            obj = Blob()
        elif obj_type == 'tree':
            obj = Tree()
        elif obj_type == 'commit':
            obj = Commit()
        else:
            raise UnexpectedError(f"Unknown object type: {obj_type}")

        obj.deserialize(data)
        obj._hash = hash
        return obj

    def object_exists(self, hash: str) -> bool:
        return bool(hash) and self.object_path(hash).is_file()

    def commit(self, oid: Optional[str]) -> Optional[Commit]:
        """Load a commit by id, or None if it is missing or not a commit."""
        if not oid:
            return None
        try:
            obj = self.read_object(oid)
        except ObjectNotFoundError:
            return None
        return obj if isinstance(obj, Commit) else None

    def head_commit(self) -> Optional[Commit]:
        return self.commit(self.refs.resolve_head())

    def tree(self, commit: Optional[Commit]) -> Optional[Tree]:
        """The root tree of a commit, if it can be loaded."""
        if commit is None:
            return None
        try:
            obj = self.read_object(commit.tree)
        except ObjectNotFoundError:
            logger.warning("Commit %s points at missing tree %s", commit.hash[:7], commit.tree)
            return None
        return obj if isinstance(obj, Tree) else None

    def tree_entry(self, tree: Optional[Tree], path: str) -> Optional[TreeEntry]:
        """
        Look up an entry by slash-separated path, descending into subtrees.

        Returns:
            The entry, or None if any path component is missing
        """
        parts = [part for part in path.split('/') if part]
        if tree is None or not parts:
            return None

        current = tree
        for i, part in enumerate(parts):
            entry = current.entry(part)
            if entry is None:
                return None
            if i == len(parts) - 1:
                return entry
            if not entry.is_tree:
                return None
            try:
                current = self.read_object(entry.hash)
            except ObjectNotFoundError:
                return None
        return None

    def blob_at(self, tree: Optional[Tree], path: str) -> Optional[Blob]:
        """The blob stored at a path in a tree, or None."""
        entry = self.tree_entry(tree, path)
        if entry is None or not entry.is_blob:
            return None
        try:
            blob = self.read_object(entry.hash)
        except ObjectNotFoundError:
            return None
        return blob if isinstance(blob, Blob) else None

    def tree_files(self, tree: Optional[Tree], prefix: str = '') -> Dict[str, Tuple[str, str]]:
        """
        Recursively list the files of a tree.

        Returns:
            Dict of {path: (blob_hash, mode)}
        """
        files: Dict[str, Tuple[str, str]] = {}
        if tree is None:
            return files

        for entry in tree.entries:
            path = f"{prefix}{entry.name}"

            if entry.is_blob:
                files[path] = (entry.hash, entry.mode)
            else:
                subtree = self.read_object(entry.hash)
                if isinstance(subtree, Tree):
                    files.update(self.tree_files(subtree, f"{path}/"))

        return files

    # File contents

    def file_path(self, path: str) -> Path:
        """Returns the workspace location of a repository-relative path."""
        return self.work_tree / path

    def contents_of_file(self, path: str, commit: Commit) -> Optional[bytes]:
        """Content of a file as of a commit, or None if it is not there."""
        blob = self.blob_at(self.tree(commit), path)
        return blob.data if blob is not None else None

    def staged_blob(self, path: str) -> Optional[Blob]:
        """The blob staged in the index at a path, or None."""
        entry = self.load_index().get_entry(path)
        if entry is None:
            return None
        try:
            blob = self.read_object(entry.sha1)
        except ObjectNotFoundError:
            return None
        return blob if isinstance(blob, Blob) else None

    def contents_of_staged_file(self, path: str) -> Optional[bytes]:
        blob = self.staged_blob(path)
        if blob is None:
            return None
        with blob.data_view() as view:
            return bytes(view)

    def file_blob(self, ref: str, path: str) -> Optional[Blob]:
        """The blob at a path in the tree of the commit a ref points to."""
        commit = self.commit(self.refs.resolve_reference(ref))
        return self.blob_at(self.tree(commit), path)

    def read_workspace_file(self, path: str) -> bytes:
        """
        Read a workspace file.

        Raises:
            OSError: If the file cannot be read
        """
        return self.file_path(path).read_bytes()

    def workspace_file_exists(self, path: str) -> bool:
        return self.file_path(path).is_file()

    def workspace_files(self) -> Iterator[str]:
        """Yield relative paths of workspace files, skipping dot-directories."""
        for path in sorted(self.work_tree.rglob('*')):
            rel_path = path.relative_to(self.work_tree)
            if any(part.startswith('.') for part in rel_path.parts):
                continue
            if path.is_file():
                yield rel_path.as_posix()

    # Index

    def load_index(self) -> Index:
        """
        Read the index from disk.

        Raises:
            UnexpectedError: If the index file is corrupt or unreadable
        """
        index = Index()
        try:
            index.read(self.index_file)
        except (ValueError, OSError) as e:
            raise UnexpectedError(f"Cannot read index: {e}") from e
        return index

    @contextmanager
    def index_transaction(self) -> Iterator[Index]:
        """
        Load the index, let the caller mutate it, then persist it.

        Nothing is written if the block raises, and the write itself is
        atomic, so a failure at any point leaves the previous index on disk.
        The diff cache is cleared after a successful save.
        """
        index = self.load_index()
        yield index
        index.write(self.index_file)
        self.invalidate_diff_cache()

    def invalidate_diff_cache(self) -> None:
        if self._diff_cache is not None:
            self._diff_cache.invalidate()

    # Front-end entry points

    def is_text_file(self, path: str, context) -> bool:
        """See TextClassifier.is_text."""
        return self.classifier.is_text(path, context)

    def patch_index_file(self, path: str, hunk, stage: bool) -> None:
        """See HunkPatcher.apply_hunk."""
        self.patcher.apply_hunk(path, hunk, stage)

    def blame(self, path: str, from_revision: Optional[str] = None,
              to_revision: Optional[str] = None):
        """See BlameEngine.blame."""
        return self.blamer.blame(path, from_revision, to_revision)

    def __repr__(self) -> str:
        return f"Repository(path={self.work_tree})"
