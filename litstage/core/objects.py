"""Repository objects for litstage."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, List, Optional
from .hash import hash_object
from litstage.utils.content import looks_binary


class LitObject(ABC):
    """Base class for all repository objects."""

    def __init__(self):
        self._hash: Optional[str] = None

    @abstractmethod
    def serialize(self) -> bytes:
        """
        Serialize object to bytes.

        Returns:
            bytes: Serialized object data
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> None:
        """
        Deserialize object from bytes.

        Args:
            data: Serialized object data
        """
        pass

    @property
    def type(self) -> str:
        """
        Return object type name.

        Returns:
            str: Object type (blob, tree, commit)
        """
        return self.__class__.__name__.lower()

    def compute_hash(self) -> str:
        """
        Compute and cache object hash.

        Objects are hashed with a header containing the type and size.
        Format: <type> <size>\0<content>

        Returns:
            str: 40-character SHA-1 hash
        """
        if self._hash is None:
            data = self.serialize()
            header = f"{self.type} {len(data)}\0".encode()
            self._hash = hash_object(header + data)
        return self._hash

    @property
    def hash(self) -> str:
        """40-character SHA-1 object id."""
        return self.compute_hash()


class Blob(LitObject):
    """
    Represents file content.

    A blob stores the raw content of a file without any metadata
    like filename or permissions.
    """

    def __init__(self, data: Optional[bytes] = None):
        super().__init__()
        self.data = data or b''

    def serialize(self) -> bytes:
        return self.data

    def deserialize(self, data: bytes) -> None:
        self.data = data
        self._hash = None

    @classmethod
    def from_file(cls, filepath: str) -> 'Blob':
        """
        Create blob from file.

        Args:
            filepath: Path to file

        Returns:
            Blob: New blob containing file content
        """
        with open(filepath, 'rb') as f:
            return cls(f.read())

    @contextmanager
    def data_view(self) -> Iterator[memoryview]:
        """
        Give scoped, read-only access to the blob's bytes without copying.

        The view is released when the block exits, so it must not be kept.
        """
        view = memoryview(self.data).toreadonly()
        try:
            yield view
        finally:
            view.release()

    @property
    def is_binary(self) -> bool:
        """True if the content sniff says this blob is not text."""
        return looks_binary(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        size = len(self.data)
        return f"Blob(hash={self.hash[:7]}, size={size})"


class EntryKind(Enum):
    """What a tree entry points at."""
    BLOB = 'blob'
    TREE = 'tree'

    @classmethod
    def from_mode(cls, mode: str) -> 'EntryKind':
        return cls.TREE if mode == '040000' else cls.BLOB


class TreeEntry:
    """
    Represents a single entry in a tree.

    Each entry contains:
    - mode: File permissions (e.g., '100644' for file, '040000' for directory)
    - kind: EntryKind.BLOB or EntryKind.TREE
    - hash: SHA-1 hash of the object
    - name: Filename or directory name
    """

    def __init__(self, mode: str, kind: EntryKind, obj_hash: str, name: str):
        self.mode = mode
        self.kind = kind
        self.hash = obj_hash
        self.name = name

    @property
    def is_blob(self) -> bool:
        return self.kind is EntryKind.BLOB

    @property
    def is_tree(self) -> bool:
        return self.kind is EntryKind.TREE

    def __repr__(self) -> str:
        return f"TreeEntry({self.mode} {self.kind.value} {self.hash[:7]} {self.name})"

    def __lt__(self, other: 'TreeEntry') -> bool:
        """Sort entries by name for consistent ordering."""
        return self.name < other.name


class Tree(LitObject):
    """
    Represents directory structure.

    A tree contains entries pointing to blobs (files) and other trees (subdirectories).
    """

    def __init__(self):
        super().__init__()
        self.entries: List[TreeEntry] = []

    def add_entry(self, mode: str, kind: EntryKind, obj_hash: str, name: str) -> None:
        """
        Add entry to tree, replacing any entry with the same name.

        Args:
            mode: File mode
            kind: EntryKind of the object
            obj_hash: Object hash
            name: Entry name
        """
        self.entries = [e for e in self.entries if e.name != name]
        self.entries.append(TreeEntry(mode, kind, obj_hash, name))
        self.entries.sort()
        self._hash = None

    def entry(self, name: str) -> Optional[TreeEntry]:
        """Look up a direct child entry by name."""
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def serialize(self) -> bytes:
        """
        Serialize tree to the on-disk format.

        Format: <mode> <name>\0<20-byte hash>
        Each entry is: mode (as ASCII), space, name (UTF-8), null byte, hash (as binary)

        Returns:
            bytes: Serialized tree data
        """
        result = bytearray()
        for entry in sorted(self.entries):
            result += f"{entry.mode} {entry.name}".encode() + b'\0'
            result += bytes.fromhex(entry.hash)
        return bytes(result)

    def deserialize(self, data: bytes) -> None:
        self.entries = []
        pos = 0

        while pos < len(data):
            space_pos = data.index(b' ', pos)
            mode = data[pos:space_pos].decode()

            null_pos = data.index(b'\0', space_pos)
            name = data[space_pos + 1:null_pos].decode()

            obj_hash = data[null_pos + 1:null_pos + 21].hex()
            self.entries.append(TreeEntry(mode, EntryKind.from_mode(mode), obj_hash, name))

            pos = null_pos + 21

        self.entries.sort()
        self._hash = None

    def __repr__(self) -> str:
        return f"Tree(entries={len(self.entries)})"


class Commit(LitObject):
    """
    Represents a commit with metadata.

    A commit captures:
    - Snapshot of project (tree hash)
    - Parent commit(s) for history
    - Author and committer info
    - Timestamp
    - Commit message
    """

    def __init__(self):
        super().__init__()
        self.tree: str = ''
        self.parents: List[str] = []
        self.author: str = ''
        self.author_time: int = 0
        self.author_timezone: str = '+0000'
        self.committer: str = ''
        self.committer_time: int = 0
        self.committer_timezone: str = '+0000'
        self.message: str = ''

    @property
    def first_parent(self) -> Optional[str]:
        return self.parents[0] if self.parents else None

    def serialize(self) -> bytes:
        """
        Serialize commit.

        Format:
        tree <tree-hash>
        parent <parent-hash>  (zero or more)
        author Name <email> <timestamp> <timezone>
        committer Name <email> <timestamp> <timezone>

        <commit message>

        Returns:
            bytes: Serialized commit data
        """
        lines = [f'tree {self.tree}']

        for parent in self.parents:
            lines.append(f'parent {parent}')

        lines.append(f'author {self.author} {self.author_time} {self.author_timezone}')
        lines.append(f'committer {self.committer} {self.committer_time} {self.committer_timezone}')

        lines.append('')
        lines.append(self.message)

        return '\n'.join(lines).encode()

    def deserialize(self, data: bytes) -> None:
        content = data.decode()
        lines = content.split('\n')
        self.parents = []

        message_start = 0
        for i, line in enumerate(lines):
            if not line:
                message_start = i + 1
                break

            if line.startswith('tree '):
                self.tree = line[5:]

            elif line.startswith('parent '):
                self.parents.append(line[7:])

            elif line.startswith('author '):
                parts = line[7:].rsplit(' ', 2)
                self.author = parts[0]
                self.author_time = int(parts[1])
                self.author_timezone = parts[2]

            elif line.startswith('committer '):
                parts = line[10:].rsplit(' ', 2)
                self.committer = parts[0]
                self.committer_time = int(parts[1])
                self.committer_timezone = parts[2]

        self.message = '\n'.join(lines[message_start:])
        self._hash = None

    @classmethod
    def create(
        cls,
        tree_hash: str,
        parent_hashes: List[str],
        author: str,
        committer: str,
        message: str,
        timestamp: Optional[int] = None,
        timezone: str = '+0000'
    ) -> 'Commit':
        """
        Create a new commit.

        Args:
            tree_hash: Hash of tree object
            parent_hashes: List of parent commit hashes
            author: Author name and email (e.g., "Name <email>")
            committer: Committer name and email
            message: Commit message
            timestamp: Unix timestamp (defaults to current time)
            timezone: Timezone offset (e.g., "+0000", "-0500")

        Returns:
            Commit: New commit object
        """
        import time

        commit = cls()
        commit.tree = tree_hash
        commit.parents = list(parent_hashes)
        commit.author = author
        commit.committer = committer
        commit.message = message

        if timestamp is None:
            timestamp = int(time.time())

        commit.author_time = timestamp
        commit.committer_time = timestamp
        commit.author_timezone = timezone
        commit.committer_timezone = timezone

        return commit

    def __repr__(self) -> str:
        parent_info = f", parents={len(self.parents)}" if self.parents else ""
        msg_preview = self.message.split('\n')[0][:50]
        return f"Commit(hash={self.hash[:7]}{parent_info}, msg='{msg_preview}')"
