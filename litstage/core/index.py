"""Index (staging area) implementation."""

import os
import struct
import hashlib
import logging
from pathlib import Path
from typing import Optional, Dict, Iterator
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SIGNATURE = b'DIRC'
ENTRY_FORMAT = '>IIIIIIIIII20sH'
ENTRY_SIZE = struct.calcsize(ENTRY_FORMAT)
DEFAULT_MODE = 0o100644


@dataclass
class IndexEntry:
    """
    Represents a single entry in the index.

    Stores metadata about a staged file including timestamps,
    permissions, and the hash of its content.
    """
    ctime: int          # Creation time (seconds)
    ctime_ns: int       # Creation time (nanoseconds)
    mtime: int          # Modification time (seconds)
    mtime_ns: int       # Modification time (nanoseconds)
    dev: int            # Device ID
    ino: int            # Inode number
    mode: int           # File mode/permissions
    uid: int            # User ID
    gid: int            # Group ID
    size: int           # File size
    sha1: str           # SHA-1 hash of content
    flags: int          # Flags (includes name length)
    path: str           # File path

    def __repr__(self) -> str:
        return f"IndexEntry({self.mode:o} {self.sha1[:7]} {self.path})"


class Index:
    """
    Index (staging area) of a lit repository.

    The index stores a list of files to be included in the next commit.
    Each entry contains file metadata and a hash of the file content.
    Changes stay in memory until ``write`` is called.
    """

    def __init__(self):
        self.entries: Dict[str, IndexEntry] = {}
        self.version: int = 2

    def add_entry(
        self,
        path: str,
        sha1: str,
        mode: int,
        size: int,
        mtime: int = 0,
        mtime_ns: int = 0,
        ctime: int = 0,
        ctime_ns: int = 0,
        dev: int = 0,
        ino: int = 0,
        uid: int = 0,
        gid: int = 0
    ) -> None:
        """
        Add or update entry in index.

        Args:
            path: File path relative to repository root
            sha1: Blob hash of file content
            mode: File mode/permissions
            size: File size in bytes
            mtime: Modification time (seconds)
            mtime_ns: Modification time (nanoseconds)
            ctime: Creation time (seconds)
            ctime_ns: Creation time (nanoseconds)
            dev: Device ID
            ino: Inode number
            uid: User ID
            gid: Group ID
        """
        flags = min(len(path.encode()), 0xFFF)

        self.entries[path] = IndexEntry(
            ctime=ctime,
            ctime_ns=ctime_ns,
            mtime=mtime,
            mtime_ns=mtime_ns,
            dev=dev,
            ino=ino,
            mode=mode,
            uid=uid,
            gid=gid,
            size=size,
            sha1=sha1,
            flags=flags,
            path=path
        )

    def add_file(self, repo, filepath) -> str:
        """
        Stage a workspace file.

        Args:
            repo: Repository instance
            filepath: Path to file (absolute or relative to the work tree)

        Returns:
            str: Blob hash of staged content
        """
        from .objects import Blob

        file_path = Path(filepath)

        if not file_path.is_absolute():
            file_path = repo.work_tree / file_path

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        if not file_path.is_file():
            raise ValueError(f"Not a file: {filepath}")

        blob = Blob.from_file(str(file_path))
        sha1 = repo.write_object(blob)

        stat = file_path.stat()
        rel_path = file_path.relative_to(repo.work_tree).as_posix()

        self.add_entry(
            path=rel_path,
            sha1=sha1,
            mode=stat.st_mode,
            size=stat.st_size,
            mtime=int(stat.st_mtime),
            mtime_ns=stat.st_mtime_ns % 1_000_000_000,
            ctime=int(stat.st_ctime),
            ctime_ns=stat.st_ctime_ns % 1_000_000_000,
            dev=stat.st_dev & 0xFFFFFFFF,
            ino=stat.st_ino & 0xFFFFFFFF,
            uid=stat.st_uid,
            gid=stat.st_gid
        )
        return sha1

    def add_data(self, repo, path: str, data: bytes, mode: int = DEFAULT_MODE) -> str:
        """
        Stage raw bytes at a path without touching the workspace.

        Stat fields are zeroed, so status checks fall back to content hashes.

        Returns:
            str: Blob hash of the staged content
        """
        from .objects import Blob

        sha1 = repo.write_object(Blob(data))
        self.add_entry(path=path, sha1=sha1, mode=mode, size=len(data))
        return sha1

    def remove_entry(self, path: str) -> bool:
        """
        Remove entry from index.

        Returns:
            True if an entry was removed
        """
        return self.entries.pop(path, None) is not None

    def get_entry(self, path: str) -> Optional[IndexEntry]:
        """Get entry by path."""
        return self.entries.get(path)

    def clear(self) -> None:
        """Clear all entries from index."""
        self.entries.clear()

    def serialize(self) -> bytes:
        """
        Encode the index in the binary DIRC format.

        Format:
        - Header: 'DIRC' + version (4 bytes) + entry count (4 bytes)
        - Entries: sorted by path, each with metadata + path
        - Checksum: SHA-1 of entire index
        """
        content = bytearray()

        content.extend(SIGNATURE)
        content.extend(struct.pack('>I', self.version))
        content.extend(struct.pack('>I', len(self.entries)))

        for path in sorted(self.entries.keys()):
            entry = self.entries[path]

            entry_data = struct.pack(
                ENTRY_FORMAT,
                entry.ctime,
                entry.ctime_ns,
                entry.mtime,
                entry.mtime_ns,
                entry.dev,
                entry.ino,
                entry.mode,
                entry.uid,
                entry.gid,
                entry.size,
                bytes.fromhex(entry.sha1),
                entry.flags
            )
            path_bytes = entry.path.encode()

            content.extend(entry_data)
            content.extend(path_bytes)
            content.extend(b'\x00')

            # Padding to 8-byte alignment
            entry_len = len(entry_data) + len(path_bytes) + 1
            padlen = (8 - (entry_len % 8)) % 8
            content.extend(b'\x00' * padlen)

        content.extend(hashlib.sha1(content).digest())
        return bytes(content)

    def write(self, index_path) -> None:
        """
        Write index to disk.

        The data goes to ``<index>.lock`` first and is renamed over the
        index, so readers never see a partially written file.

        Args:
            index_path: Path to index file
        """
        index_path = Path(index_path)
        lock_path = index_path.with_name(index_path.name + '.lock')
        data = self.serialize()

        try:
            with open(lock_path, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(lock_path, index_path)
        except OSError:
            if lock_path.exists():
                lock_path.unlink()
            raise

        logger.debug("Wrote index with %d entries to %s", len(self.entries), index_path)

    def read(self, index_path) -> None:
        """
        Read index from disk.

        A missing index file reads as an empty index.

        Raises:
            ValueError: If the file is not a valid index
        """
        index_path = Path(index_path)
        if not index_path.exists():
            self.entries.clear()
            return

        data = index_path.read_bytes()

        if len(data) < 32:
            raise ValueError("Index file too short")

        # Verify checksum
        content = data[:-20]
        checksum = data[-20:]
        if checksum != hashlib.sha1(content).digest():
            raise ValueError("Index checksum mismatch")

        signature = data[0:4]
        if signature != SIGNATURE:
            raise ValueError(f"Invalid index signature: {signature}")

        self.version = struct.unpack('>I', data[4:8])[0]
        entry_count = struct.unpack('>I', data[8:12])[0]

        self.entries.clear()
        offset = 12

        for _ in range(entry_count):
            fields = struct.unpack(ENTRY_FORMAT, data[offset:offset + ENTRY_SIZE])
            offset += ENTRY_SIZE

            path_end = data.index(b'\x00', offset)
            path_bytes = data[offset:path_end]
            offset = path_end + 1

            entry_len = ENTRY_SIZE + len(path_bytes) + 1
            offset += (8 - (entry_len % 8)) % 8

            path = path_bytes.decode()
            self.entries[path] = IndexEntry(
                ctime=fields[0],
                ctime_ns=fields[1],
                mtime=fields[2],
                mtime_ns=fields[3],
                dev=fields[4],
                ino=fields[5],
                mode=fields[6],
                uid=fields[7],
                gid=fields[8],
                size=fields[9],
                sha1=fields[10].hex(),
                flags=fields[11],
                path=path
            )

    def __contains__(self, path: str) -> bool:
        return path in self.entries

    def __iter__(self) -> Iterator[IndexEntry]:
        for path in sorted(self.entries):
            yield self.entries[path]

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"Index(entries={len(self.entries)})"
