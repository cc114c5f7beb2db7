"""Hash utilities for litstage."""

import hashlib


def hash_object(data: bytes) -> str:
    """
    Compute SHA-1 hash of data.
    
    Args:
        data: Bytes to hash
        
    Returns:
        40-character hex string
    """
    return hashlib.sha1(data).hexdigest()


def hash_blob(data: bytes) -> str:
    """
    Compute the object id a blob with this content would have.
    
    Args:
        data: Raw file content
        
    Returns:
        40-character hex string
    """
    return hash_object(f"blob {len(data)}\0".encode() + data)


def hash_file(filepath: str) -> str:
    """
    Compute the blob object id of a file on disk.
    
    Args:
        filepath: Path to file
        
    Returns:
        40-character hex string
    """
    with open(filepath, 'rb') as f:
        return hash_blob(f.read())
