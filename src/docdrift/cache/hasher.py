"""
Content hashing for cache keys and change detection.

Digests are the first 16 hex characters of SHA-256: short enough for file
names, long enough that collisions between source files do not occur in
practice.
"""

import hashlib
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

HASH_LENGTH = 16
_CHUNK_SIZE = 65536

PathLike = Union[str, Path]


def hash_string(content: Union[str, bytes]) -> str:
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()[:HASH_LENGTH]


def hash_file(path: PathLike) -> Optional[str]:
    """Digest of a file's bytes, or None when it is not a readable file."""
    path = Path(path)
    if not path.is_file():
        return None
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()[:HASH_LENGTH]


def _key_for(path: Path, root: Optional[Path]) -> str:
    if root is not None:
        try:
            return path.resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            pass
    return path.as_posix()


def hash_files(paths: Iterable[PathLike], root: Optional[PathLike] = None) -> Dict[str, str]:
    """
    Digest of every existing file, keyed by path (relative to *root* if given).

    Missing files are left out, so a deleted file shows up as a removed key.
    """
    root_path = Path(root) if root is not None else None
    hashes: Dict[str, str] = {}
    for raw in paths:
        path = Path(raw)
        if root_path is not None and not path.is_absolute():
            path = root_path / path
        digest = hash_file(path)
        if digest is not None:
            hashes[_key_for(path, root_path)] = digest
    return dict(sorted(hashes.items()))


def diff_hashes(old: Mapping[str, str], new: Mapping[str, str]) -> List[str]:
    """Sorted paths whose hash changed, plus paths added or removed."""
    changed = {path for path, digest in old.items() if new.get(path) != digest}
    added = set(new) - set(old)
    return sorted(changed | added)
