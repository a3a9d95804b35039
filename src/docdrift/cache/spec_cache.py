"""
Versioned, content-addressed cache for per-package analysis results.

An entry is reusable only when its version matches CACHE_VERSION and the
tracked files hash exactly as they did when it was written (no file
changed, disappeared or appeared). Any mismatch invalidates the whole
entry. The cache only saves time: a cold cache produces the same results.
"""

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import structlog

from docdrift.cache.hasher import PathLike, diff_hashes, hash_files, hash_string
from docdrift.shared.domain.base_model import BaseDomainModel
from docdrift.shared.domain.exceptions import CacheCorruptedError
from docdrift.shared.infrastructure.atomic_io import atomic_write_json, file_lock

logger = structlog.get_logger(__name__)

CACHE_VERSION = 1
SPEC_CACHE_FILE = "spec-cache.json"


@dataclass
class CacheEntry(BaseDomainModel):
    version: int
    file_hashes: Dict[str, str]
    result: Any = None
    config_hash: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class CacheValidationResult(BaseDomainModel):
    valid: bool
    reason: Optional[str] = None
    changed: List[str] = field(default_factory=list)


@dataclass
class CacheStatus(BaseDomainModel):
    directory: str
    entries: int = 0
    total_bytes: int = 0
    oldest: Optional[datetime] = None
    newest: Optional[datetime] = None


def validate_spec_cache(
    entry: CacheEntry,
    current_files: Dict[str, str],
    *,
    config_hash: Optional[str] = None,
) -> CacheValidationResult:
    """
    Check an entry against the current file hashes.

    Args:
        entry: Loaded cache entry
        current_files: Current path -> hash map of the tracked files
        config_hash: Hash of the analysis configuration, when it matters
    """
    if entry.version != CACHE_VERSION:
        return CacheValidationResult(valid=False, reason=f"cache version {entry.version} != {CACHE_VERSION}")
    if config_hash is not None and entry.config_hash != config_hash:
        return CacheValidationResult(valid=False, reason="configuration changed")
    changed = diff_hashes(entry.file_hashes, current_files)
    if changed:
        return CacheValidationResult(valid=False, reason=f"{len(changed)} file(s) changed", changed=changed)
    return CacheValidationResult(valid=True)


def load_spec_cache(path: PathLike) -> Optional[CacheEntry]:
    """
    Read a cache file.

    Returns:
        The entry, or None when the file does not exist

    Raises:
        CacheCorruptedError: If the file exists but cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return CacheEntry.from_json(data)
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError, TypeError, AttributeError) as e:
        raise CacheCorruptedError(f"Spec cache {path} is corrupted: {e}", context={"path": str(path)}) from e


def save_spec_cache(path: PathLike, entry: CacheEntry) -> None:
    """Write an entry atomically under an advisory lock; last writer wins."""
    path = Path(path)
    with file_lock(path):
        atomic_write_json(path, entry.to_json(), indent=None)


class SpecCache:
    """
    Directory of cache entries, one file per key.

    Constructed once by the caller and passed to the components that use
    it; nothing here is process-global.
    """

    def __init__(self, cache_dir: PathLike) -> None:
        self._cache_dir = Path(cache_dir)
        self._hits = 0
        self._misses = 0

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def path_for(self, key: str) -> Path:
        return self._cache_dir / f"{hash_string(key)}-{SPEC_CACHE_FILE}"

    def get(
        self,
        key: str,
        files: Iterable[PathLike],
        *,
        root: Optional[PathLike] = None,
        config_hash: Optional[str] = None,
    ) -> Optional[Any]:
        """Cached result for *key*, or None on a miss."""
        entry = load_spec_cache(self.path_for(key))
        if entry is None:
            self._misses += 1
            logger.debug("spec_cache_miss", key=key, reason="no entry")
            return None

        validation = validate_spec_cache(entry, hash_files(files, root), config_hash=config_hash)
        if not validation.valid:
            self._misses += 1
            logger.debug("spec_cache_miss", key=key, reason=validation.reason, changed=validation.changed[:10])
            return None

        self._hits += 1
        logger.debug("spec_cache_hit", key=key, files=len(entry.file_hashes))
        return entry.result

    def put(
        self,
        key: str,
        files: Iterable[PathLike],
        result: Any,
        *,
        root: Optional[PathLike] = None,
        config_hash: Optional[str] = None,
    ) -> CacheEntry:
        entry = CacheEntry(
            version=CACHE_VERSION,
            file_hashes=hash_files(files, root),
            result=result,
            config_hash=config_hash,
            created_at=datetime.now(timezone.utc),
        )
        save_spec_cache(self.path_for(key), entry)
        logger.debug("spec_cache_saved", key=key, files=len(entry.file_hashes))
        return entry

    def _entry_files(self) -> List[Path]:
        if not self._cache_dir.is_dir():
            return []
        return sorted(self._cache_dir.glob(f"*-{SPEC_CACHE_FILE}"))

    def clear(self) -> int:
        """Delete every entry; returns how many were removed."""
        removed = 0
        for path in self._entry_files():
            path.unlink(missing_ok=True)
            Path(f"{path}.lock").unlink(missing_ok=True)
            removed += 1
        logger.info("spec_cache_cleared", directory=str(self._cache_dir), removed=removed)
        return removed

    def status(self) -> CacheStatus:
        status = CacheStatus(directory=str(self._cache_dir))
        for path in self._entry_files():
            stat = os.stat(path)
            modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
            status.entries += 1
            status.total_bytes += stat.st_size
            status.oldest = modified if status.oldest is None else min(status.oldest, modified)
            status.newest = modified if status.newest is None else max(status.newest, modified)
        return status


def config_hash_for(*parts: Union[str, None]) -> str:
    """Hash of the analysis settings that change cached results."""
    return hash_string("|".join(p or "" for p in parts))
