"""
Checkpoint log for resumable batch runs.

Each run appends to ``<dir>/<prefix>-<run_id>.ndjson``:

    {"type": "header", "schemaVersion": ..., "runId": ..., "pid": ...,
     "startedAt": ..., "totalExpected": N, "itemIds": [...]}
    {"type": "result", "index": 0, "itemId": "...", "data": {...}}
    ...

Every record is flushed and fsynced before the next item starts, so a
killed process leaves a log that is complete up to the last finished item
(plus, at worst, one truncated trailing line, which is ignored on load).

Ownership: the header names the pid of the process writing the log. A log
whose owner is still alive (and is not us) is in use and must not be
resumed or deleted; a log whose owner is gone is an orphan.
"""

from __future__ import annotations

import json
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil
import structlog

from docdrift.batch.domain.models import CheckpointHeader, CheckpointRecord, PackageResult, PartialAnalysisState
from docdrift.cache.hasher import hash_string
from docdrift.health.domain.models import ExportAnalysis
from docdrift.shared.domain.exceptions import CheckpointError, CheckpointInUseError
from docdrift.shared.infrastructure.atomic_io import atomic_write_text
from docdrift.shared.utils.schema_version import derive_schema_version

logger = structlog.get_logger(__name__)

CHECKPOINT_SUFFIX = ".ndjson"
DEFAULT_PREFIX = "docdrift"
DEFAULT_MAX_AGE_SECONDS = 60 * 60

# Changes whenever the record or payload layout changes; older logs are then ignored
CHECKPOINT_SCHEMA_VERSION = derive_schema_version(CheckpointRecord, ExportAnalysis, PackageResult)


def derive_run_id(item_ids: List[str], identity: str) -> str:
    """Stable id for a run over *item_ids* of the input named by *identity*."""
    return hash_string(identity + "\n" + "\n".join(sorted(item_ids)))


def checkpoint_path(directory: Path, prefix: str, run_id: str) -> Path:
    return Path(directory) / f"{prefix}-{run_id}{CHECKPOINT_SUFFIX}"


def is_process_alive(pid: Optional[int]) -> bool:
    if not pid or pid <= 0:
        return False
    try:
        return psutil.pid_exists(pid)
    except (psutil.Error, OSError):
        return False


def owned_by_other_live_process(pid: Optional[int]) -> bool:
    return pid is not None and pid != os.getpid() and is_process_alive(pid)


def read_header(path: Path) -> Optional[CheckpointHeader]:
    """Header of a checkpoint log, or None if it is missing or unreadable."""
    try:
        with open(path, encoding="utf-8") as f:
            first = f.readline()
        data = json.loads(first)
        if not isinstance(data, dict) or data.get("type") != "header":
            return None
        return CheckpointHeader.from_json(data)
    except (OSError, ValueError, TypeError):
        return None


class CheckpointLog:
    """Append-only checkpoint log of one run."""

    def __init__(self, path: Path, run_id: str, item_ids: List[str]) -> None:
        self._path = Path(path)
        self._run_id = run_id
        self._item_ids = list(item_ids)
        self._fd: Any = None
        self._next_index = 0

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def ensure_not_in_use(self) -> None:
        header = read_header(self._path) if self.exists() else None
        if header is not None and owned_by_other_live_process(header.pid):
            raise CheckpointInUseError(
                f"Checkpoint {self._path} is in use by process {header.pid}",
                context={"path": str(self._path), "pid": header.pid},
            )

    def load(self) -> Optional[PartialAnalysisState]:
        """
        Read back a previous run's progress.

        Returns None when there is no log or it belongs to a different run
        (other items, other record layout). Records are accepted in order
        until the first unreadable or out-of-sequence line.

        Raises:
            CheckpointInUseError: If another live process owns the log
        """
        if not self.exists():
            return None
        self.ensure_not_in_use()

        header = read_header(self._path)
        if (
            header is None
            or header.run_id != self._run_id
            or header.schema_version != CHECKPOINT_SCHEMA_VERSION
            or header.item_ids != self._item_ids
        ):
            logger.info("batch_checkpoint_foreign", path=str(self._path))
            return None

        state = PartialAnalysisState(run_id=header.run_id, total_expected=header.total_expected, pid=header.pid)
        with open(self._path, encoding="utf-8") as f:
            f.readline()
            for line_num, line in enumerate(f, 2):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = CheckpointRecord.from_json(json.loads(line))
                except (ValueError, TypeError):
                    logger.debug("batch_checkpoint_bad_line", line_num=line_num, path=str(self._path))
                    break
                if record.index != len(state.processed_ids) or record.item_id not in self._item_ids:
                    logger.debug("batch_checkpoint_out_of_sequence", line_num=line_num, path=str(self._path))
                    break
                state.processed_ids.append(record.item_id)
                state.results[record.item_id] = record.data
        return state

    def start(self, completed: Optional[Dict[str, Any]] = None) -> None:
        """
        (Re)write the log with our header plus already completed records,
        then keep it open for appending.
        """
        completed = completed or {}
        header = CheckpointHeader(
            schema_version=CHECKPOINT_SCHEMA_VERSION,
            run_id=self._run_id,
            pid=os.getpid(),
            started_at=datetime.now(timezone.utc),
            total_expected=len(self._item_ids),
            item_ids=self._item_ids,
        )
        lines = [json.dumps(header.to_json())]
        for index, (item_id, data) in enumerate(completed.items()):
            lines.append(json.dumps(CheckpointRecord(index=index, item_id=item_id, data=data).to_json()))
        try:
            atomic_write_text(self._path, "\n".join(lines) + "\n")
            self._fd = open(self._path, "a", encoding="utf-8")
        except OSError as e:
            raise CheckpointError(f"Cannot write checkpoint {self._path}: {e}", context={"path": str(self._path)}) from e
        self._next_index = len(completed)

    def append(self, item_id: str, data: Any) -> None:
        if self._fd is None:
            raise CheckpointError("Checkpoint log is not open", context={"path": str(self._path)})
        record = CheckpointRecord(index=self._next_index, item_id=item_id, data=data)
        self._fd.write(json.dumps(record.to_json()) + "\n")
        self._next_index += 1

    def flush(self) -> None:
        if self._fd is not None and not self._fd.closed:
            self._fd.flush()
            os.fsync(self._fd.fileno())

    def close(self) -> None:
        """Close the log, keeping the file for a later resume."""
        if self._fd is not None and not self._fd.closed:
            self.flush()
            self._fd.close()
        self._fd = None

    def commit(self) -> None:
        """Run finished: close and delete the log."""
        self.close()
        self._path.unlink(missing_ok=True)
        logger.debug("batch_checkpoint_committed", path=str(self._path), entries=self._next_index)

    def discard(self) -> None:
        self.close()
        self._path.unlink(missing_ok=True)


def find_orphaned_temp_files(
    directory: Path,
    prefix: str = DEFAULT_PREFIX,
    max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS,
    *,
    now: Optional[float] = None,
) -> List[Path]:
    """Checkpoint logs named ``<prefix>-*.ndjson`` not modified for *max_age_seconds*."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    now = time.time() if now is None else now
    stale = []
    for path in sorted(directory.glob(f"{prefix}-*{CHECKPOINT_SUFFIX}")):
        try:
            if now - path.stat().st_mtime >= max_age_seconds:
                stale.append(path)
        except FileNotFoundError:
            continue
    return stale


def cleanup_orphaned_temp_files(
    directory: Path,
    prefix: str = DEFAULT_PREFIX,
    max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS,
    *,
    now: Optional[float] = None,
) -> int:
    """Delete stale checkpoint logs whose owning process is gone. Returns the count."""
    removed = 0
    for path in find_orphaned_temp_files(directory, prefix, max_age_seconds, now=now):
        header = read_header(path)
        if header is not None and is_process_alive(header.pid):
            logger.debug("batch_checkpoint_owner_alive", path=str(path), pid=header.pid)
            continue
        path.unlink(missing_ok=True)
        removed += 1
    if removed:
        logger.info("batch_orphaned_checkpoints_removed", directory=str(directory), removed=removed)
    return removed
