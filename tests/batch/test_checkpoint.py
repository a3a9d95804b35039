"""
Tests for the batch checkpoint log.

Covers:
1. Writing, reading back and committing a log
2. Truncated, out-of-sequence and foreign logs
3. Ownership by live processes
4. Orphaned log discovery and cleanup
"""

import json
import os
import time
from datetime import datetime, timezone

import pytest

from docdrift.batch.application.checkpoint import (
    CHECKPOINT_SCHEMA_VERSION,
    CheckpointLog,
    checkpoint_path,
    cleanup_orphaned_temp_files,
    derive_run_id,
    find_orphaned_temp_files,
    read_header,
)
from docdrift.batch.domain.models import CheckpointHeader
from docdrift.shared.domain.exceptions import CheckpointInUseError

ITEMS = ["a", "b", "c"]


@pytest.fixture
def log(tmp_path):
    run_id = derive_run_id(ITEMS, "test")
    return CheckpointLog(checkpoint_path(tmp_path, "docdrift", run_id), run_id, ITEMS)


def _set_owner(path, pid):
    lines = path.read_text().splitlines()
    header = json.loads(lines[0])
    header["pid"] = pid
    lines[0] = json.dumps(header)
    path.write_text("\n".join(lines) + "\n")


class TestRunId:
    def test_order_independent(self):
        assert derive_run_id(["b", "a"], "x") == derive_run_id(["a", "b"], "x")

    def test_depends_on_identity_and_items(self):
        assert derive_run_id(["a"], "x") != derive_run_id(["a"], "y")
        assert derive_run_id(["a"], "x") != derive_run_id(["a", "b"], "x")


class TestCheckpointLog:
    def test_write_and_load(self, log):
        log.start()
        log.append("a", {"score": 1})
        log.append("b", {"score": 2})
        log.close()

        header = read_header(log.path)
        assert header.pid == os.getpid()
        assert header.schema_version == CHECKPOINT_SCHEMA_VERSION
        assert header.item_ids == ITEMS

        state = log.load()
        assert state.processed_ids == ["a", "b"]
        assert state.results == {"a": {"score": 1}, "b": {"score": 2}}
        assert state.total_expected == 3
        assert state.interrupted

    def test_missing_log(self, log):
        assert log.load() is None

    def test_truncated_trailing_line_is_ignored(self, log):
        log.start()
        log.append("a", 1)
        log.close()
        with open(log.path, "a") as f:
            f.write('{"type": "result", "index": 1, "itemId": "b", "da')

        assert log.load().processed_ids == ["a"]

    def test_out_of_sequence_record_stops_reading(self, log):
        log.start()
        log.append("a", 1)
        log.close()
        with open(log.path, "a") as f:
            f.write(json.dumps({"type": "result", "index": 5, "itemId": "c", "data": 3}) + "\n")
            f.write(json.dumps({"type": "result", "index": 1, "itemId": "b", "data": 2}) + "\n")

        assert log.load().processed_ids == ["a"]

    def test_foreign_log_is_ignored(self, log):
        log.start()
        log.append("a", 1)
        log.close()
        other = CheckpointLog(log.path, log._run_id, ["a", "b"])
        assert other.load() is None

    def test_restart_rewrites_completed_records(self, log):
        log.start()
        log.append("a", 1)
        log.append("b", 2)
        log.close()

        state = log.load()
        log.start(state.results)
        log.append("c", 3)
        log.close()

        lines = log.path.read_text().splitlines()
        assert len(lines) == 4
        assert [json.loads(line)["index"] for line in lines[1:]] == [0, 1, 2]
        assert log.load().results == {"a": 1, "b": 2, "c": 3}

    def test_commit_deletes_the_log(self, log):
        log.start()
        log.append("a", 1)
        log.commit()
        assert not log.path.exists()

    def test_log_owned_by_live_process_is_in_use(self, log):
        log.start()
        log.close()
        _set_owner(log.path, os.getppid())

        with pytest.raises(CheckpointInUseError):
            log.load()
        with pytest.raises(CheckpointInUseError):
            log.ensure_not_in_use()

    def test_log_of_dead_process_can_be_resumed(self, log):
        log.start()
        log.append("a", 1)
        log.close()
        _set_owner(log.path, 0)

        assert log.load().processed_ids == ["a"]


class TestOrphanedFiles:
    def _write(self, directory, name, pid, age):
        path = directory / name
        header = CheckpointHeader(
            schema_version=CHECKPOINT_SCHEMA_VERSION,
            run_id=name,
            pid=pid,
            started_at=datetime.now(timezone.utc),
            total_expected=1,
            item_ids=["a"],
        )
        path.write_text(json.dumps(header.to_json()) + "\n")
        mtime = time.time() - age
        os.utime(path, (mtime, mtime))
        return path

    def test_find_by_prefix_and_age(self, tmp_path):
        old = self._write(tmp_path, "docdrift-old.ndjson", 0, 7200)
        self._write(tmp_path, "docdrift-new.ndjson", 0, 10)
        self._write(tmp_path, "other-old.ndjson", 0, 7200)
        self._write(tmp_path, "docdrift-old.json", 0, 7200)

        assert find_orphaned_temp_files(tmp_path) == [old]
        assert find_orphaned_temp_files(tmp_path / "missing") == []

    def test_cleanup_keeps_logs_of_live_owners(self, tmp_path):
        dead = self._write(tmp_path, "docdrift-dead.ndjson", 0, 7200)
        alive = self._write(tmp_path, "docdrift-alive.ndjson", os.getpid(), 7200)
        unreadable = tmp_path / "docdrift-garbage.ndjson"
        unreadable.write_text("not json\n")
        os.utime(unreadable, (time.time() - 7200, time.time() - 7200))

        assert cleanup_orphaned_temp_files(tmp_path, max_age_seconds=3600) == 2
        assert not dead.exists()
        assert not unreadable.exists()
        assert alive.exists()
