"""Tests for the persisted-layout fingerprint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest
from pydantic import BaseModel

from docdrift.batch.application.checkpoint import CHECKPOINT_SCHEMA_VERSION
from docdrift.batch.domain.models import CheckpointRecord, PackageResult
from docdrift.health.domain.models import ExportAnalysis
from docdrift.shared.utils.schema_version import derive_schema_version
from docdrift.spec.domain.models import ApiSpec


@dataclass
class Issue:
    target: str


@dataclass
class IssueRetyped:
    target: int


@dataclass
class Analysis:
    export_id: str
    drift: List[Issue]


@dataclass
class AnalysisRetypedDrift:
    export_id: str
    drift: List[IssueRetyped]


@dataclass
class Record:
    index: int
    data: Any = None


@dataclass
class RecordExtra:
    index: int
    data: Any = None
    item_id: Optional[str] = None


class Meta(BaseModel):
    name: str


class MetaExtra(BaseModel):
    name: str
    version: str = ""


class Holder(BaseModel):
    meta: Dict[str, Meta]


class TestDeriveSchemaVersion:
    def test_stable_hex_digest(self):
        version = derive_schema_version(Record)
        assert version == derive_schema_version(Record)
        assert len(version) == 8
        int(version, 16)

    def test_field_changes(self):
        assert derive_schema_version(Record) != derive_schema_version(RecordExtra)
        assert derive_schema_version(Issue) != derive_schema_version(IssueRetyped)
        assert derive_schema_version(Meta) != derive_schema_version(MetaExtra)

    def test_nested_model_change_is_detected(self):
        assert derive_schema_version(Analysis) != derive_schema_version(AnalysisRetypedDrift)

    def test_nested_pydantic_model_is_followed(self):
        assert derive_schema_version(Holder) == derive_schema_version(Holder, Meta)

    def test_payload_models_count(self):
        assert derive_schema_version(Record, Analysis) != derive_schema_version(Record)
        assert derive_schema_version(Record, Analysis) == derive_schema_version(Analysis, Record)

    def test_rejects_plain_classes(self):
        class Plain:
            x: int = 0

        with pytest.raises(TypeError, match="neither a dataclass nor a Pydantic BaseModel"):
            derive_schema_version(Plain)
        with pytest.raises(TypeError):
            derive_schema_version()

    def test_checkpoint_version_covers_payloads(self):
        assert CHECKPOINT_SCHEMA_VERSION == derive_schema_version(CheckpointRecord, ExportAnalysis, PackageResult)
        assert CHECKPOINT_SCHEMA_VERSION != derive_schema_version(CheckpointRecord)

    def test_spec_model_tree(self):
        assert len(derive_schema_version(ApiSpec)) == 8
