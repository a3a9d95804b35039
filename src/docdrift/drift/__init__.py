"""Drift module - find documentation that contradicts the API."""

from docdrift.drift.application.engine import compute_drift, compute_export_drift
from docdrift.drift.application.module_graph import ModuleGraph, build_module_graph
from docdrift.drift.domain.enums import DRIFT_CATEGORIES, DriftCategory, DriftType
from docdrift.drift.domain.models import DriftIssue, DriftResult, ExampleResult, MarkdownFile

__all__ = [
    "DRIFT_CATEGORIES",
    "DriftCategory",
    "DriftType",
    "DriftIssue",
    "DriftResult",
    "ExampleResult",
    "MarkdownFile",
    "ModuleGraph",
    "build_module_graph",
    "compute_drift",
    "compute_export_drift",
]
