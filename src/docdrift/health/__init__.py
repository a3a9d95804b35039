"""Health module - coverage, accuracy and composite documentation health."""

from docdrift.health.application.coverage import analyze_exports
from docdrift.health.application.report import build_drift_report, load_drift_report, save_drift_report
from docdrift.health.application.scorer import compute_health
from docdrift.health.domain.models import DocumentationHealth, DriftReport, ExportAnalysis
from docdrift.health.domain.presets import DocRequirements, StylePreset, resolve_requirements
from docdrift.health.domain.weights import DEFAULT_HEALTH_WEIGHTS, HealthWeights

__all__ = [
    "DEFAULT_HEALTH_WEIGHTS",
    "DocRequirements",
    "DocumentationHealth",
    "DriftReport",
    "ExportAnalysis",
    "HealthWeights",
    "StylePreset",
    "analyze_exports",
    "build_drift_report",
    "compute_health",
    "load_drift_report",
    "resolve_requirements",
    "save_drift_report",
]
