"""Batch module - resumable analysis of many exports or packages."""

from docdrift.batch.application.aggregate import aggregate_results, create_package_result
from docdrift.batch.application.analyzer import BatchAnalyzer
from docdrift.batch.application.checkpoint import cleanup_orphaned_temp_files, find_orphaned_temp_files
from docdrift.batch.domain.models import BatchResult, PackageInput, PackageResult, RunState

__all__ = [
    "BatchAnalyzer",
    "BatchResult",
    "PackageInput",
    "PackageResult",
    "RunState",
    "aggregate_results",
    "create_package_result",
    "cleanup_orphaned_temp_files",
    "find_orphaned_temp_files",
]
