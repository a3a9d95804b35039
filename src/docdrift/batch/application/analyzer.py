"""
Resumable batch analysis.

A run is a fixed, sorted list of work items (overload groups of one spec,
or whole packages). Each finished item is recorded in a checkpoint log;
if the process dies, re-running the same input finds the log under the
same run id and continues from the first unprocessed item. Results are
always rebuilt from the recorded JSON, so a resumed run returns exactly
what an uninterrupted run would have.
"""

import asyncio
import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import structlog

from docdrift.batch.application.aggregate import aggregate_results, create_package_result
from docdrift.batch.application.checkpoint import (
    DEFAULT_PREFIX,
    CheckpointLog,
    checkpoint_path,
    derive_run_id,
)
from docdrift.batch.domain.models import (
    BatchResult,
    ExportBatchResult,
    PackageInput,
    PackageResult,
    RunState,
    WorkItem,
)
from docdrift.cache.hasher import hash_string
from docdrift.cache.spec_cache import SpecCache, config_hash_for
from docdrift.drift.application.engine import compute_drift, compute_export_drift, group_example_results
from docdrift.drift.application.module_graph import ModuleGraph, build_module_graph
from docdrift.drift.domain.models import DriftResult, ExampleResult, MarkdownFile
from docdrift.drift.domain.registry import build_export_registry
from docdrift.health.application.coverage import analyze_group, group_overloads, included_exports
from docdrift.health.application.scorer import compute_example_metrics, compute_health, health_from_analyses
from docdrift.health.domain.models import ExportAnalysis
from docdrift.health.domain.presets import DEFAULT_REQUIREMENTS, DocRequirements
from docdrift.health.domain.weights import DEFAULT_HEALTH_WEIGHTS, HealthWeights
from docdrift.history.application.tracker import HistoryTracker, compute_aggregate_snapshot, compute_snapshot
from docdrift.spec.application.normalize import canonical_json
from docdrift.spec.domain.models import ApiSpec

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def _to_plain_json(data: Any) -> Any:
    """The value as it reads back from a checkpoint record."""
    return json.loads(json.dumps(data))


def spec_fingerprint(spec: ApiSpec) -> str:
    return hash_string(canonical_json(spec))


def inputs_fingerprint(
    example_results: Optional[Sequence[ExampleResult]] = None,
    markdown_files: Optional[Sequence[MarkdownFile]] = None,
) -> str:
    """Hash of the example outcomes and markdown docs analyzed alongside a spec."""
    parts = ["examples:-" if example_results is None else "examples:"]
    parts.extend(json.dumps(r.to_json(), sort_keys=True) for r in example_results or ())
    parts.append("docs:-" if markdown_files is None else "docs:")
    parts.extend(f"{m.path}={hash_string(m.content)}" for m in markdown_files or ())
    return hash_string("\n".join(parts))


def package_fingerprint(package: PackageInput) -> str:
    """Everything about one package that changes its result."""
    return hash_string(
        f"{spec_fingerprint(package.spec)}|{inputs_fingerprint(package.example_results, package.markdown_files)}"
    )


class BatchAnalyzer:
    """
    Analyze specs item by item with checkpointing and cooperative yields.

    Args:
        checkpoint_dir: Directory for checkpoint logs (system temp dir if None)
        prefix: Checkpoint file name prefix
        yield_every: Items processed between ``await asyncio.sleep(0)``
        checkpoint_every: Items processed between checkpoint flushes
        cache: Reuse per-package results across runs
        history: Append a snapshot after every successful run
        on_progress: Called as ``on_progress(current, total, label)`` after each item
    """

    def __init__(
        self,
        checkpoint_dir: Optional[Path] = None,
        *,
        prefix: str = DEFAULT_PREFIX,
        yield_every: int = 5,
        checkpoint_every: int = 1,
        cache: Optional[SpecCache] = None,
        history: Optional[HistoryTracker] = None,
        on_progress: Optional[ProgressCallback] = None,
        requirements: Optional[DocRequirements] = None,
        weights: HealthWeights = DEFAULT_HEALTH_WEIGHTS,
    ) -> None:
        if yield_every < 1 or checkpoint_every < 1:
            raise ValueError("yield_every and checkpoint_every must be at least 1")
        self.checkpoint_dir = Path(checkpoint_dir) if checkpoint_dir else Path(tempfile.gettempdir())
        self.prefix = prefix
        self.yield_every = yield_every
        self.checkpoint_every = checkpoint_every
        self.cache = cache
        self.history = history
        self.on_progress = on_progress
        self.requirements = requirements or DEFAULT_REQUIREMENTS
        self.weights = weights

        self.state = RunState.IDLE
        self.run_id: Optional[str] = None
        self.resumed_count = 0
        self.processed_count = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def checkpoint_path_for(self, run_id: str) -> Path:
        return checkpoint_path(self.checkpoint_dir, self.prefix, run_id)

    async def analyze_exports_async(
        self,
        spec: ApiSpec,
        *,
        example_results: Optional[Iterable[ExampleResult]] = None,
        resume: bool = True,
    ) -> ExportBatchResult:
        """Analyze one spec, one overload group per work item."""
        example_results = list(example_results) if example_results is not None else None
        groups = group_overloads(included_exports(spec))
        registry = build_export_registry(spec)
        examples_by_export = group_example_results(example_results)

        def process(item: WorkItem) -> Any:
            group = groups[item.item_id]
            drift = DriftResult(
                exports={
                    export.id: compute_export_drift(export, registry, None, examples_by_export.get(export.id, ()))
                    for export in group
                }
            )
            return analyze_group(item.item_id, group, drift, self.requirements).to_json()

        items = [WorkItem(item_id=name, label=name) for name in groups]
        identity = (
            f"exports|{spec.identity}|{spec_fingerprint(spec)}|"
            f"{inputs_fingerprint(example_results)}|{self._config_hash()}"
        )
        records = await self._run(identity, items, process, resume)

        analyses: Dict[str, ExportAnalysis] = {}
        for data in records:
            analysis = ExportAnalysis.from_json(data)
            analyses[analysis.export_id] = analysis
        health = health_from_analyses(analyses, compute_example_metrics(spec, example_results), self.weights)

        if self.history is not None:
            self.history.save_snapshot(compute_snapshot(health, package=spec.meta.name, version=spec.meta.version))
        return ExportBatchResult(
            package_name=spec.meta.name,
            package_version=spec.meta.version,
            run_id=self.run_id,
            health=health,
            exports=analyses,
        )

    async def analyze_packages_async(
        self,
        packages: Sequence[PackageInput],
        *,
        resume: bool = True,
    ) -> BatchResult:
        """Analyze several packages, one package per work item, and aggregate them."""
        by_id: Dict[str, PackageInput] = {}
        for package in packages:
            if package.item_id in by_id:
                raise ValueError(f"Duplicate package in batch: {package.item_id}")
            by_id[package.item_id] = package

        module_graph = build_module_graph([p.spec for p in packages])
        config_hash = self._config_hash(hash_string("\n".join(sorted(module_graph.all))))

        def process(item: WorkItem) -> Any:
            return self._analyze_package(by_id[item.item_id], module_graph, config_hash)

        items = [WorkItem(item_id=item_id, label=p.spec.meta.name) for item_id, p in by_id.items()]
        fingerprints = "\n".join(f"{i}={package_fingerprint(by_id[i])}" for i in sorted(by_id))
        identity = f"packages|{hash_string(fingerprints)}|{config_hash}"
        records = await self._run(identity, items, process, resume)

        result = aggregate_results([PackageResult.from_json(data) for data in records])
        if self.history is not None:
            self.history.save_snapshot(compute_aggregate_snapshot(result.aggregate))
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _config_hash(self, *extra: str) -> str:
        return config_hash_for(repr(self.requirements), repr(self.weights), *extra)

    def _analyze_package(self, package: PackageInput, module_graph: ModuleGraph, config_hash: str) -> Any:
        cache_key = f"package:{package.item_id}"
        # source hashes alone miss edits to the spec, example outcomes and docs
        config_hash = config_hash_for(config_hash, package_fingerprint(package))
        use_cache = self.cache is not None and package.source_files is not None
        if use_cache:
            cached = self.cache.get(cache_key, package.source_files, config_hash=config_hash)
            if cached is not None:
                return cached

        drift = compute_drift(
            package.spec,
            example_results=package.example_results,
            markdown_files=package.markdown_files,
            module_graph=module_graph,
        )
        health = compute_health(
            package.spec,
            drift,
            package.example_results,
            weights=self.weights,
            requirements=self.requirements,
        )
        data = create_package_result(package.spec, health, drift, package.entry_path).to_json()
        if use_cache:
            self.cache.put(cache_key, package.source_files, data, config_hash=config_hash)
        return data

    async def _run(
        self,
        identity: str,
        items: List[WorkItem],
        process: Callable[[WorkItem], Any],
        resume: bool,
    ) -> List[Any]:
        """Process *items* in sorted order; returns their recorded results in that order."""
        items = sorted(items, key=lambda item: item.item_id)
        item_ids = [item.item_id for item in items]
        self.run_id = derive_run_id(item_ids, identity)
        self.resumed_count = 0
        self.processed_count = 0

        log = CheckpointLog(self.checkpoint_path_for(self.run_id), self.run_id, item_ids)
        completed: Dict[str, Any] = {}
        if resume:
            state = log.load()
            if state is not None:
                completed = dict(state.results)
                self.resumed_count = len(completed)
                logger.info(
                    "batch_checkpoint_resumed",
                    run_id=self.run_id,
                    processed=len(completed),
                    total=len(items),
                )
        else:
            log.ensure_not_in_use()

        log.start(completed)
        self.state = RunState.RUNNING
        pending = 0
        try:
            for index, item in enumerate(items, 1):
                if item.item_id in completed:
                    continue
                data = _to_plain_json(process(item))
                completed[item.item_id] = data
                log.append(item.item_id, data)
                pending += 1
                self.processed_count += 1
                if pending >= self.checkpoint_every:
                    log.flush()
                    pending = 0
                if self.on_progress is not None:
                    self.on_progress(index, len(items), item.label)
                if self.processed_count % self.yield_every == 0:
                    await asyncio.sleep(0)
            log.flush()
        except BaseException:
            self.state = RunState.CRASHED
            log.close()
            logger.warning(
                "batch_run_crashed",
                run_id=self.run_id,
                checkpoint=str(log.path),
                processed=len(completed),
                total=len(items),
            )
            raise

        log.commit()
        self.state = RunState.COMPLETED
        logger.info(
            "batch_run_completed",
            run_id=self.run_id,
            total=len(items),
            resumed=self.resumed_count,
            processed=self.processed_count,
        )
        return [completed[item_id] for item_id in item_ids]
