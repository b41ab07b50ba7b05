# infbench/bench/wiring.py

"""Build an orchestrator from a merged config dict (see configs/benchmark.yaml)."""

from __future__ import annotations

from typing import Any, Mapping

from infbench.backends import build_backend
from infbench.backends.base import HardwareAffinity
from infbench.bench.inputs import SyntheticInputGenerator
from infbench.bench.orchestrator import BenchmarkOrchestrator
from infbench.bench.runner import BenchmarkConfig
from infbench.catalog.artifact_catalog import ArtifactCatalog
from infbench.utils.config_loader import lookup


def benchmark_config_from(cfg: Mapping[str, Any]) -> BenchmarkConfig:
    return BenchmarkConfig(
        num_calls=int(lookup(cfg, "benchmark.num_calls", 100)),
        warmup_calls=int(lookup(cfg, "benchmark.warmup_calls", 0)),
    )


def default_affinity(cfg: Mapping[str, Any]) -> HardwareAffinity:
    return HardwareAffinity.parse(lookup(cfg, "benchmark.affinity", "all"))


def build_orchestrator(cfg: Mapping[str, Any]) -> BenchmarkOrchestrator:
    backend = build_backend(lookup(cfg, "backend.name", "onnx"), lookup(cfg, "backend", {}))
    catalog = ArtifactCatalog.make(
        lookup(cfg, "artifacts.root", "artifacts"),
        lookup(cfg, "artifacts.extension", backend.artifact_extension),
    )
    generator = SyntheticInputGenerator(
        seed=lookup(cfg, "seed.value"),
        max_elements=lookup(cfg, "benchmark.max_input_elements"),
    )
    return BenchmarkOrchestrator(catalog, backend, cfg=benchmark_config_from(cfg), generator=generator)
