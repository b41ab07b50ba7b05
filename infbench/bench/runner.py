# infbench/bench/runner.py

"""Inference runner: load -> inspect -> generate -> timed loop -> release.

Timing methodology:
- One input buffer per run, placed once (`prepare_feed`) and reused unchanged,
  so only the model's compute path is timed.
- The timed window covers the call loop plus a final device synchronize
  (queued GPU work would otherwise finish after the clock stops).
- Load, introspection and input generation are outside the window.

Per-call failures are swallowed so a partially degraded run still yields a
timing, but they are counted and reported in `RunTiming.failed_calls`.
Steps before the loop raise a typed failure; there are no retries.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from infbench.backends.base import HardwareAffinity, InferenceBackend, InputSpec, LoadedModel, TensorShape
from infbench.bench.contract import ModelContractInspector
from infbench.bench.errors import (BenchmarkError, ContractIntrospectionFailure, InputAllocationFailure,
                                   ModelLoadFailure)
from infbench.bench.inputs import SyntheticInputGenerator
from infbench.catalog.artifact_catalog import ArtifactCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BenchmarkConfig:
    num_calls: int = 100
    warmup_calls: int = 0  # untimed calls before the window opens


@dataclass(frozen=True)
class PreparedRun:
    handle: LoadedModel
    input: InputSpec
    feed: Any


@dataclass(frozen=True)
class RunTiming:
    artifact_id: str
    affinity: HardwareAffinity
    input_name: str
    input_shape: TensorShape
    total_elapsed_s: float
    num_calls: int
    failed_calls: int = 0

    @property
    def all_calls_failed(self) -> bool:
        return self.num_calls > 0 and self.failed_calls >= self.num_calls


class InferenceRunner:
    def __init__(self,
                 catalog: ArtifactCatalog,
                 backend: InferenceBackend,
                 generator: Optional[SyntheticInputGenerator] = None,
                 cfg: BenchmarkConfig = BenchmarkConfig(),
                 clock: Callable[[], float] = time.perf_counter):
        self.catalog = catalog
        self.backend = backend
        self.inspector = ModelContractInspector(backend)
        self.generator = generator or SyntheticInputGenerator()
        self.cfg = cfg
        self.clock = clock

    def _load(self, artifact_id: str, affinity: HardwareAffinity) -> LoadedModel:
        path = self.catalog.resolve(artifact_id)
        try:
            return self.backend.load(path, artifact_id, affinity)
        except BenchmarkError:
            raise
        except Exception as e:
            raise ModelLoadFailure(f"{path.name}: {e}") from e

    def _inspect(self, handle: LoadedModel, input_name: Optional[str]) -> InputSpec:
        try:
            return self.inspector.select_input(handle, input_name)
        except BenchmarkError:
            raise
        except Exception as e:
            raise ContractIntrospectionFailure(f"cannot read input schema of {handle.artifact_id!r}: {e}") from e

    def _build_feed(self, handle: LoadedModel, spec: InputSpec) -> Any:
        buffer = self.generator.generate(spec.shape, spec.dtype)
        try:
            return self.backend.prepare_feed(handle, spec.name, buffer)
        except Exception as e:
            raise InputAllocationFailure(f"cannot place input {spec.name!r} on {handle.device}: {e}") from e

    @contextmanager
    def prepare(self,
                artifact_id: str,
                affinity: HardwareAffinity,
                input_name: Optional[str] = None) -> Iterator[PreparedRun]:
        """Steps before timing; the handle is released when the block exits."""
        handle = self._load(artifact_id, affinity)
        logger.info("loaded %s (affinity=%s, device=%s)", artifact_id, affinity.value, handle.device)
        try:
            spec = self._inspect(handle, input_name)
            feed = self._build_feed(handle, spec)
            yield PreparedRun(handle=handle, input=spec, feed=feed)
        finally:
            self.backend.release(handle)

    def _call(self, prepared: PreparedRun, i: int) -> bool:
        try:
            self.backend.infer(prepared.handle, prepared.feed)
            return True
        except Exception as e:
            # first failure is worth seeing, the rest would flood the log
            log = logger.warning if i == 0 else logger.debug
            log("inference call %d on %s failed: %s", i, prepared.handle.artifact_id, e)
            return False

    def time(self, prepared: PreparedRun, num_calls: Optional[int] = None) -> RunTiming:
        n = self.cfg.num_calls if num_calls is None else int(num_calls)
        if n <= 0:
            raise ValueError(f"num_calls must be positive, got {n}")

        for i in range(self.cfg.warmup_calls):
            self._call(prepared, i)
        self.backend.synchronize(prepared.handle)

        failed = 0
        t0 = self.clock()
        for i in range(n):
            if not self._call(prepared, i):
                failed += 1
        self.backend.synchronize(prepared.handle)
        t1 = self.clock()

        if failed:
            logger.warning("%d/%d inference calls failed on %s", failed, n, prepared.handle.artifact_id)
        return RunTiming(
            artifact_id=prepared.handle.artifact_id,
            affinity=prepared.handle.affinity,
            input_name=prepared.input.name,
            input_shape=prepared.input.shape,
            total_elapsed_s=t1 - t0,
            num_calls=n,
            failed_calls=failed,
        )

    def run(self,
            artifact_id: str,
            affinity: HardwareAffinity,
            num_calls: Optional[int] = None,
            input_name: Optional[str] = None) -> RunTiming:
        with self.prepare(artifact_id, affinity, input_name) as prepared:
            return self.time(prepared, num_calls)
