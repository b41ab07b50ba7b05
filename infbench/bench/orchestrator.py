# infbench/bench/orchestrator.py

"""Benchmark orchestrator.

State machine (only `_transition` changes run state):
- IDLE -> LOADING on a request
- LOADING -> TIMING once the input is placed
- TIMING -> DONE after the loop and aggregation
- LOADING | TIMING -> FAILED on a typed failure
- DONE | FAILED -> IDLE immediately

At most one run per orchestrator. A request that arrives while a run is
LOADING or TIMING gets an `AlreadyRunning` result immediately (no queue).
DONE/FAILED fall back to IDLE in the same step the result is published, so
observers never see a stuck running flag.

`run_benchmark` blocks the caller; `submit` runs the same work on a single
background worker and returns a Future, for callers that must stay
responsive (UI event handlers).
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from infbench.backends.base import HardwareAffinity, InferenceBackend, TensorShape
from infbench.bench.aggregate import average_latency_ms
from infbench.bench.errors import AlreadyRunning, BenchmarkError
from infbench.bench.inputs import SyntheticInputGenerator
from infbench.bench.runner import BenchmarkConfig, InferenceRunner, RunTiming
from infbench.catalog.artifact_catalog import ArtifactCatalog

logger = logging.getLogger(__name__)


class BenchmarkState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    TIMING = "timing"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: Dict[BenchmarkState, FrozenSet[BenchmarkState]] = {
    BenchmarkState.IDLE: frozenset({BenchmarkState.LOADING}),
    BenchmarkState.LOADING: frozenset({BenchmarkState.TIMING, BenchmarkState.FAILED}),
    BenchmarkState.TIMING: frozenset({BenchmarkState.DONE, BenchmarkState.FAILED}),
    BenchmarkState.DONE: frozenset({BenchmarkState.IDLE}),
    BenchmarkState.FAILED: frozenset({BenchmarkState.IDLE}),
}

StateListener = Callable[[BenchmarkState, BenchmarkState], None]


@dataclass(frozen=True)
class BenchmarkResult:
    """Terminal value of one request: a latency or a typed failure."""
    artifact_id: str
    affinity: HardwareAffinity
    average_latency_ms: Optional[float] = None
    num_calls: int = 0
    failed_calls: int = 0
    input_name: Optional[str] = None
    input_shape: Optional[TensorShape] = None
    failure: Optional[BenchmarkError] = None

    @staticmethod
    def from_timing(timing: RunTiming) -> "BenchmarkResult":
        return BenchmarkResult(
            artifact_id=timing.artifact_id,
            affinity=timing.affinity,
            average_latency_ms=average_latency_ms(timing.total_elapsed_s, timing.num_calls),
            num_calls=timing.num_calls,
            failed_calls=timing.failed_calls,
            input_name=timing.input_name,
            input_shape=timing.input_shape,
        )

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def all_calls_failed(self) -> bool:
        return self.ok and self.num_calls > 0 and self.failed_calls >= self.num_calls

    @property
    def message(self) -> str:
        if self.failure is not None:
            return self.failure.message
        if self.all_calls_failed:
            return (f"All {self.num_calls} inference calls failed; "
                    f"{self.average_latency_ms:.2f} ms is not a meaningful latency")
        text = f"Average inference time: {self.average_latency_ms:.2f} ms"
        if self.failed_calls:
            text += f" ({self.failed_calls}/{self.num_calls} calls failed)"
        return text


@dataclass(frozen=True)
class BenchmarkStatus:
    running: bool
    state: BenchmarkState
    result: Optional[BenchmarkResult]


class BenchmarkOrchestrator:
    def __init__(self,
                 catalog: ArtifactCatalog,
                 backend: InferenceBackend,
                 cfg: BenchmarkConfig = BenchmarkConfig(),
                 generator: Optional[SyntheticInputGenerator] = None):
        self.catalog = catalog
        self.runner = InferenceRunner(catalog, backend, generator=generator, cfg=cfg)
        self._lock = threading.Lock()
        self._state = BenchmarkState.IDLE
        self._result: Optional[BenchmarkResult] = None
        self._listeners: List[StateListener] = []
        self._executor: Optional[ThreadPoolExecutor] = None

    # --- observation -------------------------------------------------

    def list_artifacts(self) -> List[str]:
        return self.catalog.list_artifacts()

    @property
    def state(self) -> BenchmarkState:
        with self._lock:
            return self._state

    @property
    def running(self) -> bool:
        return self.state in (BenchmarkState.LOADING, BenchmarkState.TIMING)

    def status(self) -> BenchmarkStatus:
        with self._lock:
            running = self._state in (BenchmarkState.LOADING, BenchmarkState.TIMING)
            return BenchmarkStatus(running=running, state=self._state, result=self._result)

    def add_listener(self, listener: StateListener) -> None:
        """`listener(old, new)` is called after every transition, outside the lock.

        Exceptions raised by a listener are logged and do not affect the run.
        """
        self._listeners.append(listener)

    # --- transitions -------------------------------------------------

    def _transition(self,
                    *steps: BenchmarkState,
                    result: Optional[BenchmarkResult] = None,
                    publish: bool = False) -> bool:
        """Apply `steps` atomically; False (and no change) if the first step is not allowed."""
        done: List[Tuple[BenchmarkState, BenchmarkState]] = []
        with self._lock:
            state = self._state
            for i, new in enumerate(steps):
                if new not in _TRANSITIONS[state]:
                    if i == 0:
                        return False
                    raise RuntimeError(f"illegal benchmark transition {state.value} -> {new.value}")
                done.append((state, new))
                state = new
            self._state = state
            if publish:
                self._result = result
        for old, new in done:
            logger.debug("benchmark state %s -> %s", old.value, new.value)
            for listener in list(self._listeners):
                try:
                    listener(old, new)
                except Exception:
                    # observers must not stall the state machine
                    logger.exception("state listener failed on %s -> %s", old.value, new.value)
        return True

    def _finish(self, terminal: BenchmarkState, result: Optional[BenchmarkResult]) -> None:
        self._transition(terminal, BenchmarkState.IDLE, result=result, publish=True)

    # --- requests ----------------------------------------------------

    def _rejected(self, artifact_id: str, affinity: HardwareAffinity) -> BenchmarkResult:
        logger.info("rejected benchmark of %s: another run is in flight", artifact_id)
        return BenchmarkResult(artifact_id=artifact_id, affinity=affinity,
                               failure=AlreadyRunning(f"cannot start {artifact_id!r} until the current run finishes"))

    def _execute(self,
                 artifact_id: str,
                 affinity: HardwareAffinity,
                 num_calls: Optional[int],
                 input_name: Optional[str]) -> BenchmarkResult:
        """Body of a run; expects the state to be LOADING already."""
        try:
            with self.runner.prepare(artifact_id, affinity, input_name) as prepared:
                self._transition(BenchmarkState.TIMING)
                timing = self.runner.time(prepared, num_calls)
            result = BenchmarkResult.from_timing(timing)
        except BenchmarkError as e:
            logger.error("%s [%s]", e.message, artifact_id)
            result = BenchmarkResult(artifact_id=artifact_id, affinity=affinity, failure=e)
            self._finish(BenchmarkState.FAILED, result)
            return result
        except BaseException:
            self._finish(BenchmarkState.FAILED, None)
            raise

        if result.all_calls_failed:
            logger.warning(result.message)
        else:
            logger.info("%s on %s: %s", artifact_id, affinity.label, result.message)
        self._finish(BenchmarkState.DONE, result)
        return result

    def run_benchmark(self,
                      artifact_id: str,
                      affinity: HardwareAffinity | str = HardwareAffinity.ALL_AVAILABLE,
                      num_calls: Optional[int] = None,
                      input_name: Optional[str] = None) -> BenchmarkResult:
        """Run one benchmark in the calling thread."""
        affinity = HardwareAffinity.parse(affinity)
        if not self._transition(BenchmarkState.LOADING):
            return self._rejected(artifact_id, affinity)
        return self._execute(artifact_id, affinity, num_calls, input_name)

    def submit(self,
               artifact_id: str,
               affinity: HardwareAffinity | str = HardwareAffinity.ALL_AVAILABLE,
               num_calls: Optional[int] = None,
               input_name: Optional[str] = None) -> "Future[BenchmarkResult]":
        """Start a run on the background worker; `running` is True once this returns."""
        affinity = HardwareAffinity.parse(affinity)
        if not self._transition(BenchmarkState.LOADING):
            fut: Future[BenchmarkResult] = Future()
            fut.set_result(self._rejected(artifact_id, affinity))
            return fut
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="infbench")
        try:
            return self._executor.submit(self._execute, artifact_id, affinity, num_calls, input_name)
        except BaseException:
            self._finish(BenchmarkState.FAILED, None)
            raise

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
