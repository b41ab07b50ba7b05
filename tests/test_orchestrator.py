import threading

import pytest

from infbench.backends.base import HardwareAffinity, InputSpec
from infbench.bench.errors import (AlreadyRunning, ContractIntrospectionFailure, FailureKind,
                                   InputAllocationFailure, ModelLoadFailure)
from infbench.bench.inputs import SyntheticInputGenerator
from infbench.bench.orchestrator import BenchmarkOrchestrator, BenchmarkState
from infbench.bench.runner import BenchmarkConfig
from fake_backend import FakeBackend, make_catalog

S = BenchmarkState


def _orch(tmp_path, backend, **kw):
    return BenchmarkOrchestrator(make_catalog(tmp_path, ("m1", "m2")), backend,
                                 cfg=BenchmarkConfig(num_calls=5), **kw)


def _record(orch):
    seen = []
    orch.add_listener(lambda old, new: seen.append((old, new)))
    return seen


def test_successful_run(tmp_path):
    orch = _orch(tmp_path, FakeBackend())
    seen = _record(orch)
    assert orch.list_artifacts() == ["m1", "m2"]

    result = orch.run_benchmark("m1", "cpu")
    assert result.ok
    assert result.affinity is HardwareAffinity.CPU_ONLY
    assert result.num_calls == 5 and result.failed_calls == 0
    assert result.average_latency_ms >= 0.0
    assert result.message.startswith("Average inference time:")
    assert seen == [(S.IDLE, S.LOADING), (S.LOADING, S.TIMING), (S.TIMING, S.DONE), (S.DONE, S.IDLE)]

    status = orch.status()
    assert not status.running and status.state is S.IDLE and status.result == result


def test_failure_returns_to_idle(tmp_path):
    orch = _orch(tmp_path, FakeBackend(schema=[]))
    seen = _record(orch)
    result = orch.run_benchmark("m1", HardwareAffinity.ALL_AVAILABLE)
    assert isinstance(result.failure, ContractIntrospectionFailure)
    assert seen == [(S.IDLE, S.LOADING), (S.LOADING, S.FAILED), (S.FAILED, S.IDLE)]
    assert not orch.running
    assert orch.status().result is result


def test_failure_messages_are_distinct(tmp_path):
    results = [
        _orch(tmp_path / "a", FakeBackend()).run_benchmark("missing"),
        _orch(tmp_path / "b", FakeBackend(schema=[])).run_benchmark("m1"),
        _orch(tmp_path / "c", FakeBackend(), generator=SyntheticInputGenerator(max_elements=1)).run_benchmark("m1"),
    ]
    kinds = [type(r.failure) for r in results]
    assert kinds == [ModelLoadFailure, ContractIntrospectionFailure, InputAllocationFailure]
    assert len({r.message.split(":")[0] for r in results}) == 3


def test_all_calls_failed_is_flagged(tmp_path):
    orch = _orch(tmp_path, FakeBackend(fail_calls=True))
    result = orch.run_benchmark("m1", num_calls=10)
    assert result.ok
    assert result.failed_calls == 10
    assert result.all_calls_failed
    assert result.average_latency_ms is not None
    assert "All 10 inference calls failed" in result.message


def test_second_request_while_timing_is_rejected(tmp_path):
    gate = threading.Event()
    backend = FakeBackend(infer_gate=gate)
    orch = _orch(tmp_path, backend)
    try:
        fut = orch.submit("m1", "cpu")
        assert backend.inferring.wait(5.0)
        assert orch.state is S.TIMING and orch.running

        rejected = orch.run_benchmark("m2", "cpu")
        assert isinstance(rejected.failure, AlreadyRunning)
        assert rejected.failure.kind is FailureKind.ALREADY_RUNNING
        assert orch.state is S.TIMING
        assert isinstance(orch.submit("m2").result(timeout=1.0).failure, AlreadyRunning)

        gate.set()
        first = fut.result(timeout=5.0)
        assert first.ok and first.artifact_id == "m1" and first.num_calls == 5
        assert orch.status().result is first
        assert not orch.running
    finally:
        gate.set()
        orch.shutdown()


def test_second_request_while_loading_is_rejected(tmp_path):
    gate = threading.Event()
    backend = FakeBackend(load_gate=gate)
    orch = _orch(tmp_path, backend)
    try:
        fut = orch.submit("m1")
        assert backend.loading.wait(5.0)
        assert orch.state is S.LOADING

        assert isinstance(orch.run_benchmark("m1").failure, AlreadyRunning)
        gate.set()
        assert fut.result(timeout=5.0).ok
        assert orch.run_benchmark("m2").ok
    finally:
        gate.set()
        orch.shutdown()


def test_named_input_is_used(tmp_path):
    backend = FakeBackend(schema=[InputSpec("a", (1, 2)), InputSpec("b", (2, 3))])
    result = _orch(tmp_path, backend).run_benchmark("m1", input_name="b")
    assert result.input_name == "b" and result.input_shape == (2, 3)


def test_int_and_bfloat16_inputs_fail_introspection(tmp_path):
    for dtype in ("int64", "bfloat16"):
        backend = FakeBackend(schema=[InputSpec("ids", (1, 4), dtype)])
        result = _orch(tmp_path / dtype, backend).run_benchmark("m1", "cpu")
        assert isinstance(result.failure, ContractIntrospectionFailure)
        assert backend.calls == 0


def test_raising_listener_does_not_stall_runs(tmp_path):
    orch = _orch(tmp_path, FakeBackend())

    def explode(old, new):
        raise RuntimeError(f"listener broke on {new.value}")

    orch.add_listener(explode)
    seen = _record(orch)

    first = orch.run_benchmark("m1", "cpu")
    assert first.ok
    assert not orch.running and orch.state is S.IDLE
    assert orch.status().result is first
    assert seen[-1] == (S.DONE, S.IDLE)
    assert orch.run_benchmark("m2", "cpu").ok


def test_unexpected_backend_error_propagates_after_idle(tmp_path):
    orch = _orch(tmp_path, FakeBackend(release_error=KeyError("device lost")))
    seen = _record(orch)

    with pytest.raises(KeyError):
        orch.run_benchmark("m1", "cpu")
    assert seen == [(S.IDLE, S.LOADING), (S.LOADING, S.TIMING), (S.TIMING, S.FAILED), (S.FAILED, S.IDLE)]
    assert not orch.running
    assert orch.status().result is None


def test_unexpected_error_while_loading_fails_from_loading(tmp_path):
    backend = FakeBackend(schema=[], release_error=OSError("handle leak"))
    orch = _orch(tmp_path, backend)
    seen = _record(orch)

    with pytest.raises(OSError):
        orch.run_benchmark("m1", "cpu")
    assert seen == [(S.IDLE, S.LOADING), (S.LOADING, S.FAILED), (S.FAILED, S.IDLE)]
    assert not orch.running
