# infbench/bench/errors.py

"""Failure taxonomy.

Each kind carries its own user-facing message prefix so a caller never has
to show a generic error. Per-call inference failures are not exceptions:
they are counted in `RunTiming.failed_calls`.
"""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    MODEL_LOAD = "model_load"
    CONTRACT_INTROSPECTION = "contract_introspection"
    INPUT_ALLOCATION = "input_allocation"
    ALREADY_RUNNING = "already_running"


class BenchmarkError(Exception):
    """Base class for typed benchmark failures."""
    kind: FailureKind
    summary: str = "Benchmark failed"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    @property
    def message(self) -> str:
        return f"{self.summary}: {self.detail}"


class ModelLoadFailure(BenchmarkError):
    """Artifact missing, or the backend could not parse/compile it."""
    kind = FailureKind.MODEL_LOAD
    summary = "Failed to load model"


class ContractIntrospectionFailure(BenchmarkError):
    """No declared inputs, or the input has no dense tensor shape."""
    kind = FailureKind.CONTRACT_INTROSPECTION
    summary = "Could not retrieve input feature shape"


class InputAllocationFailure(BenchmarkError):
    kind = FailureKind.INPUT_ALLOCATION
    summary = "Failed to create random input tensor"


class AlreadyRunning(BenchmarkError):
    kind = FailureKind.ALREADY_RUNNING
    summary = "A benchmark is already running"
