# infbench/backends/base.py

"""Inference backend interface.

A backend owns everything runtime-specific:
- how an artifact path + hardware affinity becomes a loaded model
- the ordered input schema the model declares
- placing an input buffer where the model consumes it (once per run)
- executing one inference call, and draining device queues before timing stops

The benchmark core only talks to this interface, so any runtime can be
plugged in without touching the timing code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Tuple

import numpy as np

TensorShape = Tuple[int, ...]

# element types a synthetic U[0, 1) buffer can stand in for
FLOAT_DTYPES = ("float16", "float32", "float64")


class HardwareAffinity(str, Enum):
    """Which compute units a backend may use for one model load."""
    CPU_ONLY = "cpu_only"
    CPU_AND_ACCELERATOR = "cpu_and_accelerator"
    ALL_AVAILABLE = "all_available"

    @classmethod
    def parse(cls, value: "str | HardwareAffinity") -> "HardwareAffinity":
        if isinstance(value, HardwareAffinity):
            return value
        key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        aliases = {
            "cpu": cls.CPU_ONLY,
            "cpu_and_gpu": cls.CPU_AND_ACCELERATOR,
            "gpu": cls.CPU_AND_ACCELERATOR,
            "all": cls.ALL_AVAILABLE,
        }
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join([a.value for a in cls] + sorted(aliases))
            raise ValueError(f"unknown hardware affinity {value!r} (choices: {choices})") from None

    @property
    def label(self) -> str:
        return {
            HardwareAffinity.CPU_ONLY: "CPU",
            HardwareAffinity.CPU_AND_ACCELERATOR: "CPU and GPU",
            HardwareAffinity.ALL_AVAILABLE: "All available",
        }[self]


@dataclass(frozen=True)
class InputSpec:
    """One declared model input.

    `shape` is None when the input carries no dense tensor constraint
    (non-tensor input, non-float element type, or no shape information).
    """
    name: str
    shape: Optional[TensorShape] = None
    dtype: Optional[str] = None


@dataclass(frozen=True)
class LoadedModel:
    """Opaque handle for one loaded model, bound to one affinity."""
    artifact_id: str
    path: Path
    affinity: HardwareAffinity
    native: Any
    device: str = "cpu"


class InferenceBackend:
    """Base class for runtimes. Subclasses override every method below."""
    name: str = "base"
    artifact_extension: str = ""

    def load(self, path: Path, artifact_id: str, affinity: HardwareAffinity) -> LoadedModel:
        """Load an artifact; raise any exception on failure (mapped to ModelLoadFailure)."""
        raise NotImplementedError

    def input_schema(self, handle: LoadedModel) -> List[InputSpec]:
        """Declared inputs in backend order (this order defines "first")."""
        raise NotImplementedError

    def prepare_feed(self, handle: LoadedModel, input_name: str, buffer: np.ndarray) -> Any:
        """Convert/move the buffer once so the timed loop only measures inference."""
        return {input_name: buffer}

    def infer(self, handle: LoadedModel, feed: Any) -> Any:
        raise NotImplementedError

    def synchronize(self, handle: LoadedModel) -> None:
        """Block until queued device work has finished (no-op on synchronous runtimes)."""

    def release(self, handle: LoadedModel) -> None:
        """Free runtime resources held by the handle."""
