# infbench/backends/onnx_backend.py

"""ONNX Runtime backend.

Affinity maps to an execution-provider list (CPU provider always last):
- CPU_ONLY: CPUExecutionProvider
- CPU_AND_ACCELERATOR: installed GPU providers (CUDA/ROCm/DirectML) + CPU
- ALL_AVAILABLE: every provider the installed build exposes
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import onnxruntime as ort

from infbench.backends.base import HardwareAffinity, InferenceBackend, InputSpec, LoadedModel

logger = logging.getLogger(__name__)

CPU_PROVIDER = "CPUExecutionProvider"
GPU_PROVIDERS = ("CUDAExecutionProvider", "ROCMExecutionProvider", "DmlExecutionProvider")

# ONNX element type string -> numpy dtype name (floating inputs only)
_FLOAT_TYPES: Dict[str, str] = {
    "tensor(float)": "float32",
    "tensor(float16)": "float16",
    "tensor(double)": "float64",
}


@dataclass(frozen=True)
class OnnxBackendConfig:
    dynamic_dim_size: int = 1
    intra_op_threads: int = 0  # 0 lets ORT decide
    graph_optimization: str = "ORT_ENABLE_ALL"


def select_providers(affinity: HardwareAffinity,
                     available: Optional[Sequence[str]] = None) -> List[str]:
    """Provider priority list for an affinity, restricted to installed providers."""
    avail = list(ort.get_available_providers() if available is None else available)
    if affinity is HardwareAffinity.CPU_ONLY:
        chosen: List[str] = []
    elif affinity is HardwareAffinity.CPU_AND_ACCELERATOR:
        chosen = [p for p in avail if p in GPU_PROVIDERS]
    else:
        chosen = [p for p in avail if p != CPU_PROVIDER]
    return chosen + [CPU_PROVIDER]


class OnnxRuntimeBackend(InferenceBackend):
    name = "onnx"
    artifact_extension = ".onnx"

    def __init__(self, cfg: OnnxBackendConfig = OnnxBackendConfig()):
        self.cfg = cfg

    def _session_options(self) -> ort.SessionOptions:
        so = ort.SessionOptions()
        so.graph_optimization_level = getattr(ort.GraphOptimizationLevel, self.cfg.graph_optimization)
        if self.cfg.intra_op_threads > 0:
            so.intra_op_num_threads = self.cfg.intra_op_threads
        return so

    def load(self, path: Path, artifact_id: str, affinity: HardwareAffinity) -> LoadedModel:
        providers = select_providers(affinity)
        sess = ort.InferenceSession(str(path), sess_options=self._session_options(), providers=providers)
        active = sess.get_providers()
        logger.debug("loaded %s with providers=%s", artifact_id, active)
        return LoadedModel(artifact_id=artifact_id, path=Path(path), affinity=affinity,
                           native=sess, device=active[0] if active else CPU_PROVIDER)

    def _resolve_dim(self, dim: Any) -> int:
        # symbolic ("batch") or unknown (None) dims are pinned to a fixed size
        if isinstance(dim, (int, np.integer)) and int(dim) > 0:
            return int(dim)
        return self.cfg.dynamic_dim_size

    def input_schema(self, handle: LoadedModel) -> List[InputSpec]:
        specs: List[InputSpec] = []
        for arg in handle.native.get_inputs():
            dtype = _FLOAT_TYPES.get(arg.type)
            shape = None
            if dtype is not None and arg.shape is not None:
                dims = tuple(self._resolve_dim(d) for d in arg.shape)
                shape = dims or None  # scalar inputs carry no tensor shape
            specs.append(InputSpec(name=arg.name, shape=shape, dtype=dtype))
        return specs

    def infer(self, handle: LoadedModel, feed: Any) -> Any:
        return handle.native.run(None, feed)
