"""Inference backends.

Runtime imports (onnxruntime, torch) happen in `build_backend`, so only the
selected runtime is loaded.
"""

from __future__ import annotations

from typing import Any, Mapping

from infbench.backends.base import HardwareAffinity, InferenceBackend, InputSpec, LoadedModel, TensorShape

BACKENDS = ("onnx", "torchscript")


def build_backend(name: str, options: Mapping[str, Any] | None = None) -> InferenceBackend:
    """Construct a backend by config name."""
    opts = dict(options or {})
    if name == "onnx":
        from infbench.backends.onnx_backend import OnnxBackendConfig, OnnxRuntimeBackend
        return OnnxRuntimeBackend(OnnxBackendConfig(
            dynamic_dim_size=int(opts.get("dynamic_dim_size", 1)),
            intra_op_threads=int(opts.get("intra_op_threads", 0)),
            graph_optimization=str(opts.get("graph_optimization", "ORT_ENABLE_ALL")),
        ))
    if name == "torchscript":
        from infbench.backends.torchscript_backend import TorchScriptBackend
        return TorchScriptBackend()
    raise ValueError(f"unknown backend {name!r} (choices: {', '.join(BACKENDS)})")


__all__ = [
    "BACKENDS",
    "HardwareAffinity",
    "InferenceBackend",
    "InputSpec",
    "LoadedModel",
    "TensorShape",
    "build_backend",
]
