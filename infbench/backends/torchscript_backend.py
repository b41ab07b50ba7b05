# infbench/backends/torchscript_backend.py

"""TorchScript backend.

TorchScript archives do not record input shapes, so the exporter
(`infbench.deploy.export_torchscript`) embeds an ordered input schema as an
extra file. An archive without it declares zero inputs.

Affinity -> torch device:
- CPU_ONLY: cpu
- CPU_AND_ACCELERATOR: cuda when available, else cpu
- ALL_AVAILABLE: cuda, then mps, else cpu
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple

import numpy as np
import torch

from infbench.backends.base import HardwareAffinity, InferenceBackend, InputSpec, LoadedModel

logger = logging.getLogger(__name__)

SCHEMA_FILE = "infbench_inputs.json"


@dataclass(frozen=True)
class _ScriptedModel:
    module: torch.jit.ScriptModule
    schema: Tuple[InputSpec, ...]


def resolve_device(affinity: HardwareAffinity) -> torch.device:
    if affinity is HardwareAffinity.CPU_ONLY:
        return torch.device("cpu")
    if torch.cuda.is_available():
        return torch.device("cuda")
    if affinity is HardwareAffinity.ALL_AVAILABLE and torch.backends.mps.is_available():
        return torch.device("mps")
    return torch.device("cpu")


def encode_schema(inputs: List[InputSpec]) -> str:
    return json.dumps({"inputs": [{"name": s.name,
                                   "shape": list(s.shape) if s.shape is not None else None,
                                   "dtype": s.dtype} for s in inputs]})


def decode_schema(raw: str | bytes) -> Tuple[InputSpec, ...]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not raw:
        return ()
    doc = json.loads(raw)
    out = []
    for item in doc.get("inputs", []):
        shape = item.get("shape")
        out.append(InputSpec(name=str(item["name"]),
                             shape=tuple(int(d) for d in shape) if shape else None,
                             dtype=item.get("dtype")))
    return tuple(out)


class TorchScriptBackend(InferenceBackend):
    name = "torchscript"
    artifact_extension = ".pt"

    def load(self, path: Path, artifact_id: str, affinity: HardwareAffinity) -> LoadedModel:
        device = resolve_device(affinity)
        extra = {SCHEMA_FILE: ""}
        module = torch.jit.load(str(path), map_location=device, _extra_files=extra)
        module.eval()
        schema = decode_schema(extra[SCHEMA_FILE])
        if not schema:
            logger.warning("%s has no embedded input schema (%s)", artifact_id, SCHEMA_FILE)
        return LoadedModel(artifact_id=artifact_id, path=Path(path), affinity=affinity,
                           native=_ScriptedModel(module=module, schema=schema), device=str(device))

    def input_schema(self, handle: LoadedModel) -> List[InputSpec]:
        return list(handle.native.schema)

    def prepare_feed(self, handle: LoadedModel, input_name: str, buffer: np.ndarray) -> Any:
        return torch.from_numpy(buffer).to(handle.device)

    @torch.no_grad()
    def infer(self, handle: LoadedModel, feed: Any) -> Any:
        # single-input benchmark: the selected input is passed positionally
        return handle.native.module(feed)

    def synchronize(self, handle: LoadedModel) -> None:
        if handle.device.startswith("cuda"):
            torch.cuda.synchronize()
        elif handle.device == "mps":
            torch.mps.synchronize()

    def release(self, handle: LoadedModel) -> None:
        if handle.device.startswith("cuda"):
            torch.cuda.empty_cache()
