# infbench/deploy/export_torchscript.py

"""Export a torch module to TorchScript with an embedded input schema.

TorchScript itself does not keep input shapes; the schema written here is
what the torchscript backend reads back as the model's input contract.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import torch

from infbench.backends.base import InputSpec
from infbench.backends.torchscript_backend import SCHEMA_FILE, encode_schema


def export_torchscript(model: torch.nn.Module,
                       example_input: torch.Tensor,
                       out_path: str | Path,
                       input_name: str = "x",
                       embed_schema: bool = True) -> Path:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    model.eval()
    with torch.no_grad():
        scripted = torch.jit.trace(model, example_input)
    extra: Optional[dict] = None
    if embed_schema:
        dtype = str(example_input.dtype).replace("torch.", "")
        spec = InputSpec(name=input_name, shape=tuple(int(d) for d in example_input.shape), dtype=dtype)
        extra = {SCHEMA_FILE: encode_schema([spec])}
    torch.jit.save(scripted, str(out), _extra_files=extra)
    return out
