# infbench/deploy/export_onnx.py

"""Export a torch module to ONNX (benchmarkable by the onnx backend)."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Sequence

import torch


def export_onnx(model: torch.nn.Module,
                example_input: torch.Tensor,
                out_path: str | Path,
                input_names: Sequence[str] = ("x",),
                output_names: Sequence[str] = ("y",),
                dynamic_axes: Optional[Dict[str, Dict[int, str]]] = None,
                opset: int = 17) -> Path:
    """Write `model` to `out_path`; the declared input shape is `example_input.shape`
    unless `dynamic_axes` marks some dims symbolic (e.g. {"x": {0: "batch"}})."""
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    model.eval()
    torch.onnx.export(
        model,
        example_input,
        str(out),
        input_names=list(input_names),
        output_names=list(output_names),
        dynamic_axes=dynamic_axes,
        opset_version=opset,
        do_constant_folding=True,
        dynamo=False,
    )
    return out
