# infbench/deploy/device_report.py

"""What this host can run on: versions, CUDA, MPS, ONNX Runtime providers."""

from __future__ import annotations

import platform
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

import onnxruntime as ort
import torch


@dataclass(frozen=True)
class DeviceReport:
    python: str
    platform: str
    torch: str
    cuda_available: bool
    cuda_version: Optional[str]
    gpu_name: Optional[str]
    gpu_count: int
    mps_available: bool
    onnxruntime: str
    ort_providers: List[str]


def build_device_report() -> Dict:
    cuda_av = torch.cuda.is_available()
    rep = DeviceReport(
        python=platform.python_version(),
        platform=f"{platform.system()} {platform.release()}",
        torch=torch.__version__,
        cuda_available=cuda_av,
        cuda_version=getattr(torch.version, "cuda", None),
        gpu_name=torch.cuda.get_device_name(0) if cuda_av else None,
        gpu_count=torch.cuda.device_count() if cuda_av else 0,
        mps_available=torch.backends.mps.is_available(),
        onnxruntime=ort.__version__,
        ort_providers=list(ort.get_available_providers()),
    )
    return asdict(rep)
