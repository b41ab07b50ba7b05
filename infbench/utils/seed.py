# infbench/utils/seed.py

"""Seeding helpers.

Latency does not depend on input values, so seeding is optional; it only
makes the synthetic buffers repeatable between runs.
"""

from __future__ import annotations

import os
import random
from dataclasses import dataclass
from typing import Optional

import numpy as np
import torch


@dataclass(frozen=True)
class SeedConfig:
    value: Optional[int] = None
    cudnn_benchmark: bool = False


def set_global_seed(cfg: SeedConfig) -> None:
    """Seed python, numpy and torch; no-op for the RNGs when `value` is None."""
    torch.backends.cudnn.benchmark = cfg.cudnn_benchmark  # kernel auto-tuning shifts early-call latency
    if cfg.value is None:
        return
    os.environ["PYTHONHASHSEED"] = str(cfg.value)
    random.seed(cfg.value)
    np.random.seed(cfg.value)
    torch.manual_seed(cfg.value)
    torch.cuda.manual_seed_all(cfg.value)
