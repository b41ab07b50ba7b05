# infbench/bench/inputs.py

"""Synthetic input buffers.

Values are uniform in [0, 1). Latency is what is measured, so buffers are
not seeded unless a seed is given.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from infbench.backends.base import FLOAT_DTYPES
from infbench.bench.errors import InputAllocationFailure


def element_count(shape: Sequence[int]) -> int:
    # python ints: no overflow for large products
    return math.prod(int(d) for d in shape)


class SyntheticInputGenerator:
    def __init__(self, seed: Optional[int] = None, max_elements: Optional[int] = None):
        self.rng = np.random.default_rng(seed)
        self.max_elements = max_elements

    def generate(self, shape: Sequence[int], dtype: Optional[str] = None) -> np.ndarray:
        """Fresh buffer of `prod(shape)` elements, each drawn from U[0, 1)."""
        dims = tuple(shape)
        if not dims or any(not isinstance(d, (int, np.integer)) or d <= 0 for d in dims):
            raise InputAllocationFailure(f"malformed shape {list(dims)}")
        n = element_count(dims)
        if self.max_elements is not None and n > self.max_elements:
            raise InputAllocationFailure(f"shape {list(dims)} needs {n} elements (limit {self.max_elements})")
        try:
            target = np.dtype(dtype or "float32")
        except TypeError as e:
            raise InputAllocationFailure(f"unknown element type {dtype!r}") from e
        if target.name not in FLOAT_DTYPES:
            raise InputAllocationFailure(f"unsupported element type {target.name}")

        try:
            x = self.rng.random(n, dtype=np.float32)
            if target != np.float32:
                x = x.astype(target)
                if target == np.float16:
                    # rounding can land on 1.0 in half precision
                    x = np.minimum(x, np.nextafter(np.float16(1.0), np.float16(0.0)))
        except (MemoryError, ValueError) as e:
            raise InputAllocationFailure(f"cannot allocate {n} x {target.name}: {e}") from e
        return x.reshape(dims)
