# infbench/bench/contract.py

"""Input contract introspection.

"First" input means first in the order the backend declares its inputs,
not alphabetical order. Only single-input benchmarking is supported: for
multi-input models callers may pick one input by name, the others are not
fed.
"""

from __future__ import annotations

from typing import List, Optional

from infbench.backends.base import FLOAT_DTYPES, InferenceBackend, InputSpec, LoadedModel, TensorShape
from infbench.bench.errors import ContractIntrospectionFailure


def is_valid_shape(shape: Optional[TensorShape]) -> bool:
    return bool(shape) and all(isinstance(d, int) and d > 0 for d in shape)


def is_dense_float(spec: InputSpec) -> bool:
    """Valid shape and a floating element type (None means float32)."""
    return is_valid_shape(spec.shape) and (spec.dtype is None or spec.dtype in FLOAT_DTYPES)


class ModelContractInspector:
    def __init__(self, backend: InferenceBackend):
        self.backend = backend

    def inputs(self, handle: LoadedModel) -> List[InputSpec]:
        return list(self.backend.input_schema(handle))

    def first_input_name(self, handle: LoadedModel) -> Optional[str]:
        specs = self.inputs(handle)
        return specs[0].name if specs else None

    def input_shape(self, handle: LoadedModel, name: str) -> Optional[TensorShape]:
        """Dense shape of input `name`; None if unknown or not a dense tensor."""
        for spec in self.inputs(handle):
            if spec.name == name:
                return tuple(spec.shape) if is_dense_float(spec) else None
        return None

    def select_input(self, handle: LoadedModel, name: Optional[str] = None) -> InputSpec:
        """Input to benchmark: `name` if given, else the first declared one."""
        specs = self.inputs(handle)
        if not specs:
            raise ContractIntrospectionFailure(f"model {handle.artifact_id!r} declares no inputs")
        if name is None:
            spec = specs[0]
        else:
            matches = [s for s in specs if s.name == name]
            if not matches:
                known = ", ".join(s.name for s in specs)
                raise ContractIntrospectionFailure(f"model {handle.artifact_id!r} has no input {name!r} (inputs: {known})")
            spec = matches[0]
        if not is_dense_float(spec):
            raise ContractIntrospectionFailure(
                f"input {spec.name!r} of {handle.artifact_id!r} has no dense float tensor shape "
                f"(shape={spec.shape}, dtype={spec.dtype})")
        return InputSpec(name=spec.name, shape=tuple(spec.shape), dtype=spec.dtype)
