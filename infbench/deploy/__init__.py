"""Deployment-side helpers.

- Export torch modules to benchmarkable artifacts (ONNX, TorchScript with an
  embedded input schema).
- Device report: which runtimes/accelerators this host exposes.
"""
