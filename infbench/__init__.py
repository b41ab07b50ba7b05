"""infbench: latency benchmarking for compiled inference artifacts.

Pipeline:
- Artifact discovery (catalog)
- Input contract introspection (first declared input, its shape)
- Synthetic input generation (uniform [0, 1) float buffers)
- Timed repeated inference + latency aggregation
"""

__version__ = "0.1.0"
