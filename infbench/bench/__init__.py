"""Benchmark core.

- contract: first declared input + its dense shape
- inputs: synthetic uniform [0, 1) buffers
- runner: load -> inspect -> generate -> timed loop -> release
- aggregate: average per-call latency (ms)
- orchestrator: one-run-at-a-time state machine for interactive callers
"""
