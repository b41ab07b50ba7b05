# infbench/bench/aggregate.py

from __future__ import annotations


def average_latency_ms(total_elapsed_s: float, num_calls: int) -> float:
    """Average per-call latency in ms, rounded to 2 decimals."""
    if num_calls <= 0:
        raise AssertionError(f"num_calls must be positive, got {num_calls}")
    return round(total_elapsed_s / num_calls * 1000.0, 2)
