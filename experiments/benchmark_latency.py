# experiments/benchmark_latency.py

"""Benchmark average inference latency of one artifact.

Examples:
  python experiments/benchmark_latency.py --list
  python experiments/benchmark_latency.py --model resnet18 --affinity cpu
  python experiments/benchmark_latency.py --configs configs/benchmark.yaml my.yaml --model m1

Results are logged, not written to disk.
"""

from __future__ import annotations

import argparse
import json
import sys

from infbench.backends.base import HardwareAffinity
from infbench.bench.wiring import build_orchestrator, default_affinity
from infbench.deploy.device_report import build_device_report
from infbench.utils.config_loader import lookup, merge_configs
from infbench.utils.logger import build_logger
from infbench.utils.seed import SeedConfig, set_global_seed


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--configs", nargs="+", default=["configs/benchmark.yaml"])
    ap.add_argument("--model", help="artifact id (file name without extension)")
    ap.add_argument("--affinity", choices=["cpu", "cpu_and_gpu", "all"])
    ap.add_argument("--num_calls", type=int)
    ap.add_argument("--input", dest="input_name", help="input to feed (default: first declared)")
    ap.add_argument("--list", action="store_true", help="list artifacts and exit")
    args = ap.parse_args()

    cfg = merge_configs(args.configs)
    logger = build_logger("infbench", lookup(cfg, "logging.level", "INFO"), lookup(cfg, "logging.log_file"))
    set_global_seed(SeedConfig(value=lookup(cfg, "seed.value"),
                               cudnn_benchmark=bool(lookup(cfg, "seed.cudnn_benchmark", False))))

    orch = build_orchestrator(cfg)
    models = orch.list_artifacts()
    if args.list or not args.model:
        logger.info(f"{len(models)} artifact(s) in {orch.catalog.root}: {models}")
        return 0

    logger.info(f"device report: {json.dumps(build_device_report())}")
    affinity = HardwareAffinity.parse(args.affinity) if args.affinity else default_affinity(cfg)
    result = orch.run_benchmark(args.model, affinity, num_calls=args.num_calls, input_name=args.input_name)
    if not result.ok:
        logger.error(result.message)
        return 1
    logger.info(f"{args.model} [{affinity.label}] input={result.input_name}{list(result.input_shape)}: {result.message}")
    return 2 if result.all_calls_failed else 0


if __name__ == "__main__":
    sys.exit(main())
