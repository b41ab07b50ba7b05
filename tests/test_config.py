from infbench.backends.base import HardwareAffinity
from infbench.bench.wiring import benchmark_config_from, build_orchestrator, default_affinity
from infbench.utils.config_loader import lookup, merge_configs
from infbench.utils.logger import build_logger


def test_merge_later_files_win(tmp_path):
    a = tmp_path / "a.yaml"
    b = tmp_path / "b.yaml"
    a.write_text("benchmark:\n  num_calls: 100\n  warmup_calls: 3\nbackend:\n  name: onnx\n")
    b.write_text("benchmark:\n  num_calls: 20\n")
    cfg = merge_configs([a, b], overrides={"backend": {"name": "torchscript"}})
    assert cfg["benchmark"] == {"num_calls": 20, "warmup_calls": 3}
    assert cfg["backend"]["name"] == "torchscript"


def test_lookup_defaults():
    cfg = {"a": {"b": None, "c": 1}}
    assert lookup(cfg, "a.c") == 1
    assert lookup(cfg, "a.b", 5) == 5
    assert lookup(cfg, "x.y", "d") == "d"


def test_wiring_from_config(tmp_path):
    (tmp_path / "m1.pt").write_bytes(b"")
    cfg = {
        "artifacts": {"root": str(tmp_path), "extension": None},
        "backend": {"name": "torchscript"},
        "benchmark": {"num_calls": 7, "affinity": "cpu"},
    }
    assert benchmark_config_from(cfg).num_calls == 7
    assert benchmark_config_from({}).num_calls == 100
    assert default_affinity(cfg) is HardwareAffinity.CPU_ONLY
    assert default_affinity({}) is HardwareAffinity.ALL_AVAILABLE

    orch = build_orchestrator(cfg)
    assert orch.catalog.extension == ".pt"
    assert orch.list_artifacts() == ["m1"]


def test_logger_is_not_duplicated(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    a = build_logger("infbench.test", "DEBUG", str(log_file))
    b = build_logger("infbench.test", "DEBUG", str(log_file))
    assert a is b
    assert len(a.handlers) == 2
    a.info("hello")
    for h in a.handlers:
        h.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")


def test_seed_makes_torch_repeatable():
    import torch

    from infbench.utils.seed import SeedConfig, set_global_seed

    set_global_seed(SeedConfig(value=3))
    a = torch.rand(4)
    set_global_seed(SeedConfig(value=3))
    assert torch.equal(a, torch.rand(4))
    set_global_seed(SeedConfig())


def test_log_records_carry_thread_name(tmp_path):
    import threading

    log_file = tmp_path / "thread.log"
    logger = build_logger("infbench.thread_test", "INFO", str(log_file))
    t = threading.Thread(target=lambda: logger.info("from worker"), name="infbench_0")
    t.start()
    t.join()
    for h in logger.handlers:
        h.flush()
    assert "| infbench_0 | infbench.thread_test | from worker" in log_file.read_text(encoding="utf-8")
