import runpy
from pathlib import Path

BENCHMARK = Path(__file__).resolve().parent.parent / "benchmarks" / "elementwise_benchmark.py"


def test_elementwise_benchmark_reports_every_operation(capsys):
    module = runpy.run_path(str(BENCHMARK))
    exit_code = module["main"](["--shape", "2", "3", "--iterations", "1", "--warmup", "0"])
    assert exit_code == 0
    out = capsys.readouterr().out
    for backend in ("boxing", "numpy"):
        assert backend in out
    for operation in ("produce", "map_indexed", "combine"):
        assert operation in out
