#!/usr/bin/env python3
"""
Element-wise operation benchmark for ndfield buffer backends.

Times ``produce``, ``map``, ``map_indexed`` and ``combine`` on a real-valued
context for the boxing (tuple) and numpy buffer factories.
"""

from __future__ import annotations

import argparse
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from ndfield import BufferConfig, BufferNDField, RealField, nd_field

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    backend: str
    operation: str
    min_s: float
    mean_s: float
    iterations: int
    elements_per_s: Optional[float]


def build_context(shape: Iterable[int], backend: str) -> BufferNDField:
    return nd_field(tuple(shape), RealField(), config=BufferConfig(backend=backend))


def bench(
    fn: Callable[[], Any],
    *,
    iterations: int,
    warmup: int,
) -> List[float]:
    timings = []
    for step in range(iterations + warmup):
        start = time.perf_counter()
        fn()
        elapsed = time.perf_counter() - start
        if step >= warmup:
            timings.append(elapsed)
    return timings


def run_backend(
    backend: str,
    shape: Iterable[int],
    *,
    iterations: int,
    warmup: int,
) -> List[BenchmarkResult]:
    ctx = build_context(shape, backend)
    a = ctx.produce(lambda idx: float(sum(idx)))
    b = ctx.one
    operations: Dict[str, Callable[[], Any]] = {
        "produce": lambda: ctx.produce(lambda idx: float(idx[0])),
        "map": lambda: ctx.map(a, lambda value: value * 2.0),
        "map_indexed": lambda: ctx.map_indexed(a, lambda index, value: value + index[-1]),
        "combine": lambda: ctx.combine(a, b, lambda x, y: x + y),
    }
    results = []
    for name, fn in operations.items():
        logger.debug("Timing %s/%s", backend, name)
        timings = bench(fn, iterations=iterations, warmup=warmup)
        min_s = min(timings)
        mean_s = sum(timings) / len(timings)
        results.append(
            BenchmarkResult(
                backend=backend,
                operation=name,
                min_s=min_s,
                mean_s=mean_s,
                iterations=iterations,
                elements_per_s=ctx.linear_size / min_s if min_s > 0 else None,
            )
        )
    return results


def format_results(results: Iterable[BenchmarkResult]) -> str:
    header = f"{'backend':<8} {'operation':<12} {'min (ms)':>12} {'mean (ms)':>12} {'iters':>8} {'elem/s':>14}"
    rows = [header]
    for result in results:
        min_ms = result.min_s * 1e3
        mean_ms = result.mean_s * 1e3
        elements_per_s = result.elements_per_s or float("nan")
        rows.append(
            f"{result.backend:<8} {result.operation:<12} {min_ms:12.3f} {mean_ms:12.3f} {result.iterations:8d} {elements_per_s:14.0f}"
        )
    return "\n".join(rows)


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Benchmark ndfield element-wise operations per buffer backend."
    )
    parser.add_argument(
        "--backend",
        choices=("boxing", "numpy", "all"),
        default="all",
        help="Buffer backend(s) to benchmark (default: all).",
    )
    parser.add_argument(
        "--shape",
        type=int,
        nargs="+",
        default=[64, 64],
        help="Array shape (default: 64 64).",
    )
    parser.add_argument(
        "--iterations", type=int, default=20, help="Timed iterations per operation (default: 20)."
    )
    parser.add_argument(
        "--warmup", type=int, default=3, help="Warmup iterations to discard (default: 3)."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    requested = ("boxing", "numpy") if args.backend == "all" else (args.backend,)
    results: List[BenchmarkResult] = []
    for backend in requested:
        results.extend(
            run_backend(backend, args.shape, iterations=args.iterations, warmup=args.warmup)
        )
    print(format_results(results))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
