"""Micro-benchmark for one-shot scans versus a reused Scanner."""

from __future__ import annotations

import time

from core.scan.scanner import Scanner, scan_values

_STORY = (
    "Once upon a time, there was a cat named Lola. \n"
    "She liked to curl up in our yard. \n"
    "Her favorite color is yellow and her favorite number is 3. That's silly, "
    "because she's a cat"
)
_FORMAT = "and her %s is %d."


def benchmark_scan(iterations: int = 10_000, runs: int = 3) -> dict[str, float]:
    scanner = Scanner(_FORMAT)
    best_one_shot = _best_of(runs, lambda: scan_values(_STORY, _FORMAT, ["str", "int"]), iterations)
    best_reused = _best_of(runs, lambda: scanner.scan_values(_STORY, ["str", "int"]), iterations)
    return {
        "iterations": iterations,
        "one_shot_us": best_one_shot / iterations * 1_000_000,
        "reused_us": best_reused / iterations * 1_000_000,
    }


def _best_of(runs: int, func, iterations: int) -> float:
    best = None
    for _ in range(runs):
        start = time.perf_counter()
        for _ in range(iterations):
            func()
        elapsed = time.perf_counter() - start
        best = elapsed if best is None or elapsed < best else best
    return best or 0.0


if __name__ == "__main__":
    result = benchmark_scan()
    print(result)
