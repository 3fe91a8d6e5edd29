"""Square matrix multiplication kernels and a small timing harness.

Matrices are flat sequences of ``n * n`` floats in column-major order: the
element in row ``i`` and column ``j`` lives at index ``i + j * n``.  Every
kernel accumulates ``A @ B`` into ``C`` in place (``C += A @ B``).
"""

from __future__ import annotations

import argparse
import math
import random
import time
from collections.abc import Callable, MutableSequence, Sequence

Matrix = MutableSequence[float]
Kernel = Callable[[Sequence[float], Sequence[float], MutableSequence[float], int], None]

L1_CACHE_BYTES = 1 << 15
"""Size of the L1 data cache the blocked kernels are tuned for."""

BLOCK_SIZE = int(math.sqrt(L1_CACHE_BYTES / (3.0 * 8)))
"""Edge of a square block such that three blocks of doubles fit in L1."""

MICRO_KERNEL = 4
"""Edge of the register micro-kernel used by :func:`mm3`."""


def _check(a: Sequence[float], b: Sequence[float], c: Sequence[float], n: int) -> None:
    if n < 0:
        raise ValueError(f"matrix size must be non-negative, got {n}")
    size = n * n
    for name, matrix in (("A", a), ("B", b), ("C", c)):
        if len(matrix) < size:
            raise ValueError(f"matrix {name} holds {len(matrix)} values, needs {size}")


def mm0(a: Sequence[float], b: Sequence[float], c: Matrix, n: int) -> None:
    """Textbook i-j-k triple loop."""
    _check(a, b, c, n)
    size = n * n
    for i in range(n):
        row_a = a[i:size:n]
        for j in range(n):
            col_b = b[j * n:(j + 1) * n]
            idx = i + j * n
            value = c[idx]
            for x, y in zip(row_a, col_b):
                value += x * y
            c[idx] = value


def mm1(a: Sequence[float], b: Sequence[float], c: Matrix, n: int) -> None:
    """j-k-i loop order: walks columns contiguously with B hoisted out."""
    _check(a, b, c, n)
    for j in range(n):
        col = j * n
        for k in range(n):
            bv = b[k + col]
            col_a = a[k * n:(k + 1) * n]
            c[col:col + n] = [cv + av * bv for cv, av in zip(c[col:col + n], col_a)]


def mm2(a: Sequence[float], b: Sequence[float], c: Matrix, n: int) -> None:
    """Cache-blocked variant of :func:`mm1`."""
    _check(a, b, c, n)
    bs = BLOCK_SIZE
    for j in range(0, n, bs):
        for k in range(0, n, bs):
            for i in range(0, n, bs):
                i_end = min(i + bs, n)
                for jj in range(j, min(j + bs, n)):
                    col_c = jj * n
                    lo, hi = i + col_c, i_end + col_c
                    for kk in range(k, min(k + bs, n)):
                        bv = b[kk + col_c]
                        col_a = kk * n
                        c[lo:hi] = [
                            cv + av * bv
                            for cv, av in zip(c[lo:hi], a[i + col_a:i_end + col_a])
                        ]


def mm3(a: Sequence[float], b: Sequence[float], c: Matrix, n: int) -> None:
    """Blocked kernel with a 4x4 micro-kernel; ``n`` must be a multiple of 4."""
    _check(a, b, c, n)
    v = MICRO_KERNEL
    if n % v:
        raise ValueError(f"matrix size must be a multiple of {v}, got {n}")
    bs = BLOCK_SIZE
    for j in range(0, n, bs):
        for k in range(0, n, bs):
            for i in range(0, n, bs):
                for jj in range(j, min(j + bs, n), v):
                    for kk in range(k, min(k + bs, n), v):
                        for ii in range(i, min(i + bs, n), v):
                            a_cols = [
                                a[ii + (kk + x) * n:ii + (kk + x) * n + v] for x in range(v)
                            ]
                            for cc in range(v):
                                col = (jj + cc) * n
                                b0, b1, b2, b3 = b[kk + col:kk + col + v]
                                start = ii + col
                                c[start:start + v] = [
                                    cv + ((a0 * b0 + a1 * b1) + (a2 * b2 + a3 * b3))
                                    for cv, a0, a1, a2, a3 in zip(c[start:start + v], *a_cols)
                                ]


KERNELS: dict[str, Kernel] = {"mm0": mm0, "mm1": mm1, "mm2": mm2, "mm3": mm3}


def benchmark(f: Kernel, a: Sequence[float], b: Sequence[float], c: Matrix, n: int) -> float:
    """Zero ``c``, run ``f`` once and return the elapsed wall time in seconds."""
    size = n * n
    c[:size] = [0.0] * size
    start = time.perf_counter()
    f(a, b, c, n)
    return time.perf_counter() - start


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Time the matrix multiplication kernels.")
    parser.add_argument("--max-size", type=int, default=2 * 1024,
                        help="largest matrix edge; sizes double from 4 (default: 2048)")
    parser.add_argument("--runs", type=int, default=2,
                        help="timed runs per kernel and size (default: 2)")
    parser.add_argument("--seed", type=int, default=5489,
                        help="seed for the random matrix contents")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Print a CSV of ``function,size,time`` for every kernel and size."""
    args = _parse_args(argv)
    rng = random.Random(args.seed)
    print("function,size,time", flush=True)
    n = 4
    while n <= args.max_size:
        size = n * n
        a: list[float] = []
        b: list[float] = []
        for _ in range(size):
            a.append(rng.random())
            b.append(rng.random())
        c = [0.0] * size
        for name, kernel in KERNELS.items():
            for _ in range(args.runs):
                elapsed = benchmark(kernel, a, b, c, n)
                print(f"{name},{n},{elapsed:g}", flush=True)
        n *= 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())