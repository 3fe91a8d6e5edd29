# kernelbench

A pair of small compute kernels for timing experiments.

## Matrix multiplication: `kernelbench.matmul`

Matrices are flat sequences of `n * n` floats in column-major order: the
element in row `i` and column `j` is at index `i + j * n`. Every kernel
adds the product `a @ b` into `c` in place:

- `mm0` — the textbook i-j-k triple loop.
- `mm1` — j-k-i loop order, walking columns contiguously with the value
  of `b` hoisted out of the inner loop.
- `mm2` — a cache-blocked version of `mm1`, with square blocks of edge
  `BLOCK_SIZE` chosen so that three blocks of doubles fit in a 32 KiB L1
  cache (`L1_CACHE_BYTES`).
- `mm3` — the blocked loop with a 4×4 micro-kernel (`MICRO_KERNEL`);
  `n` must be a multiple of 4, otherwise `ValueError` is raised.

All kernels raise `ValueError` for a negative `n` or for a matrix that
holds fewer than `n * n` values. `KERNELS` maps each name to its function.

`benchmark(f, a, b, c, n)` zeroes the first `n * n` entries of `c`, runs
`f` once and returns the elapsed wall time in seconds.

## Mandelbrot set: `kernelbench.mandelbrot`

- `mandelbrot(c, max_iter, tol=1e-6)` returns the number of iterations
  before `c` escapes (|z| > 2), the relative change of `z` drops below
  `tol`, or `max_iter` is reached.
- `iteration_to_color(iteration, max_iter)` maps a count to an `(r, g, b)`
  tuple; points that reach `max_iter` are black.
- `render(width, height, max_iter)` renders the whole image as packed RGB
  bytes, row by row; `render_rows(rows, width, height, max_iter)` renders
  only the rows given, in that order.
- `render_parallel(width, height, max_iter, schedule_type="static",
  chunk_size=1)` renders with a thread pool. `schedule_type` is a
  `Schedule` member or its value: `"static"` (chunks dealt round-robin to
  the workers up front), `"dynamic"` (chunks handed out one at a time),
  `"guided"` (chunks that shrink as work runs out, never below
  `chunk_size`) or `"tasks"` (one task per block of rows).
- `ppm_bytes(width, height, pixels)` builds a binary PPM (P6) file.
- `write_ppm(filename, width, height, max_iter)` renders sequentially and
  saves a PPM file; `write_ppm_parallel(filename, width, height, max_iter,
  schedule_type="static", chunk_size=1)` renders in parallel, prints and
  returns the render time, and saves the file.

Pixel `(i, j)` maps to `x = i / width * 3.5 - 2.5`,
`y = j / height * 2.0 - 1.0`, so the image spans real parts from -2.5 to
1.0 and imaginary parts from -1.0 to 1.0.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Commands

Time every matrix multiplication kernel over sizes doubling from 4 and
print the results as CSV with the header `function,size,time`:

```
kernelbench-matmul [--max-size 2048] [--runs 2] [--seed 5489]
```

Time the Mandelbrot renderer under the static, dynamic and guided
schedules, then again with the work split per pixel instead of per row,
then with row tasks, each for chunk sizes 10, 50 and 100; print each time
and save the last image:

```
kernelbench-mandelbrot [--width 1600] [--height 1200] [--max-iter 1000] [--output mandelbrot_final.ppm]
```

## Library use

```python
from kernelbench.matmul import mm1, benchmark

n = 2
a = [1.0, 2.0, 3.0, 4.0]   # column-major
b = [1.0, 0.0, 0.0, 1.0]   # identity
c = [0.0] * (n * n)
mm1(a, b, c, n)            # c now equals a

elapsed = benchmark(mm1, a, b, c, n)
```

```python
from kernelbench.mandelbrot import mandelbrot, iteration_to_color, write_ppm

count = mandelbrot(complex(-0.5, 0.0), 1000, 1e-6)
rgb = iteration_to_color(count, 1000)
write_ppm("mandelbrot.ppm", 320, 240, 200)
```

## What it does not do

The kernels are plain Python loops: there is no SIMD vectorisation and no
native code, so the timings compare loop orderings and blocking in
Python, not hardware-level performance. The parallel Mandelbrot renderer
uses threads, which under CPython's global interpreter lock share one
core; the schedules change how work is divided, not how many cores run it.