"""Mandelbrot set renderer with several row and pixel scheduling strategies.

Pixel ``(i, j)`` of a ``width x height`` image maps to the point
``x = i / width * 3.5 - 2.5``, ``y = j / height * 2.0 - 1.0`` of the complex
plane.  Images are packed RGB bytes, row by row, and are saved as binary PPM
(``P6``) files.
"""

from __future__ import annotations

import argparse
import enum
import math
import os
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

Color = tuple[int, int, int]

CHUNK_SIZES = (10, 50, 100)
"""Chunk sizes tried by the command-line benchmark."""


class Schedule(str, enum.Enum):
    """How work is shared out between the worker threads."""

    STATIC = "static"
    """Fixed-size chunks dealt round-robin to the workers up front."""
    DYNAMIC = "dynamic"
    """Fixed-size chunks handed out one at a time as workers free up."""
    GUIDED = "guided"
    """Chunks that shrink as work runs out, never below the chunk size."""
    TASKS = "tasks"
    """One independent task per block of rows."""


def mandelbrot(c: complex, max_iter: int, tol: float = 1e-6) -> int:
    """Return the number of iterations before ``c`` escapes, converges or hits ``max_iter``."""
    z = 0j
    iteration = 0
    while abs(z) <= 2.0 and iteration < max_iter:
        prev = z
        z = z * z + c
        iteration += 1
        magnitude = abs(z)
        # A zero magnitude makes the relative change undefined: keep iterating.
        if magnitude and abs(z - prev) / magnitude < tol:
            break
    return iteration


def iteration_to_color(iteration: int, max_iter: int) -> Color:
    """Map an iteration count to an RGB colour; points inside the set are black."""
    if iteration == max_iter:
        return (0, 0, 0)
    t = iteration / max_iter
    s = 1 - t
    r = int(9 * s * t * t * t * 255)
    g = int(15 * s * s * t * t * 255)
    b = int(8.5 * s * s * s * t * 255)
    return (r, g, b)


def _check_dimensions(width: int, height: int, max_iter: int) -> None:
    if width < 0 or height < 0:
        raise ValueError(f"image size must be non-negative, got {width}x{height}")
    if max_iter < 0:
        raise ValueError(f"max_iter must be non-negative, got {max_iter}")


def _render_span(start: int, stop: int, width: int, height: int, max_iter: int) -> bytes:
    """Render the pixels with flat indices ``start`` to ``stop`` (row-major)."""
    out = bytearray()
    for pixel in range(start, stop):
        j, i = divmod(pixel, width)
        x = (i / width) * 3.5 - 2.5
        y = (j / height) * 2.0 - 1.0
        out.extend(iteration_to_color(mandelbrot(complex(x, y), max_iter), max_iter))
    return bytes(out)


def render_rows(rows: Iterable[int], width: int, height: int, max_iter: int) -> bytes:
    """Render the given rows, in the order given, as packed RGB bytes."""
    _check_dimensions(width, height, max_iter)
    parts = []
    for j in rows:
        if not 0 <= j < height:
            raise ValueError(f"row {j} is outside an image of height {height}")
        parts.append(_render_span(j * width, (j + 1) * width, width, height, max_iter))
    return b"".join(parts)


def render(width: int, height: int, max_iter: int) -> bytes:
    """Render the whole image sequentially as packed RGB bytes."""
    return render_rows(range(height), width, height, max_iter)


def _spans(total: int, chunk_size: int, schedule: Schedule, workers: int) -> list[tuple[int, int]]:
    spans = []
    start = 0
    while start < total:
        remaining = total - start
        if schedule is Schedule.GUIDED:
            size = max(chunk_size, math.ceil(remaining / workers))
        else:
            size = chunk_size
        stop = start + min(size, remaining)
        spans.append((start, stop))
        start = stop
    return spans


def _render_batch(
    spans: Sequence[tuple[int, int]], width: int, height: int, max_iter: int
) -> list[tuple[int, bytes]]:
    return [(start, _render_span(start, stop, width, height, max_iter)) for start, stop in spans]


def _render_scheduled(
    width: int,
    height: int,
    max_iter: int,
    schedule_type: str | Schedule,
    chunk_size: int,
    collapse: bool,
) -> bytes:
    schedule = Schedule(schedule_type)
    if chunk_size < 1:
        raise ValueError(f"chunk size must be positive, got {chunk_size}")
    _check_dimensions(width, height, max_iter)

    per_unit = 1 if collapse and schedule is not Schedule.TASKS else width
    units = width * height if per_unit == 1 else height
    workers = os.cpu_count() or 1
    spans = [
        (start * per_unit, stop * per_unit)
        for start, stop in _spans(units, chunk_size, schedule, workers)
    ]

    if schedule is Schedule.STATIC:
        batches = [spans[k::workers] for k in range(workers)]
    else:
        batches = [[span] for span in spans]

    image = bytearray(width * height * 3)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures: list[Future[list[tuple[int, bytes]]]] = [
            pool.submit(_render_batch, batch, width, height, max_iter)
            for batch in batches
            if batch
        ]
        for future in futures:
            for start, data in future.result():
                image[start * 3:start * 3 + len(data)] = data
    return bytes(image)


def render_parallel(
    width: int,
    height: int,
    max_iter: int,
    schedule_type: str | Schedule = Schedule.STATIC,
    chunk_size: int = 1,
) -> bytes:
    """Render the image with a pool of workers sharing row chunks by ``schedule_type``."""
    return _render_scheduled(width, height, max_iter, schedule_type, chunk_size, collapse=False)


def ppm_bytes(width: int, height: int, pixels: bytes) -> bytes:
    """Return a binary PPM file holding the packed RGB ``pixels``."""
    expected = width * height * 3
    if width < 0 or height < 0:
        raise ValueError(f"image size must be non-negative, got {width}x{height}")
    if len(pixels) != expected:
        raise ValueError(f"expected {expected} pixel bytes, got {len(pixels)}")
    return f"P6\n{width} {height}\n255\n".encode("ascii") + bytes(pixels)


def write_ppm(filename: str | os.PathLike[str], width: int, height: int, max_iter: int) -> None:
    """Render the image sequentially and save it as a PPM file."""
    Path(filename).write_bytes(ppm_bytes(width, height, render(width, height, max_iter)))


def write_ppm_parallel(
    filename: str | os.PathLike[str],
    width: int,
    height: int,
    max_iter: int,
    schedule_type: str | Schedule = Schedule.STATIC,
    chunk_size: int = 1,
) -> float:
    """Render in parallel, print and return the render time, and save a PPM file."""
    schedule = Schedule(schedule_type)
    start = time.perf_counter()
    pixels = render_parallel(width, height, max_iter, schedule, chunk_size)
    elapsed = time.perf_counter() - start
    print(f"Time ({schedule.value}): {elapsed:g} seconds", flush=True)
    Path(filename).write_bytes(ppm_bytes(width, height, pixels))
    return elapsed


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Time Mandelbrot rendering schedules.")
    parser.add_argument("--width", type=int, default=1600, help="image width (default: 1600)")
    parser.add_argument("--height", type=int, default=1200, help="image height (default: 1200)")
    parser.add_argument("--max-iter", type=int, default=1000,
                        help="iteration limit per pixel (default: 1000)")
    parser.add_argument("--output", default="mandelbrot_final.ppm",
                        help="where to save the last image (default: mandelbrot_final.ppm)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Time every schedule and chunk size, then save the last image rendered."""
    args = _parse_args(argv)
    width, height, max_iter = args.width, args.height, args.max_iter
    schedules = (Schedule.STATIC, Schedule.DYNAMIC, Schedule.GUIDED)
    pixels = bytes(width * height * 3)

    def timed(schedule: Schedule, chunk_size: int, collapse: bool) -> float:
        nonlocal pixels
        start = time.perf_counter()
        pixels = _render_scheduled(width, height, max_iter, schedule, chunk_size, collapse)
        return time.perf_counter() - start

    print("\n--- (i) loop schedules ---", flush=True)
    for schedule in schedules:
        for chunk_size in CHUNK_SIZES:
            elapsed = timed(schedule, chunk_size, collapse=False)
            print(f"Time ({schedule.value}, chunkSize={chunk_size}): {elapsed:g} seconds",
                  flush=True)

    print("\n--- (ii) collapsed loop schedules ---", flush=True)
    for schedule in schedules:
        for chunk_size in CHUNK_SIZES:
            elapsed = timed(schedule, chunk_size, collapse=True)
            print(f"Time (collapse, {schedule.value}, chunkSize={chunk_size}): "
                  f"{elapsed:g} seconds", flush=True)

    print("\n--- (iii) tasks ---", flush=True)
    for _ in schedules:
        for chunk_size in CHUNK_SIZES:
            elapsed = timed(Schedule.TASKS, chunk_size, collapse=False)
            print(f"Time (tasks, chunkSize={chunk_size}): {elapsed:g} seconds", flush=True)

    Path(args.output).write_bytes(ppm_bytes(width, height, pixels))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())