import random

import pytest

from kernelbench.matmul import (
    benchmark,
    main,
    mm0,
    mm1,
    mm2,
    mm3,
)


def _random_matrix(n, seed):
    rng = random.Random(seed)
    return [rng.random() for _ in range(n * n)]


def _identity(n):
    m = [0.0] * (n * n)
    for i in range(n):
        m[i + i * n] = 1.0
    return m


@pytest.mark.parametrize("n", [37, 72])
def test_blocked_kernel_across_block_boundaries_matches_mm0(n):
    a = _random_matrix(n, 13)
    b = _random_matrix(n, 14)
    expected = [0.0] * (n * n)
    mm0(a, b, expected, n)
    c = [0.0] * (n * n)
    mm2(a, b, c, n)
    assert c == expected


@pytest.mark.parametrize("kernel", [mm0, mm1, mm2, mm3])
def test_identity_on_right_returns_a(kernel):
    n = 8
    a = _random_matrix(n, 1)
    c = [0.0] * (n * n)
    kernel(a, _identity(n), c, n)
    assert c == pytest.approx(a)


@pytest.mark.parametrize("kernel", [mm0, mm1, mm2, mm3])
def test_identity_on_left_returns_b(kernel):
    n = 8
    b = _random_matrix(n, 2)
    c = [0.0] * (n * n)
    kernel(_identity(n), b, c, n)
    assert c == pytest.approx(b)


@pytest.mark.parametrize("kernel", [mm0, mm1, mm2, mm3])
def test_zero_matrix_leaves_c_unchanged(kernel):
    n = 4
    a = _random_matrix(n, 3)
    start = _random_matrix(n, 4)
    c = list(start)
    kernel(a, [0.0] * (n * n), c, n)
    assert c == start


@pytest.mark.parametrize("kernel", [mm0, mm1, mm2])
def test_small_column_major_example(kernel):
    # A = [[1, 3], [2, 4]], B = identity swapped columns -> columns of A swapped
    a = [1.0, 2.0, 3.0, 4.0]
    b = [0.0, 1.0, 1.0, 0.0]
    c = [0.0] * 4
    kernel(a, b, c, 2)
    assert c == [3.0, 4.0, 1.0, 2.0]


@pytest.mark.parametrize("kernel", [mm0, mm1, mm2, mm3])
def test_accumulates_into_c(kernel):
    n = 4
    a = _random_matrix(n, 5)
    b = _random_matrix(n, 6)
    once = [0.0] * (n * n)
    kernel(a, b, once, n)
    twice = [0.0] * (n * n)
    kernel(a, b, twice, n)
    kernel(a, b, twice, n)
    assert twice == pytest.approx([2 * x for x in once])


@pytest.mark.parametrize("kernel", [mm1, mm2])
@pytest.mark.parametrize("n", [1, 5, 40])
def test_reordered_kernels_match_mm0_exactly(kernel, n):
    a = _random_matrix(n, 7)
    b = _random_matrix(n, 8)
    expected = [0.0] * (n * n)
    mm0(a, b, expected, n)
    c = [0.0] * (n * n)
    kernel(a, b, c, n)
    assert c == expected


@pytest.mark.parametrize("n", [4, 8, 40])
def test_mm3_matches_mm0(n):
    a = _random_matrix(n, 9)
    b = _random_matrix(n, 10)
    expected = [0.0] * (n * n)
    mm0(a, b, expected, n)
    c = [0.0] * (n * n)
    mm3(a, b, c, n)
    assert c == pytest.approx(expected, rel=1e-12)


@pytest.mark.parametrize("n", [1, 3, 6])
def test_mm3_rejects_size_not_multiple_of_four(n):
    with pytest.raises(ValueError):
        mm3([0.0] * (n * n), [0.0] * (n * n), [0.0] * (n * n), n)


@pytest.mark.parametrize("kernel", [mm0, mm1, mm2, mm3])
def test_short_matrix_rejected(kernel):
    with pytest.raises(ValueError):
        kernel([0.0] * 15, [0.0] * 16, [0.0] * 16, 4)


@pytest.mark.parametrize("kernel", [mm0, mm1, mm2, mm3])
def test_negative_size_rejected(kernel):
    with pytest.raises(ValueError):
        kernel([], [], [], -1)


def test_benchmark_zeroes_c_before_running():
    seen = []

    def probe(a, b, c, n):
        seen.append(list(c))

    c = [5.0] * 4
    elapsed = benchmark(probe, [1.0] * 4, [1.0] * 4, c, 2)
    assert seen == [[0.0, 0.0, 0.0, 0.0]]
    assert elapsed >= 0.0


def test_benchmark_leaves_product_in_c():
    n = 4
    a = _random_matrix(n, 11)
    b = _random_matrix(n, 12)
    expected = [0.0] * (n * n)
    mm0(a, b, expected, n)
    c = [9.0] * (n * n)
    benchmark(mm1, a, b, c, n)
    assert c == expected


def test_main_prints_csv(capsys):
    assert main(["--max-size", "8", "--runs", "1"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "function,size,time"
    rows = [line.split(",") for line in lines[1:]]
    assert [(r[0], r[1]) for r in rows] == [
        (name, size)
        for size in ("4", "8")
        for name in ("mm0", "mm1", "mm2", "mm3")
    ]
    assert all(float(r[2]) >= 0.0 for r in rows)


def test_main_runs_each_kernel_runs_times(capsys):
    main(["--max-size", "4", "--runs", "3"])
    lines = capsys.readouterr().out.strip().splitlines()[1:]
    names = [line.split(",")[0] for line in lines]
    assert names == ["mm0"] * 3 + ["mm1"] * 3 + ["mm2"] * 3 + ["mm3"] * 3