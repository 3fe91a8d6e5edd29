"""Matrix multiplication kernels and a Mandelbrot renderer for timing experiments."""

__version__ = "0.1.0"
__all__ = ["matmul", "mandelbrot"]