[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kernelbench"
version = "0.1.0"
description = "Small numeric kernels for timing experiments: matrix multiplication variants and a Mandelbrot renderer"
requires-python = ">=3.10"
dependencies = []
keywords = ["benchmark", "matrix multiplication", "mandelbrot", "ppm", "scheduling"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
kernelbench-matmul = "kernelbench.matmul:main"
kernelbench-mandelbrot = "kernelbench.mandelbrot:main"

[tool.hatch.build.targets.wheel]
packages = ["kernelbench"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
