[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kiltbench"
version = "0.1.0"
description = "Inference benchmark building blocks: configuration readers, server and device settings, a dummy device, a load-generator harness, sequence packing, an image classification workload and IEEE half-precision helpers"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "benchmark",
    "inference",
    "mlperf",
    "sequence-packing",
    "image-classification",
    "fp16",
    "loadgen",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kiltbench"]

[tool.hatch.build.targets.sdist]
include = [
    "kiltbench",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
