[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hfdlcore"
version = "1.4.0"
description = "Building blocks of an HFDL (High Frequency Data Link) decoder: frame parameters, descrambling, deinterleaving, caches, sample dumps and DSP helpers"
requires-python = ">=3.10"
keywords = ["hfdl", "sdr", "aviation", "acars", "dsp", "ham-radio"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["hfdlcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
