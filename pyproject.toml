[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iptskit"
version = "0.1.0"
description = "Building blocks for IPTS touchscreen data: HID descriptor state, protocol structures, Gaussian contact fitting, contact validation, INI config loading and stylus event translation."
requires-python = ">=3.10"
keywords = ["ipts", "touchscreen", "stylus", "hid", "digitizer", "heatmap"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware :: Hardware Drivers",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["iptskit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
