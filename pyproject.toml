[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "drycleansim"
version = "0.1.0"
description = "Discrete-event simulation of a dry-cleaning shop, built on a small simulation library"
requires-python = ">=3.10"
keywords = ["simulation", "discrete-event", "queueing", "simlib"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
drycleansim = "drycleansim.dryclean:main"

[tool.hatch.build.targets.wheel]
packages = ["drycleansim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
