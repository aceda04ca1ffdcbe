[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "avoidkit"
version = "0.1.0"
description = "Polar geometry, histograms, field-of-view tests, frame conversions and transform buffering for obstacle-avoidance planners"
requires-python = ">=3.10"
keywords = [
    "obstacle avoidance",
    "drone",
    "multicopter",
    "polar histogram",
    "field of view",
    "robotics",
    "planning",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "numpy",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["avoidkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
