[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "workshot"
version = "0.1.0"
description = "Save and restore your development context"
requires-python = ">=3.10"
dependencies = [
    "click",
]
keywords = ["git", "workflow", "context", "snapshot", "cli", "productivity"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
workshot = "workshot.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["workshot"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
