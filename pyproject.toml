[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "logforge"
version = "1.3.0"
description = "Hierarchical loggers that route records through filters to appenders, with pattern and JSON encoders"
requires-python = ">=3.10"
dependencies = []
keywords = ["log", "logger", "logging", "pattern", "encoder", "ansi", "mdc"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["logforge"]

[tool.hatch.build.targets.sdist]
include = ["logforge", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
