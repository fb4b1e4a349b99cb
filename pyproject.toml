[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "copperlog"
version = "0.1.0"
description = "Compact structured binary logging with interned format strings, text log rebuilding and fixed-capacity structure-of-arrays containers"
requires-python = ">=3.10"
dependencies = [
    "lmdb",
]
keywords = [
    "logging",
    "structured-logging",
    "binary-log",
    "string-interning",
    "lmdb",
    "structure-of-arrays",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
copperlog-export = "copperlog.export:main"

[tool.hatch.build.targets.wheel]
packages = ["copperlog"]

[tool.hatch.build.targets.sdist]
include = [
    "copperlog",
    "tests",
]

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
