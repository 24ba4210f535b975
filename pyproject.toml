[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dryad"
version = "0.1.0"
description = "A tree-walking interpreter for syntax trees of the Dryad scripting language"
requires-python = ">=3.10"
dependencies = []
keywords = ["interpreter", "scripting-language", "ast", "dryad", "tree-walking"]
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
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dryad"]

[tool.hatch.build.targets.sdist]
include = ["dryad", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
