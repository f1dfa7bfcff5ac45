[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "patchlang"
version = "0.1.0"
description = "Reading Go code-transformation patch files, plus a changelog release-notes extractor"
requires-python = ">=3.10"
dependencies = []
keywords = ["patch", "go", "refactoring", "parser", "tokenizer", "changelog"]
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
    "Topic :: Software Development",
    "Topic :: Text Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
extract-changelog = "patchlang.changelog:main"

[tool.hatch.build.targets.wheel]
packages = ["patchlang"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
