[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dotstate"
version = "0.1.0"
description = "Building blocks for managing dotfiles: pluggable file systems, archive writers, git status parsing, data merging and command logging"
requires-python = ">=3.10"
dependencies = []
keywords = ["dotfiles", "configuration", "filesystem", "tar", "zip", "git"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
dotstate-lint-whitespace = "dotstate.lintwhitespace:main"
dotstate-docs-gen = "dotstate.docsgen:main"

[tool.hatch.build.targets.wheel]
packages = ["dotstate"]

[tool.pytest.ini_options]
addopts = "-ra"
