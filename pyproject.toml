[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rookpkg"
version = "0.2.0"
description = "Build phases, .rookpkg binary archives and spec checksum updates for a source-based package manager"
requires-python = ">=3.11"
keywords = ["package-manager", "packaging", "build", "archive", "checksum", "zstd"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
    "Topic :: System :: Archiving :: Packaging",
]
dependencies = [
    "tomli-w",
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rookpkg"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
