"""Build phases, .rookpkg archives and spec checksum tools."""

__version__ = "0.2.0"