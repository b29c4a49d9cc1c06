"""Build phases: their scripts, results and working directory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

PHASE_NAMES = ("prep", "configure", "build", "check", "install")

_SCRIPT_MODE = 0o755


@dataclass
class PhaseResult:
    """Outcome of running one build phase."""

    phase: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_secs: float = 0.0

    def success(self) -> bool:
        """Return True if the phase exited with status zero."""
        return self.exit_code == 0


@dataclass(frozen=True)
class Patch:
    """A patch file applied to the sources with ``patch -p<strip>``."""

    file: str
    strip: int = 1


@dataclass
class BuildPhases:
    """Shell scripts for each build phase; an empty script is skipped."""

    prep: str = ""
    configure: str = ""
    build: str = ""
    check: str = ""
    install: str = ""

    def ordered(self) -> list[tuple[str, str]]:
        """Return ``(phase name, script)`` pairs in execution order."""
        return [(name, getattr(self, name)) for name in PHASE_NAMES]


def write_phase_script(
    path: str | os.PathLike[str],
    phase_name: str,
    package_name: str,
    script: str,
) -> Path:
    """Write an executable bash script for a phase and return its path."""
    path = Path(path)
    content = (
        "#!/bin/bash\n"
        "set -e\n"
        "set -o pipefail\n"
        "\n"
        f"# {phase_name} phase for {package_name}\n"
        "\n"
        f"{script}\n"
    )
    path.write_text(content, encoding="utf-8")
    path.chmod(_SCRIPT_MODE)
    return path


def find_source_dir(src_dir: str | os.PathLike[str]) -> Path:
    """Return the single directory inside ``src_dir``, or ``src_dir`` itself.

    Unpacked source tarballs usually hold one top-level ``name-version``
    directory; when there is exactly one, that is where phases run.
    """
    src_dir = Path(src_dir)
    directories = [entry for entry in src_dir.iterdir() if entry.is_dir()]
    if len(directories) == 1:
        return directories[0]
    return src_dir