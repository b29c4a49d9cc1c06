"""Build environment that runs a package's build phases."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from collections.abc import Mapping
from pathlib import Path

from rookpkg.phases import BuildPhases, Patch, PhaseResult, find_source_dir, write_phase_script

logger = logging.getLogger(__name__)

_BASE_ENV = {
    "PATH": "/usr/bin:/bin:/usr/sbin:/sbin",
    "HOME": "/root",
    "TERM": "xterm-256color",
    "LC_ALL": "POSIX",
}


class BuildError(RuntimeError):
    """Raised when patching or a build phase fails."""

    def __init__(self, message: str, results: list[PhaseResult] | None = None) -> None:
        super().__init__(message)
        self.results = results if results is not None else []


class BuildEnvironment:
    """Directories, environment and phase scripts for building one package."""

    def __init__(
        self,
        name: str,
        version: str,
        release: int = 1,
        build_root: str | os.PathLike[str] = "/var/tmp/rookpkg/build",
        cache_dir: str | os.PathLike[str] = "/var/cache/rookpkg",
        jobs: int | None = None,
        phases: BuildPhases | None = None,
        environment: Mapping[str, str] | None = None,
        patches: Mapping[str, Patch] | None = None,
    ) -> None:
        self.name = name
        self.version = version
        self.release = release
        self.phases = phases if phases is not None else BuildPhases()
        self.patches = dict(patches) if patches else {}
        self.verbose = False

        self.build_dir = Path(build_root) / f"{name}-{version}"
        self.src_dir = self.build_dir / "src"
        self.dest_dir = self.build_dir / "dest"
        self.sources_dir = Path(cache_dir) / "sources"

        try:
            self.build_dir.mkdir(parents=True, exist_ok=True)
            self.src_dir.mkdir(parents=True, exist_ok=True)
            self.dest_dir.mkdir(parents=True, exist_ok=True)
            self.sources_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BuildError(f"Failed to create build directories: {exc}") from exc

        self.env: dict[str, str] = {
            "ROOKPKG_NAME": name,
            "ROOKPKG_VERSION": version,
            "ROOKPKG_RELEASE": str(release),
            "ROOKPKG_BUILD": str(self.src_dir),
            "ROOKPKG_SOURCES": str(self.sources_dir),
            "ROOKPKG_DESTDIR": str(self.dest_dir),
            "ROOKPKG_BUILDDIR": str(self.build_dir),
            "ROOKPKG_SRCDIR": str(self.src_dir),
            **_BASE_ENV,
        }
        self.jobs = 0
        self.set_jobs(jobs if jobs is not None else (os.cpu_count() or 1))
        if environment:
            self.env.update(environment)

    def set_jobs(self, jobs: int) -> None:
        """Set the number of parallel jobs and the variables that carry it."""
        self.jobs = jobs
        self.env["ROOKPKG_JOBS"] = str(jobs)
        self.env["MAKEFLAGS"] = f"-j{jobs}"
        self.env["NINJAJOBS"] = str(jobs)

    def apply_patches(self) -> None:
        """Apply each patch to the source directory in order."""
        if not self.patches:
            return
        logger.info("Applying %d patches", len(self.patches))
        for name, patch in self.patches.items():
            logger.info("Applying patch: %s", name)
            patch_path = self.src_dir / patch.file
            if not patch_path.exists():
                raise BuildError(f"Patch file not found: {patch_path}")
            try:
                completed = subprocess.run(
                    ["patch", f"-p{patch.strip}", "-i", str(patch_path)],
                    cwd=self.src_dir,
                    capture_output=True,
                    text=True,
                    errors="replace",
                )
            except OSError as exc:
                raise BuildError(f"Failed to execute patch command: {exc}") from exc
            if completed.returncode != 0:
                raise BuildError(f"Patch {name} failed: {completed.stderr}")

    def run_phase(self, phase_name: str, script: str) -> PhaseResult:
        """Run one phase script and return its result; empty scripts are skipped."""
        if not script.strip():
            logger.info("Skipping empty %s phase", phase_name)
            return PhaseResult(phase=phase_name, exit_code=0)

        logger.info("Running %s phase for %s", phase_name, self.name)
        script_path = write_phase_script(
            self.build_dir / f"{phase_name}.sh", phase_name, self.name, script
        )
        work_dir = find_source_dir(self.src_dir)
        env = {**os.environ, **self.env}

        start = time.monotonic()
        try:
            if self.verbose:
                completed = subprocess.run(
                    ["/bin/bash", str(script_path)], cwd=work_dir, env=env
                )
                stdout = stderr = ""
            else:
                completed = subprocess.run(
                    ["/bin/bash", str(script_path)],
                    cwd=work_dir,
                    env=env,
                    capture_output=True,
                    text=True,
                    errors="replace",
                )
                stdout, stderr = completed.stdout, completed.stderr
        except OSError as exc:
            raise BuildError(f"Failed to execute {phase_name} phase: {exc}") from exc
        duration = time.monotonic() - start

        exit_code = completed.returncode if completed.returncode >= 0 else -1
        for line in stdout.splitlines():
            logger.debug("[%s:stdout] %s", phase_name, line)
        for line in stderr.splitlines():
            level = logging.DEBUG if exit_code == 0 else logging.ERROR
            logger.log(level, "[%s:stderr] %s", phase_name, line)

        result = PhaseResult(
            phase=phase_name,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_secs=duration,
        )
        if result.success():
            logger.info("Phase %s completed successfully (took %.2fs)", phase_name, duration)
        else:
            logger.error(
                "Phase %s failed with exit code %d (took %.2fs)", phase_name, exit_code, duration
            )
        return result

    def run_prep(self) -> PhaseResult:
        """Run the prep phase."""
        return self.run_phase("prep", self.phases.prep)

    def run_configure(self) -> PhaseResult:
        """Run the configure phase."""
        return self.run_phase("configure", self.phases.configure)

    def run_build(self) -> PhaseResult:
        """Run the build phase."""
        return self.run_phase("build", self.phases.build)

    def run_check(self) -> PhaseResult:
        """Run the check phase."""
        return self.run_phase("check", self.phases.check)

    def run_install(self) -> PhaseResult:
        """Run the install phase."""
        return self.run_phase("install", self.phases.install)

    def build_all(self) -> list[PhaseResult]:
        """Apply patches and run every phase in order, stopping at the first failure."""
        self.apply_patches()
        results: list[PhaseResult] = []
        for name, script in self.phases.ordered():
            result = self.run_phase(name, script)
            results.append(result)
            if not result.success():
                raise BuildError(f"Build failed at {name} phase", results)
        return results

    def clean(self) -> None:
        """Remove the build directory."""
        if self.build_dir.exists():
            try:
                shutil.rmtree(self.build_dir)
            except OSError as exc:
                raise BuildError(f"Failed to remove build dir: {self.build_dir}") from exc

    def collect_installed_files(self) -> list[Path]:
        """Return the non-directory files installed under DESTDIR as absolute paths."""
        if not self.dest_dir.exists():
            return []
        return sorted(self._collect(self.dest_dir))

    def _collect(self, directory: Path):
        for path in directory.iterdir():
            if path.is_dir():
                yield from self._collect(path)
            else:
                yield Path("/") / path.relative_to(self.dest_dir)