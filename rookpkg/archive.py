"""Binary package archives (.rookpkg).

A package archive is a tar file holding:

- ``.PKGINFO``: package metadata in TOML
- ``.FILES``: the installed files with their checksums, in TOML
- ``.INSTALL``: installation scripts in TOML, present only when scripts exist
- ``data.tar.zst``: the zstd-compressed file contents
"""

from __future__ import annotations

import hashlib
import io
import logging
import os
import platform
import stat
import tarfile
import tempfile
import time
import tomllib
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any

import tomli_w
import zstandard

logger = logging.getLogger(__name__)

PKG_EXTENSION = ".rookpkg"

_PKGINFO = ".PKGINFO"
_FILES = ".FILES"
_INSTALL = ".INSTALL"
_DATA = "data.tar.zst"

_ZSTD_LEVEL = 19
_CONFIG_PATTERNS = ("/etc/",)


def compute_sha256(path: str | os.PathLike[str]) -> str:
    """Return the hex SHA-256 digest of a file's contents."""
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


class FileType(Enum):
    """Kind of entry recorded in the file list."""

    REGULAR = "Regular"
    DIRECTORY = "Directory"
    SYMLINK = "Symlink"
    HARDLINK = "Hardlink"


@dataclass
class FileEntry:
    """One file installed by a package."""

    path: str
    size: int
    sha256: str
    mode: int
    is_config: bool
    file_type: FileType

    def _to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["file_type"] = self.file_type.value
        return data

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> FileEntry:
        return cls(
            path=str(data["path"]),
            size=int(data["size"]),
            sha256=str(data["sha256"]),
            mode=int(data["mode"]),
            is_config=bool(data["is_config"]),
            file_type=FileType(data["file_type"]),
        )


@dataclass
class PackageInfo:
    """Package metadata stored as ``.PKGINFO``."""

    name: str
    version: str
    release: int = 1
    summary: str = ""
    description: str = ""
    license: str = ""
    url: str = ""
    maintainer: str = ""
    build_time: int = field(default_factory=lambda: int(time.time()))
    installed_size: int = 0
    depends: dict[str, str] = field(default_factory=dict)
    build_depends: dict[str, str] = field(default_factory=dict)
    optional_depends: dict[str, list[str]] = field(default_factory=dict)
    arch: str = field(default_factory=platform.machine)

    def filename(self) -> str:
        """Return the archive file name for this package."""
        return f"{self.name}-{self.version}-{self.release}.{self.arch}{PKG_EXTENSION}"


@dataclass
class InstallScripts:
    """Scripts run around installation, removal and upgrade."""

    pre_install: str = ""
    post_install: str = ""
    pre_remove: str = ""
    post_remove: str = ""
    pre_upgrade: str = ""
    post_upgrade: str = ""

    def has_scripts(self) -> bool:
        """Return True if any script is defined."""
        return any(getattr(self, f.name) for f in fields(self))


def _from_table(cls: type, data: dict[str, Any], member: str) -> Any:
    try:
        return cls(**{f.name: data[f.name] for f in fields(cls)})
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Failed to parse {member}: missing field {exc}") from exc


def _parse_toml(content: bytes, member: str) -> dict[str, Any]:
    try:
        return tomllib.loads(content.decode("utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ValueError(f"Failed to parse {member}: {exc}") from exc


def _add_bytes(tar: tarfile.TarFile, name: str, content: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(content)
    info.mode = 0o644
    info.mtime = int(time.time())
    tar.addfile(info, io.BytesIO(content))


class PackageArchiveBuilder:
    """Builds a package archive from a directory of installed files."""

    def __init__(
        self,
        info: PackageInfo,
        source_dir: str | os.PathLike[str],
        scripts: InstallScripts | None = None,
    ) -> None:
        self.info = info
        self.source_dir = Path(source_dir)
        self.scripts = scripts if scripts is not None else InstallScripts()
        self.files: list[FileEntry] = []

    def scan_files(self) -> None:
        """Record every entry under the source directory and the total size."""
        self.files = list(self._scan(self.source_dir))
        self.info.installed_size = sum(
            entry.size for entry in self.files if entry.file_type is FileType.REGULAR
        )
        self.files.sort(key=lambda entry: entry.path)
        logger.info(
            "Scanned %d files, total size: %d bytes",
            len(self.files),
            self.info.installed_size,
        )

    def _scan(self, directory: Path):
        for path in sorted(directory.iterdir()):
            st = path.lstat()
            install_path = "/" + path.relative_to(self.source_dir).as_posix()

            if stat.S_ISLNK(st.st_mode):
                file_type = FileType.SYMLINK
            elif stat.S_ISDIR(st.st_mode):
                file_type = FileType.DIRECTORY
            else:
                file_type = FileType.REGULAR

            if file_type is FileType.REGULAR:
                size, sha256 = st.st_size, compute_sha256(path)
            else:
                size, sha256 = 0, ""

            yield FileEntry(
                path=install_path,
                size=size,
                sha256=sha256,
                mode=st.st_mode,
                is_config=any(p in install_path for p in _CONFIG_PATTERNS),
                file_type=file_type,
            )

            if file_type is FileType.DIRECTORY:
                yield from self._scan(path)

    def build(self, output_dir: str | os.PathLike[str]) -> Path:
        """Write the package archive into ``output_dir`` and return its path."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / self.info.filename()

        pkginfo = tomli_w.dumps(asdict(self.info)).encode("utf-8")
        file_list = tomli_w.dumps(
            {"files": [entry._to_dict() for entry in self.files]}
        ).encode("utf-8")
        install = (
            tomli_w.dumps(asdict(self.scripts)).encode("utf-8")
            if self.scripts.has_scripts()
            else None
        )

        with tempfile.TemporaryDirectory() as tmp:
            data_tar = Path(tmp) / "data.tar"
            data_zst = Path(tmp) / _DATA
            self._create_data_tar(data_tar)
            with open(data_tar, "rb") as src, open(data_zst, "wb") as dst:
                zstandard.ZstdCompressor(level=_ZSTD_LEVEL).copy_stream(src, dst)

            with tarfile.open(output_path, "w", format=tarfile.GNU_FORMAT) as tar:
                _add_bytes(tar, _PKGINFO, pkginfo)
                _add_bytes(tar, _FILES, file_list)
                if install is not None:
                    _add_bytes(tar, _INSTALL, install)
                tar.add(data_zst, arcname=_DATA, recursive=False)

        logger.info("Created package: %s", output_path)
        return output_path

    def _create_data_tar(self, output: Path) -> None:
        with tarfile.open(output, "w", format=tarfile.GNU_FORMAT) as tar:
            self._add_dir(tar, self.source_dir, "")

    def _add_dir(self, tar: tarfile.TarFile, directory: Path, prefix: str) -> None:
        for path in sorted(directory.iterdir()):
            st = path.lstat()
            archive_path = f"{prefix}{path.name}"

            if stat.S_ISLNK(st.st_mode):
                info = tarfile.TarInfo(archive_path)
                info.type = tarfile.SYMTYPE
                info.linkname = os.readlink(path)
                info.mode = 0o777
                info.mtime = int(st.st_mtime)
                tar.addfile(info)
            elif stat.S_ISDIR(st.st_mode):
                info = tarfile.TarInfo(archive_path + "/")
                info.type = tarfile.DIRTYPE
                info.mode = stat.S_IMODE(st.st_mode)
                info.mtime = int(st.st_mtime)
                tar.addfile(info)
                self._add_dir(tar, path, archive_path + "/")
            else:
                tar.add(path, arcname=archive_path, recursive=False)


class PackageArchiveReader:
    """Reads the parts of a package archive."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Package file not found: {self.path}")

    def _read_member(self, member: str) -> bytes | None:
        with tarfile.open(self.path, "r") as tar:
            for info in tar:
                if info.name == member:
                    handle = tar.extractfile(info)
                    return handle.read() if handle is not None else b""
        return None

    def read_info(self) -> PackageInfo:
        """Return the package metadata."""
        content = self._read_member(_PKGINFO)
        if content is None:
            raise ValueError("Package does not contain .PKGINFO")
        return _from_table(PackageInfo, _parse_toml(content, _PKGINFO), _PKGINFO)

    def read_files(self) -> list[FileEntry]:
        """Return the recorded file list."""
        content = self._read_member(_FILES)
        if content is None:
            raise ValueError("Package does not contain .FILES")
        data = _parse_toml(content, _FILES)
        try:
            return [FileEntry._from_dict(item) for item in data["files"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Failed to parse .FILES: {exc}") from exc

    def read_scripts(self) -> InstallScripts | None:
        """Return the install scripts, or None if the package has none."""
        content = self._read_member(_INSTALL)
        if content is None:
            return None
        return _from_table(InstallScripts, _parse_toml(content, _INSTALL), _INSTALL)

    def extract_data(self, dest: str | os.PathLike[str]) -> None:
        """Unpack the package's file contents into ``dest``."""
        dest = Path(dest)
        dest.mkdir(parents=True, exist_ok=True)

        with tarfile.open(self.path, "r") as tar:
            member = next((info for info in tar if info.name == _DATA), None)
            if member is None:
                raise ValueError("Package does not contain data.tar.zst")
            compressed = tar.extractfile(member)
            if compressed is None:
                raise ValueError("Package does not contain data.tar.zst")
            reader = zstandard.ZstdDecompressor().stream_reader(compressed)
            with tarfile.open(fileobj=reader, mode="r|") as data:
                if hasattr(tarfile, "tar_filter"):
                    data.extractall(dest, filter="tar")
                else:
                    data.extractall(dest)