# rookpkg

A Python library for building packages from source and packing the result:
it runs a package's build phases as bash scripts, writes and reads `.rookpkg`
binary archives, and rewrites source checksums in package spec files.

## Installation

```
pip install .
```

## Package archives (`rookpkg.archive`)

A `.rookpkg` archive is a tar file holding:

- `.PKGINFO`: package metadata (`PackageInfo`) in TOML
- `.FILES`: one `FileEntry` per path, with size, mode, SHA-256, file type and
  a config flag, in TOML
- `.INSTALL`: `InstallScripts` in TOML, written only when at least one script
  is set
- `data.tar.zst`: the file contents as a tar, zstd-compressed at level 19

Build one from a staged directory:

```python
from rookpkg.archive import PackageArchiveBuilder, PackageInfo, InstallScripts

info = PackageInfo(name="hello", version="2.12", release=1, arch="x86_64")
builder = PackageArchiveBuilder(info, "dest", InstallScripts(post_install="ldconfig"))
builder.scan_files()            # fills builder.files and info.installed_size
path = builder.build("out")     # out/hello-2.12-1.x86_64.rookpkg
```

`scan_files()` walks the directory without following symlinks, records
directories, symlinks and regular files (only regular files get a size and a
checksum), marks paths containing `/etc/` as config files and sorts entries by
path. Symlinks are stored as symlinks in the data tar. `PackageInfo.arch`
defaults to `platform.machine()` and `build_time` to the current time.

Read one back:

```python
from rookpkg.archive import PackageArchiveReader

reader = PackageArchiveReader(path)   # FileNotFoundError if missing
info = reader.read_info()
files = reader.read_files()
scripts = reader.read_scripts()       # None when there is no .INSTALL
reader.extract_data("root")
```

A missing or unparsable `.PKGINFO`, `.FILES` or `data.tar.zst` raises
`ValueError`. `compute_sha256(path)` returns a file's hex SHA-256.

## Build phases (`rookpkg.phases`, `rookpkg.build`)

`BuildPhases` holds the `prep`, `configure`, `build`, `check` and `install`
scripts; `ordered()` returns them in that order. `Patch(file, strip=1)`
describes a patch applied with `patch -p<strip>`.

```python
from rookpkg.build import BuildEnvironment, BuildError
from rookpkg.phases import BuildPhases

env = BuildEnvironment(
    "hello", "2.12",
    build_root="/tmp/build",
    cache_dir="/tmp/cache",
    jobs=4,
    phases=BuildPhases(install='mkdir -p "$ROOKPKG_DESTDIR/usr/bin"'),
)
try:
    results = env.build_all()
except BuildError as exc:
    print(exc, exc.results)
print(env.collect_installed_files())
env.clean()
```

`BuildEnvironment` creates `<build_root>/<name>-<version>/` with `src/` and
`dest/`, plus `<cache_dir>/sources`. Scripts run with `ROOKPKG_NAME`,
`ROOKPKG_VERSION`, `ROOKPKG_RELEASE`, `ROOKPKG_BUILD`, `ROOKPKG_SRCDIR`,
`ROOKPKG_SOURCES`, `ROOKPKG_DESTDIR`, `ROOKPKG_BUILDDIR`, `ROOKPKG_JOBS`,
`MAKEFLAGS`, `NINJAJOBS`, a fixed `PATH`, `HOME`, `TERM` and `LC_ALL=POSIX`;
the `environment` mapping is applied last. `jobs` defaults to the CPU count
and can be changed with `set_jobs()`.

Each phase is written by `write_phase_script()` as a bash script with
`set -e` and `set -o pipefail`, and runs in the single directory inside
`src/` if there is exactly one (`find_source_dir()`), otherwise in `src/`
itself. Empty scripts are skipped with a successful `PhaseResult`. Output is
captured unless `env.verbose` is set. `run_prep()` … `run_install()` run a
single phase and return its `PhaseResult`; `build_all()` applies patches,
then runs every phase and raises `BuildError` at the first failure.
`collect_installed_files()` returns the files under `dest/` as sorted
absolute paths.

## Spec checksums (`rookpkg.checksums`)

- `is_placeholder_checksum(value)`: true for empty, `FIXME` or `TODO`
  (any case).
- `update_spec_checksums(spec_path, updates)`: for each
  `(key, old_sha256, new_sha256)`, replaces the `sha256` value in the first
  `key = { url = "...", sha256 = "..." }` inline table of the file.
- `replace_sha256_in_line(line, new_sha256)`: replaces the quoted value
  after `sha256` on one line.

## Helpers

- `rookpkg.sizes.format_size(size)`: `"512 B"`, `"1.50 KB"`, `"2.00 MB"`,
  `"1.00 GB"`; negative sizes raise `ValueError`.
- `rookpkg.textutil.textwrap(text, width)`: greedy word wrapping into a list
  of lines.
- `rookpkg.textutil.truncate(text, max_len)`: cuts text to `max_len`
  characters ending in `...`.

## What this package does not do

It is a library only and installs no command. It does not download or unpack
source tarballs, sign or verify packages, keep a database of installed
packages, install or remove packages, resolve dependencies, or check
installed software against vulnerability databases.

## Tests

```
pip install .[test]
pytest
```