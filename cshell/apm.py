"""Finding add-on module libraries and keeping track of the loaded ones."""

from __future__ import annotations

import bisect
import os
import time
from collections.abc import Iterator
from dataclasses import dataclass

MAX_ENTRIES = 100
MAX_DEPTH = 10
LIB_PREFIX = "libcsh_"
LIB_SUFFIX = ".so"
TIME_FORMAT = "%d-%m-%Y %H:%M:%S"


@dataclass(frozen=True)
class LibraryInfo:
    """A library found on disk and its status-change time."""

    path: str
    time: str


@dataclass(frozen=True)
class ApmEntry:
    """A loaded module: its full path and file name."""

    path: str

    @property
    def file(self) -> str:
        return os.path.basename(self.path)


def _ctime(path: str) -> str:
    try:
        stamp = os.stat(path).st_ctime
    except OSError:
        stamp = 0
    return time.strftime(TIME_FORMAT, time.localtime(stamp))


def _walk(directory: str, depth: int) -> Iterator[str]:
    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError:
        return
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                if depth > 1:
                    yield from _walk(entry.path, depth - 1)
            elif entry.is_file():
                yield entry.path
        except OSError:
            continue


class ApmRegistry:
    """Loaded modules kept sorted by file name."""

    def __init__(self) -> None:
        self._entries: list[ApmEntry] = []

    def add(self, path: str) -> ApmEntry:
        """Record a loaded library, placing it before entries with the same or later name."""
        entry = ApmEntry(str(path))
        keys = [e.file for e in self._entries]
        self._entries.insert(bisect.bisect_left(keys, entry.file), entry)
        return entry

    def files(self) -> list[str]:
        return [e.file for e in self._entries]

    def info(self, search: str | None = None) -> list[ApmEntry]:
        """Loaded entries whose file name contains search (all when None)."""
        return [e for e in self._entries if search is None or search in e.file]

    def search(self, paths: str, search: str | None = None) -> list[LibraryInfo]:
        """Find not yet loaded libraries under ';'-separated directories."""
        loaded = set(self.files())
        found: list[LibraryInfo] = []
        for root in paths.split(";"):
            if not root:
                continue
            for path in _walk(root, MAX_DEPTH):
                if len(found) >= MAX_ENTRIES:
                    return found
                name = os.path.basename(path)
                if search is not None and search not in name:
                    continue
                if LIB_PREFIX not in name or LIB_SUFFIX not in name:
                    continue
                if name in loaded:
                    continue
                found.append(LibraryInfo(path, _ctime(path)))
        return found

    def __iter__(self) -> Iterator[ApmEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def default_search_path(home: str | None = None) -> str:
    """Default library directory under the user's home."""
    if home is None:
        home = os.environ.get("HOME")
    if home is None:
        home = os.path.expanduser("~")
    return home + "/.local/lib/csh"