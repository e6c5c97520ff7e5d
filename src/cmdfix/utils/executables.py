"""PATH lookups shared by rules, memoized per process."""

from __future__ import annotations

import logging
import os
import re
import shutil
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

# cmdfix itself plus the command names of similar correction tools;
# suggesting any of them would loop back into a corrector.
SELF_NAMES = frozenset({"cmdfix", "fuck", "thefuck", "oops"})

_WINDOWS_EXTENSIONS = (".exe", ".cmd", ".bat", ".com", ".ps1")


class ExecutableCache:
    """Write-once cache of executable lookups.

    Each key is resolved at most once; later lookups read the stored value.
    Safe to share between the corrector's worker threads.
    """

    def __init__(
        self,
        path: str | None = None,
        excluded_prefixes: list[str] | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            path: Search path, defaults to ``$PATH`` at lookup time
            excluded_prefixes: PATH entries starting with any of these are skipped
        """
        self._path = path
        self.excluded_prefixes = list(excluded_prefixes or [])
        self._which: dict[str, str | None] = {}
        self._all: frozenset[str] | None = None
        self._lock = threading.Lock()

    @property
    def search_path(self) -> list[str]:
        raw = self._path if self._path is not None else os.environ.get("PATH", "")
        return [
            entry
            for entry in raw.split(os.pathsep)
            if entry and not any(entry.startswith(p) for p in self.excluded_prefixes)
        ]

    def which(self, program: str) -> str | None:
        """Return the full path of ``program`` or None if it is not on PATH."""
        with self._lock:
            if program in self._which:
                return self._which[program]

        found = shutil.which(program, path=os.pathsep.join(self.search_path))

        with self._lock:
            # First writer wins so every caller sees the same answer.
            return self._which.setdefault(program, found)

    def exists(self, program: str) -> bool:
        return self.which(program) is not None

    def all_executables(self) -> frozenset[str]:
        """Names of every executable file on the search path."""
        with self._lock:
            if self._all is not None:
                return self._all

        names: set[str] = set()
        for entry in self.search_path:
            directory = Path(entry)
            try:
                children = list(directory.iterdir())
            except OSError:
                continue
            for child in children:
                if _is_executable(child):
                    names.add(child.name)
                    if os.name == "nt":
                        names.add(child.stem)

        result = frozenset(names - SELF_NAMES)
        logger.debug("Found %d executables on PATH", len(result))

        with self._lock:
            if self._all is None:
                self._all = result
            return self._all


def _is_executable(path: Path) -> bool:
    try:
        if not path.is_file():
            return False
    except OSError:
        return False
    if os.name == "nt":
        return path.suffix.lower() in _WINDOWS_EXTENSIONS
    return os.access(path, os.X_OK)


def replace_argument(script: str, old: str, new: str) -> str:
    """Replace one argument in ``script``, preferring the last position.

    Tries the end of the script first, then a space-delimited occurrence,
    then the start. Returns ``script`` unchanged if ``old`` is not found.
    """
    escaped = re.escape(old)
    for pattern, replacement in (
        (rf" {escaped}$", f" {new}"),
        (rf" {escaped} ", f" {new} "),
        (rf"^{escaped} ", f"{new} "),
    ):
        replaced = re.sub(pattern, lambda _m: replacement, script, count=1)
        if replaced != script:
            return replaced
    return script
