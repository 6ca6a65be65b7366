"""Persisted key/value store.

This is the only shared mutable resource in pybattmon. Every trigger reads
and writes it without coordination: each ``get`` and ``set`` is atomic on
its own, but nothing spans two calls. There is no lock or transaction
primitive and callers must not try to build one on top.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

from pybattmon.exceptions import StoreUnavailableError

_logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class StateStore(Protocol):
    """Structural store interface used by the state components.

    ``get`` returns ``None`` for absent keys. Both methods raise
    :class:`StoreUnavailableError` when the backend cannot be reached.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...


class MemoryStateStore:
    """Dict-backed store. Each call completes without yielding to the loop."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class FileStateStore:
    """One file per key under *root*.

    Writes go to a temporary file in the same directory followed by
    ``os.replace``, so a reader sees either the old or the new value of a
    key, never a torn one. Blocking I/O runs in a worker thread.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"invalid store key: {key!r}")
        return self._root / key

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreUnavailableError(f"Cannot read {key}: {exc}", key=key) from exc

    def _write(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", dir=self._root)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise StoreUnavailableError(f"Cannot write {key}: {exc}", key=key) from exc
        _logger.debug("Stored key=%s bytes=%d", key, len(value))

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    def keys(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(p.name for p in self._root.iterdir() if p.is_file() and not p.name.startswith("."))

