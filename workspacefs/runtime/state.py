"""Process-wide workspace state shared by all command invocations."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .config import DEFAULT_CONFIG_PATH, WorkspaceConfig, load_config_file, save_config_file

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Many concurrent readers or one writer; waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class WorkspaceState:
    """Owns the single ``WorkspaceConfig`` and its config-file location.

    Construct one per process (or per test) and pass it to whatever needs it.
    Mutations persist synchronously while holding the write lock, so readers
    never observe a half-applied update. If persisting fails, the in-memory
    value has already changed and is not rolled back.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self._config = WorkspaceConfig()
        self._config_path = config_path if config_path is not None else DEFAULT_CONFIG_PATH
        self._lock = ReadWriteLock()

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> None:
        """Replace in-memory config with the persisted one, if any."""
        loaded = load_config_file(self._config_path)
        if loaded is None:
            return
        with self._lock.write():
            self._config = loaded
        logger.debug("loaded workspace config from %s", self._config_path)

    def save(self) -> None:
        """Persist the current config; writers are serialized like mutations."""
        with self._lock.write():
            save_config_file(self._config_path, self._config)

    def current(self) -> Path | None:
        with self._lock.read():
            return self._config.workspace_dir

    def last_dialog_dir(self) -> Path | None:
        with self._lock.read():
            return self._config.last_dialog_dir

    def config(self) -> WorkspaceConfig:
        """Return a detached copy of the whole config."""
        with self._lock.read():
            return self._config.copy()

    def open(self, workspace: Path) -> None:
        """Make ``workspace`` active and remember it for the folder picker."""
        with self._lock.write():
            self._config.workspace_dir = workspace
            self._config.last_dialog_dir = workspace
            save_config_file(self._config_path, self._config)
        logger.info("opened workspace %s", workspace)

    def close(self) -> None:
        """Clear the active workspace; the last dialog directory is kept."""
        with self._lock.write():
            self._config.workspace_dir = None
            save_config_file(self._config_path, self._config)
        logger.info("closed workspace")

    def set_last_dialog_dir(self, directory: Path) -> None:
        with self._lock.write():
            self._config.last_dialog_dir = directory
            save_config_file(self._config_path, self._config)


__all__ = [
    "ReadWriteLock",
    "WorkspaceState",
]
