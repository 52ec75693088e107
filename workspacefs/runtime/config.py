"""Persistent JSON config for the active workspace.

Stores the open workspace directory and the last folder-picker directory.
Unlike best-effort UI preferences, a config file that exists but cannot be
parsed is an error: silently resetting would lose the user's workspace.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from ..errors import IoError, error_from_os
from ..operations import write_file_atomic

logger = logging.getLogger(__name__)

APP_NAME = "workspacefs"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

_PATH_KEYS = ("workspace_dir", "last_dialog_dir")


@dataclass
class WorkspaceConfig:
    """Configuration persisted between process restarts.

    ``extra`` keeps unknown top-level keys from disk so newer fields survive a
    round trip through an older reader.
    """

    workspace_dir: Path | None = None
    last_dialog_dir: Path | None = None
    extra: dict[str, object] = field(default_factory=dict)

    def copy(self) -> "WorkspaceConfig":
        return WorkspaceConfig(
            workspace_dir=self.workspace_dir,
            last_dialog_dir=self.last_dialog_dir,
            extra=dict(self.extra),
        )

    def to_json_dict(self) -> dict[str, object]:
        data: dict[str, object] = dict(self.extra)
        data["workspace_dir"] = str(self.workspace_dir) if self.workspace_dir is not None else None
        data["last_dialog_dir"] = str(self.last_dialog_dir) if self.last_dialog_dir is not None else None
        return data

    @classmethod
    def from_json_dict(cls, data: object) -> "WorkspaceConfig":
        """Build a config from decoded JSON, rejecting malformed shapes."""
        if not isinstance(data, dict):
            raise IoError("Failed to parse config file: top-level value is not an object")
        values: dict[str, Path | None] = {}
        for key in _PATH_KEYS:
            raw = data.get(key)
            if raw is None:
                values[key] = None
            elif isinstance(raw, str) and raw:
                values[key] = Path(raw)
            else:
                raise IoError(f"Failed to parse config file: {key!r} must be a path string or null")
        extra = {key: value for key, value in data.items() if key not in _PATH_KEYS}
        return cls(workspace_dir=values["workspace_dir"], last_dialog_dir=values["last_dialog_dir"], extra=extra)


def load_config_file(config_path: Path) -> WorkspaceConfig | None:
    """Load the config at ``config_path``.

    Returns ``None`` when the file does not exist (first run). Unreadable or
    malformed files raise ``IoError``.
    """
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("no config at %s, using defaults", config_path)
        return None
    except OSError as exc:
        raise IoError(f"Failed to read config file: {error_from_os(exc, config_path).message}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise IoError(f"Failed to parse config file {config_path}: {exc}") from exc
    return WorkspaceConfig.from_json_dict(data)


def save_config_file(config_path: Path, config: WorkspaceConfig) -> None:
    """Serialize ``config`` as pretty-printed JSON, creating parent dirs."""
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IoError(f"Failed to create config directory: {error_from_os(exc, config_path.parent).message}") from exc
    payload = json.dumps(config.to_json_dict(), indent=2) + "\n"
    write_file_atomic(config_path, payload)
    logger.debug("saved config to %s", config_path)


__all__ = [
    "APP_NAME",
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_PATH",
    "WorkspaceConfig",
    "load_config_file",
    "save_config_file",
]
