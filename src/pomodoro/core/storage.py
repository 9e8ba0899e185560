"""JSON persistence for settings and statistics."""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pomodoro.core.ledger import StatsLedger
from pomodoro.core.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "pomodoro"
SETTINGS_FILE = "settings.json"
STATS_FILE = "stats.json"
_CORRUPT_SUFFIX = ".corrupt"


def read_json(path: Path) -> dict[str, Any] | None:
    """Return the object stored at *path*, or ``None`` if the file is absent.

    Raises ``ValueError`` when the file does not hold a JSON object.
    """
    if not path.exists():
        return None
    with open(path) as f:
        fcntl.flock(f, fcntl.LOCK_SH)
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


def write_json(path: Path, data: dict[str, Any]) -> None:
    """Atomically replace *path* with *data*, creating parents.

    The object is written to a temporary file in the same directory and
    renamed over *path*, so readers see either the old or the new content.
    Writers are serialized by an exclusive lock on ``<path>.lock``.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path.with_name(path.name + ".lock"), "w") as lock:
        fcntl.flock(lock, fcntl.LOCK_EX)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            os.unlink(tmp_name)
            raise


class Storage:
    """Loads and saves :class:`Settings` and :class:`StatsLedger` under *config_dir*.

    A file that cannot be parsed is renamed to ``<name>.corrupt`` and
    treated as absent, so the next save does not overwrite it.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self.config_dir: Path = config_dir if config_dir is not None else DEFAULT_CONFIG_DIR

    def load_settings(self) -> Settings:
        data = self._load(SETTINGS_FILE)
        if data is None:
            return Settings()
        return Settings.from_dict(data)

    def save_settings(self, settings: Settings) -> None:
        write_json(self.config_dir / SETTINGS_FILE, settings.to_dict())
        logger.debug("settings saved to %s", self.config_dir / SETTINGS_FILE)

    def load_ledger(self) -> StatsLedger:
        data = self._load(STATS_FILE)
        if data is None:
            return StatsLedger()
        return StatsLedger.from_dict(data)

    def save_ledger(self, ledger: StatsLedger) -> None:
        write_json(self.config_dir / STATS_FILE, ledger.to_dict())
        logger.debug("statistics saved to %s", self.config_dir / STATS_FILE)

    def _load(self, name: str) -> dict[str, Any] | None:
        path = self.config_dir / name
        try:
            return read_json(path)
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError too.
            backup = path.with_name(name + _CORRUPT_SUFFIX)
            os.replace(path, backup)
            logger.warning("could not read %s (%s); moved it to %s", path, exc, backup)
            return None
