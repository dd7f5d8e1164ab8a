"""
Configuration manager backed by a JSON file in the data directory.
"""

import json
import logging
import os
from pathlib import Path

from .constants import (
    CONFIG_FILE_NAME,
    DATA_DIR,
    DEFAULT_EXCLUDE_PATTERN,
    DEFAULT_INCLUDE_PATTERN,
    HISTORY_LIMIT,
    INDEX_FILE_NAME,
)
from .utils import compile_path_filter

logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads, updates and saves the search configuration.

    Values passed to update() live in a separate override layer for the
    current run; save() only writes the persisted settings.
    """

    def __init__(self, config_dir=None):
        self.config_dir = Path(config_dir) if config_dir else DATA_DIR
        self.config_file = self.config_dir / CONFIG_FILE_NAME
        self.config = self._load()
        self._overrides = {}

    def _load(self):
        config = self._get_default_config()
        try:
            if self.config_file.exists():
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    config.update(data)
                else:
                    logger.error(f"Config file {self.config_file} is not an object, using defaults")
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to load config: {e}")
        return config

    def _get_default_config(self):
        return {
            "root_path": os.getcwd(),
            "include_pattern": DEFAULT_INCLUDE_PATTERN,
            "exclude_pattern": DEFAULT_EXCLUDE_PATTERN,
            # relative names resolve inside the config directory
            "index_file": INDEX_FILE_NAME,
            "follow_symlinks": False,
            "search_history": [],
            # index file -> root it was built from
            "index_roots": {},
        }

    def save(self):
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.config, f, ensure_ascii=False, indent=2)
        except IOError as e:
            logger.error(f"Failed to save config: {e}")

    def get(self, key, default=None):
        if key in self._overrides:
            return self._overrides[key]
        return self.config.get(key, default)

    def update(self, **values):
        """Override settings for this run; None values are ignored."""
        for key, value in values.items():
            if value is not None:
                self._overrides[key] = value

    def commit_overrides(self):
        """Persist the run's overrides."""
        self.config.update(self._overrides)
        self._overrides.clear()
        self.save()

    def add_history(self, keyword):
        if not keyword:
            return
        history = self.config.get("search_history", [])
        if keyword in history:
            history.remove(keyword)
        history.insert(0, keyword)
        self.config["search_history"] = history[:HISTORY_LIMIT]
        self.save()

    def get_history(self):
        return self.config.get("search_history", [])

    def get_root_path(self) -> str:
        return os.path.abspath(os.path.expanduser(self.get("root_path") or os.getcwd()))

    def get_index_path(self) -> Path:
        p = Path(os.path.expanduser(self.get("index_file") or INDEX_FILE_NAME))
        return p if p.is_absolute() else self.config_dir / p

    def get_indexed_root(self, index_path):
        """Root recorded for an index file, None if unknown."""
        roots = self.config.get("index_roots")
        if not isinstance(roots, dict):
            return None
        return roots.get(str(index_path))

    def set_indexed_root(self, index_path, root):
        roots = self.config.get("index_roots")
        roots = dict(roots) if isinstance(roots, dict) else {}
        roots[str(index_path)] = root
        self.config["index_roots"] = roots
        self.save()

    def get_follow_symlinks(self) -> bool:
        return bool(self.get("follow_symlinks", False))

    def get_include_filter(self):
        return compile_path_filter(self.get("include_pattern"))

    def get_exclude_filter(self):
        return compile_path_filter(self.get("exclude_pattern"))
