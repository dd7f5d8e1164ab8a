"""
Shared constants and logging setup.
"""

import logging
import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("BIGRAMSEARCH_HOME") or Path.home() / ".bigramsearch")

LOG_FILE_NAME = "app.log"
CONFIG_FILE_NAME = "config.json"

# well-known index filename, resolved inside DATA_DIR unless configured
INDEX_FILE_NAME = "fs.index"

# highest character code that takes part in a bigram
MAX_INDEXED_CODE = 127

DEFAULT_INCLUDE_PATTERN = r"\.(txt|md|rst|py|js|ts|json|toml|cfg|ini|yaml|yml|c|h|cpp|java|go|rs)$"
DEFAULT_EXCLUDE_PATTERN = r"\.git|venv|site-packages|node_modules|__pycache__|\.vscode|\.idea|cache|mypy"

HISTORY_LIMIT = 20

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def ensure_data_dir(data_dir=None):
    d = Path(data_dir) if data_dir else DATA_DIR
    d.mkdir(parents=True, exist_ok=True)
    return d


def setup_logging(level=logging.INFO, data_dir=None):
    """Log to <data dir>/app.log and to the console."""
    log_dir = ensure_data_dir(data_dir)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )
