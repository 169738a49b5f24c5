"""Configuration constants for lychee-notes."""

import os
from pathlib import Path

# Database file name inside the data directory.
DB_FILENAME: str = "lychee.sqlite3"

# Directory with data. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/lychee-notes").expanduser(),
    Path("~/.config/lychee-notes").expanduser(),
    Path("~/.lychee-notes").expanduser(),
]

# Page size policy for list operations.
DEFAULT_LIST_LIMIT: int = 50
DEFAULT_TRASH_LIMIT: int = 200
MAX_PAGE_SIZE: int = 500

# Placeholder title the editor used to persist for "no title".
UNTITLED_SENTINEL: str = "Untitled"


def resolve_data_directory() -> Path:
    """Return the data directory: $LYCHEE_DATA_DIR, first existing candidate, or the default."""
    env_dir = os.environ.get("LYCHEE_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]


def resolve_database_path() -> Path:
    """Return the database path, honouring $LYCHEE_DB_PATH."""
    env_path = os.environ.get("LYCHEE_DB_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return resolve_data_directory() / DB_FILENAME
