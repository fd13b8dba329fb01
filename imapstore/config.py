"""Application configuration — paths, fixed defaults, CLI preferences."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path

APP_NAME = "imapstore"
APP_VERSION = "0.1.0"

logger = logging.getLogger(__name__)

# ── Directories ───────────────────────────────────────────────────────────────

_XDG_DATA = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
_XDG_CONFIG = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

DATA_DIR: Path = _XDG_DATA / "imapstore"
CONFIG_DIR: Path = _XDG_CONFIG / "imapstore"
LOG_PATH: Path = DATA_DIR / "imapstore.log"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.json"

# ── Connection ────────────────────────────────────────────────────────────────

DEFAULT_HOST: str = "localhost"
DEFAULT_FOLDER: str = "INBOX"
CONNECT_TIMEOUT_SECONDS: int = 30

# ── Mailbox layout ────────────────────────────────────────────────────────────

FOLDER_DELIMITER: str = "/"     # used when building new folder names
PART_SCAN_LIMIT: int = 20       # part indices 1..19 are probed per level

# ── CLI preferences (settings.json) ───────────────────────────────────────────
# Only the command line reads these; the library defaults above are fixed.

CLI_HOST: str = DEFAULT_HOST
CLI_FOLDER: str = DEFAULT_FOLDER


# ── Persistence ───────────────────────────────────────────────────────────────

def save_settings() -> None:
    """Persist the CLI preferences to disk.  Passwords go to the keyring."""
    data = {
        "cli_host": CLI_HOST,
        "cli_folder": CLI_FOLDER,
    }
    try:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        SETTINGS_PATH.write_text(json.dumps(data, indent=2), encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not save settings: %s", exc)


def load_settings() -> None:
    """Load the CLI preferences from disk, falling back to the library defaults."""
    global CLI_HOST, CLI_FOLDER
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
        CLI_HOST = str(data.get("cli_host") or DEFAULT_HOST)
        CLI_FOLDER = str(data.get("cli_folder") or DEFAULT_FOLDER)
    except (OSError, ValueError, AttributeError) as exc:
        logger.warning("Could not load settings: %s", exc)
