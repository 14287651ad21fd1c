from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / ".data"


def get_data_dir() -> Path:
    """
    Directory holding the JSON state files.
    STUDY_PLANNER_DATA_DIR overrides the repo-local .data folder.
    """
    override = os.environ.get("STUDY_PLANNER_DATA_DIR")
    base = Path(override).expanduser() if override else DEFAULT_DATA_DIR
    base.mkdir(parents=True, exist_ok=True)
    return base


def data_path(filename: str | Path) -> Path:
    return get_data_dir() / Path(filename)


def _backup_file(path: Path, content: str) -> None:
    backup = path.with_suffix(path.suffix + ".bak")
    try:
        backup.write_text(content, encoding="utf-8")
    except OSError:
        logger.warning("Could not write backup %s", backup)


def load_json(path: Path | str, default: Any = None) -> Any:
    """
    Read a state file. A missing or unreadable file yields ``default``; an
    empty or corrupt one is copied to ``<name>.bak`` and overwritten with
    ``default`` so the next read succeeds.
    """
    path = Path(path)
    if default is None:
        default = {}

    if not path.exists():
        return default

    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError:
        logger.warning("Could not read %s, using defaults", path)
        return default

    text = raw_text.strip()
    try:
        if not text:
            raise ValueError("empty file")
        return json.loads(text)
    except ValueError:
        logger.warning("Resetting corrupt state file %s (backup kept)", path)
        _backup_file(path, raw_text)
        save_json(path, default)
        return default


def save_json(path: Path | str, payload: Any) -> None:
    """Write ``payload`` next to ``path`` and swap it in, so readers never see a partial file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    temp = path.with_suffix(path.suffix + ".tmp")
    temp.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    temp.replace(path)
