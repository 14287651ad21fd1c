from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, ValidationError
from models import AppState
from storage import data_path, get_data_dir, load_json, save_json


logger = logging.getLogger(__name__)

INDEX_FILE = "profiles.json"
DEFAULT_PROFILE = "default"


class ProfileIndex(BaseModel):
    profiles: List[str] = Field(default_factory=list)
    last_active: Optional[str] = None


def _file_key(name: str) -> str:
    key = re.sub(r"[^A-Za-z0-9_-]+", "_", name.strip()).strip("_")
    return (key or DEFAULT_PROFILE)[:80]


def _state_file(name: str) -> Path:
    return data_path(f"state__{_file_key(name)}.json")


def _read_index() -> ProfileIndex:
    try:
        return ProfileIndex.model_validate(load_json(data_path(INDEX_FILE), {}))
    except ValidationError:
        logger.warning("Ignoring malformed profile index")
        return ProfileIndex()


def _write_index(index: ProfileIndex) -> None:
    save_json(data_path(INDEX_FILE), index.model_dump(mode="json"))


def _register(name: str, active: bool = False) -> None:
    index = _read_index()
    if name not in index.profiles:
        index.profiles.append(name)
    if active:
        index.last_active = name
    _write_index(index)


def list_profiles() -> List[str]:
    """
    Profile names from the index, plus any state files found on disk that the
    index does not mention. Always contains at least the default profile.
    """
    index = _read_index()
    names = [p for p in index.profiles if p.strip()]
    indexed_keys = {_file_key(p) for p in names}
    for path in sorted(get_data_dir().glob("state__*.json")):
        key = path.stem[len("state__"):]
        if key not in indexed_keys:
            names.append(key.replace("_", " ").strip() or DEFAULT_PROFILE)

    names = list(dict.fromkeys(names))
    if not names:
        names = [DEFAULT_PROFILE]
        _write_index(ProfileIndex(profiles=names))
    return names


def last_active_profile() -> str:
    index = _read_index()
    profiles = list_profiles()
    return index.last_active if index.last_active in profiles else profiles[0]


def load_profile(name: str) -> AppState:
    fresh = AppState(profile=name)
    raw = load_json(_state_file(name), fresh.model_dump(mode="json"))
    try:
        state = AppState.model_validate(raw)
    except ValidationError as e:
        logger.warning("Profile %r has invalid state (%d errors), starting fresh", name, e.error_count())
        state = fresh
        save_json(_state_file(name), state.model_dump(mode="json"))
    state.profile = name
    _register(name, active=True)
    return state


def save_profile(name: str, state: AppState) -> None:
    state.profile = name
    save_json(_state_file(name), state.model_dump(mode="json"))
    _register(name)


def create_profile(name: str) -> AppState:
    name = name.strip()
    if not name:
        raise ValueError("Profile name cannot be empty.")
    if any(p.lower() == name.lower() for p in list_profiles()):
        raise ValueError("Profile already exists.")
    if _state_file(name).exists():
        raise ValueError("A profile with that name already exists on disk.")

    state = AppState(profile=name)
    save_profile(name, state)
    logger.info("Created profile %r", name)
    return state


def delete_profile(name: str) -> None:
    _state_file(name).unlink(missing_ok=True)

    index = _read_index()
    index.profiles = [p for p in list_profiles() if p != name]
    if index.last_active == name:
        index.last_active = None
    if not index.profiles:
        index.profiles = [DEFAULT_PROFILE]
        save_json(_state_file(DEFAULT_PROFILE), AppState(profile=DEFAULT_PROFILE).model_dump(mode="json"))
    _write_index(index)
    logger.info("Deleted profile %r", name)
