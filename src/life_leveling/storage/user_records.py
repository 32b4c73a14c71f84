"""User record persistence (JSON + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import re
import tempfile
from pathlib import Path

import structlog

from life_leveling.models.interest import UserRecord

logger = structlog.get_logger()

_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-]{1,128}$")


def validate_user_id(user_id: str) -> str:
    if not _USER_ID_PATTERN.match(user_id):
        raise ValueError(f"Invalid user id: {user_id!r}")
    return user_id


def get_record_path(users_dir: Path, user_id: str) -> Path:
    users_dir.mkdir(parents=True, exist_ok=True)
    return users_dir / f"{validate_user_id(user_id)}.json"


def _read_record(path: Path) -> UserRecord:
    with open(path, encoding="utf-8") as f:
        fcntl.flock(f, fcntl.LOCK_SH)
        data = json.load(f)
        fcntl.flock(f, fcntl.LOCK_UN)
    return UserRecord.model_validate(data)


def load_user(users_dir: Path, user_id: str) -> UserRecord | None:
    path = get_record_path(users_dir, user_id)
    if not path.exists():
        return None
    return _read_record(path)


def save_user(users_dir: Path, record: UserRecord) -> None:
    path = get_record_path(users_dir, record.user_id)
    with tempfile.NamedTemporaryFile(
        "w", dir=path.parent, delete=False, suffix=".tmp", encoding="utf-8"
    ) as tmp:
        json.dump(record.model_dump(mode="json", by_alias=True), tmp)
    os.replace(tmp.name, path)


def list_users(users_dir: Path) -> list[UserRecord]:
    """Every stored user; unreadable files are skipped."""
    if not users_dir.exists():
        return []
    records = []
    for path in sorted(users_dir.glob("*.json")):
        try:
            records.append(_read_record(path))
        except Exception:
            logger.warning("user_record_parse_error", path=str(path))
    return records


def load_comparison_population(users_dir: Path) -> list[UserRecord]:
    """Users whose privacy preferences allow them to appear in peer cohorts."""
    return [record for record in list_users(users_dir) if record.allow_peer_comparisons]


def set_comparison_preference(users_dir: Path, user_id: str, allow: bool) -> UserRecord:
    """Update the opt-in flag.

    Raises:
        KeyError: If the user does not exist.
    """
    record = load_user(users_dir, user_id)
    if record is None:
        raise KeyError(user_id)
    record.allow_peer_comparisons = allow
    save_user(users_dir, record)
    return record
