# mindcare/infra/memory_repo.py
from __future__ import annotations

import logging
import os
import re
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

import yaml

from mindcare.domain.types import EmotionalMemoryEntry
from mindcare.infra.paths import ensure_memory_dir
from mindcare.infra.yaml_io import load_yaml, save_yaml

logger = logging.getLogger(__name__)

# =========================
# 메모리 누적 파일락 (프로세스 내 + 프로세스 간)
# =========================
_process_lock = threading.Lock()


@contextmanager
def _file_lock(lock_path: Path):
    """
    간단한 cross-platform 파일락.
    - Windows: msvcrt.locking
    - Unix: fcntl.flock
    """
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    f = open(lock_path, "a+", encoding="utf-8")

    try:
        if os.name == "nt":
            import msvcrt
            msvcrt.locking(f.fileno(), msvcrt.LK_LOCK, 1)
        else:
            import fcntl
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)

        yield
    finally:
        try:
            if os.name == "nt":
                import msvcrt
                msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                import fcntl
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        finally:
            f.close()


def _slugify_user(user_id: str) -> str:
    """파일명에 안전하게 쓸 수 있도록 user id 정리."""
    if not user_id:
        return "anonymous"
    s = re.sub(r"\s+", "_", user_id.strip())
    s = re.sub(r"[^\w\-]", "", s)
    return s or "anonymous"


def memory_path(user_id: str, base_dir: Optional[Path] = None) -> Path:
    directory = base_dir if base_dir is not None else ensure_memory_dir()
    return directory / f"memory_{_slugify_user(user_id)}.yaml"


def load_history(user_id: str, base_dir: Optional[Path] = None) -> List[EmotionalMemoryEntry]:
    """
    Stored emotional memory of a user, most recent first.

    A missing or unreadable file means "no history"; the chat must keep
    working even if the memory file got corrupted.
    """
    path = memory_path(user_id, base_dir)
    if not path.exists() or path.stat().st_size == 0:
        return []

    try:
        data = load_yaml(path) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("memory file unreadable, starting fresh: %s (%s)", path, e)
        return []

    raw = data.get("entries") if isinstance(data, dict) else None
    if not isinstance(raw, list):
        return []
    return [EmotionalMemoryEntry.from_raw(r) for r in raw]


def append_history(
    user_id: str,
    entry: EmotionalMemoryEntry,
    limit: int = 50,
    base_dir: Optional[Path] = None,
) -> List[EmotionalMemoryEntry]:
    """
    Prepend ``entry`` to the user's memory, keep at most ``limit`` records, save.

    Load-modify-save runs under a process lock and a file lock so concurrent
    chats of the same user (threads or workers) do not drop each other's entries.
    """
    path = memory_path(user_id, base_dir)
    lock_path = path.with_suffix(".lock")

    with _process_lock:
        with _file_lock(lock_path):
            history = [entry] + load_history(user_id, base_dir)
            history = history[: max(1, limit)]
            save_yaml(
                path,
                {
                    "user_id": user_id,
                    "entries": [e.to_dict() for e in history],
                },
            )
    return history
