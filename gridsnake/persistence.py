"""Best-score persistence.

The on-disk store keeps a tiny msgpack payload and follows the usual robustness rules:
a ``.bak`` copy before every write, ``.tmp`` + atomic replace, and tolerant loading that
falls back to the backup and quarantines corrupt files. Callers never see an exception:
a failed load reads as 0 and a failed save is logged and dropped.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import time
from typing import Any, Dict, Optional

import msgpack

from . import config

logger = logging.getLogger(__name__)

# On-disk format version for the msgpack payload.
HIGH_SCORE_FORMAT_VERSION = 1


class InMemoryHighScoreStore:
    """Volatile store for headless evaluation runs and tests."""

    def __init__(self, value: int = 0) -> None:
        self.value = max(0, int(value))
        self.saves = 0

    def load_high_score(self) -> int:
        return self.value

    def save_high_score(self, value: int) -> None:
        self.value = max(0, int(value))
        self.saves += 1


class HighScoreStore:
    """msgpack file store; defaults to ``config.HIGH_SCORE_FILE`` at call time."""

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path or config.HIGH_SCORE_FILE

    def _decode_payload(self, blob: bytes) -> int:
        """Decode a v1 payload or a bare integer written by older builds."""
        obj = msgpack.unpackb(blob, raw=False)
        if isinstance(obj, dict) and "high_score" in obj:
            return max(0, int(obj["high_score"]))
        if isinstance(obj, int) and not isinstance(obj, bool):
            return max(0, obj)
        raise ValueError("Unsupported high score payload")

    def _try_load(self, path: str) -> int:
        with open(path, "rb") as f:
            return self._decode_payload(f.read())

    def load_high_score(self) -> int:
        """Load the best score; missing or unreadable files read as 0."""
        path = self.path
        if not os.path.exists(path):
            logger.info("No high score file found; starting from 0")
            return 0

        try:
            value = self._try_load(path)
        except Exception as e:
            logger.error("Load failed: %s", e)

            backup_file = path + ".bak"
            if not os.path.exists(backup_file):
                logger.warning("No backup available; high score starts from 0")
                return 0
            try:
                shutil.copy(backup_file, path)
                logger.warning("Restored high score file from backup")
                value = self._try_load(path)
            except Exception as bak_e:
                logger.error("Backup load failed: %s", bak_e)
                self._quarantine(path)
                return 0

        logger.info("Loaded high score %d from %s", value, path)
        return value

    def _quarantine(self, path: str) -> None:
        ts = time.strftime("%Y%m%d-%H%M%S")
        corrupt_name = path + f".corrupt.{ts}"
        try:
            shutil.move(path, corrupt_name)
            logger.warning("Moved corrupt high score file to %s", corrupt_name)
        except OSError as exc:
            logger.warning("Unable to quarantine %s: %s", path, exc)

    def save_high_score(self, value: int) -> None:
        """Save with a backup file (atomic write); failures are logged, never raised."""
        if not config.SAVE_HIGH_SCORE:
            return

        path = self.path
        directory = os.path.dirname(path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            logger.error("Cannot create %s: %s", directory, exc)
            return

        # Backup current file
        if os.path.exists(path):
            try:
                shutil.copy(path, path + ".bak")
            except OSError as e:
                logger.error("Backup failed: %s", e)

        payload: Dict[str, Any] = {
            "v": HIGH_SCORE_FORMAT_VERSION,
            "high_score": max(0, int(value)),
            "saved_at": time.time(),
        }
        blob = msgpack.packb(payload, use_bin_type=True)
        tmp_path = path + ".tmp"

        def _write_blob(target: str) -> None:
            with open(target, "wb") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())

        try:
            _write_blob(tmp_path)
        except OSError as exc:
            logger.error("Failed to write temp payload: %s", exc)
            self._remove_quietly(tmp_path)
            return

        saved = False
        try:
            os.replace(tmp_path, path)
            saved = True
        except OSError as exc:
            if exc.errno in {errno.EACCES, errno.EPERM}:
                logger.warning("Atomic replace denied (%s); falling back to overwrite", exc)
                try:
                    _write_blob(path)
                    saved = True
                except OSError as fallback_exc:
                    logger.error("Fallback write failed: %s", fallback_exc)
            else:
                logger.error("Save failed: %s", exc)
        finally:
            self._remove_quietly(tmp_path)

        if saved:
            logger.info("Saved high score %d to %s", payload["high_score"], path)

    def _remove_quietly(self, path: str) -> None:
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as exc:
            logger.warning("Unable to delete %s: %s", path, exc)

    def clear(self) -> bool:
        """Delete the stored high score and its side files; True if anything was removed."""
        removed = False
        for suffix in ("", ".bak", ".tmp"):
            target = self.path + suffix
            if not os.path.exists(target):
                continue
            try:
                os.remove(target)
                removed = True
            except OSError as exc:
                logger.warning("Unable to delete %s: %s", target, exc)
        return removed
