import contextlib
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from .models import DiscountCodeResult

log = logging.getLogger(__name__)


class CodeStore:
    """
    code -> used flag, backed by a single JSON file.

    Every mutation must happen while holding ``lock``; callers that mutate
    (insert / try_mark_used) are expected to take it themselves so that a
    whole batch can run under one acquisition. Persistence is best-effort:
    a failed save is logged and the in-memory mapping stays authoritative.
    """

    def __init__(self, path) -> None:
        self.path = Path(path)
        self.lock = threading.Lock()
        self._ensure_folder()
        self._codes: Dict[str, bool] = self.load()
        log.info("Loaded %d discount codes from %s", len(self._codes), self.path)

    # ---------------------------
    # Persistence
    # ---------------------------

    def load(self) -> Dict[str, bool]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            log.warning("Could not read %s, starting empty: %s", self.path, exc)
            return {}

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, bool) for k, v in data.items()
        ):
            log.warning("Malformed code file %s, starting empty", self.path)
            return {}
        return data

    def save(self) -> bool:
        """Write the whole mapping; returns False if the write failed."""
        tmp_path = None
        try:
            self._ensure_folder()
            fd, tmp_path = tempfile.mkstemp(
                prefix="." + self.path.name, suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._codes, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
            return True
        except (OSError, TypeError, ValueError) as exc:
            log.error("Failed to persist discount codes to %s: %s", self.path, exc)
            return False
        finally:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)

    def _ensure_folder(self) -> None:
        folder = self.path.parent
        if not folder.exists():
            try:
                folder.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                log.error("Could not create storage folder %s: %s", folder, exc)

    # ---------------------------
    # Mutations (caller holds self.lock)
    # ---------------------------

    def contains(self, code: str) -> bool:
        return code in self._codes

    def insert(self, code: str) -> None:
        if code in self._codes:
            raise ValueError(f"code {code!r} already exists")
        self._codes[code] = False

    def try_mark_used(self, code: str) -> DiscountCodeResult:
        used = self._codes.get(code)
        if used is None:
            return DiscountCodeResult.NOT_FOUND
        if used:
            return DiscountCodeResult.ALREADY_USED

        self._codes[code] = True
        self.save()
        return DiscountCodeResult.SUCCESS

    # ---------------------------
    # Read helpers
    # ---------------------------

    def is_used(self, code: str) -> Optional[bool]:
        with self.lock:
            return self._codes.get(code)

    def stats(self) -> Dict[str, int]:
        with self.lock:
            used = sum(1 for v in self._codes.values() if v)
            return {"total": len(self._codes), "used": used, "unused": len(self._codes) - used}

    def __contains__(self, code: str) -> bool:
        with self.lock:
            return code in self._codes

    def __len__(self) -> int:
        with self.lock:
            return len(self._codes)
