"""
Local one-shot timer for the simulator's fire event.

Holds a single pending fire time. When constructed with a state path the
entry is written to a small JSON file so a restarted process picks up the
schedule it left behind.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional


class LocalTimer:
    """
    In-process TimerFacility with optional JSON persistence.
    """

    def __init__(self, state_path: Optional[str] = None, logger: Optional[logging.Logger] = None) -> None:
        self._path = Path(state_path) if state_path else None
        self._log = logger or logging.getLogger("LocalTimer")
        self._fire_at: Optional[int] = self._load()

    def _load(self) -> Optional[int]:
        if self._path is None or not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            self._log.exception(
                "Unreadable timer state, starting with nothing pending",
                extra={"state_path": str(self._path)},
            )
            return None
        fire_at = data.get("next_fire_at") if isinstance(data, dict) else None
        return int(fire_at) if fire_at is not None else None

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps({"next_fire_at": self._fire_at}), encoding="utf-8")
        os.replace(tmp, self._path)

    def schedule(self, fire_at: int) -> None:
        """Arm the timer, replacing any pending entry."""
        self._fire_at = int(fire_at)
        self._save()

    def next_scheduled(self) -> Optional[int]:
        # the state file is authoritative; another process may have re-armed it
        if self._path is not None:
            self._fire_at = self._load()
        return self._fire_at

    def clear(self) -> None:
        self._fire_at = None
        self._save()
