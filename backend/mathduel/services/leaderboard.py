import json
import logging
import os
import tempfile
import threading
from typing import Dict


class LeaderboardStore:
    """Win counter per display name, persisted as one JSON document.

    The whole table is rewritten after every change.
    """

    def __init__(self, path: str, logger=None):
        self.path = path
        self.logger = logger or logging.getLogger(__name__)
        self._wins: Dict[str, int] = {}
        self._lock = threading.Lock()

    def load(self) -> Dict[str, int]:
        with self._lock:
            if not os.path.exists(self.path):
                self._wins = {}
                self._write()
                self.logger.info(f"[leaderboard] created empty table at {self.path}")
                return dict(self._wins)
            try:
                with open(self.path, 'r', encoding='utf-8') as fh:
                    data = json.load(fh)
            except (OSError, ValueError) as exc:
                self.logger.error(f"[leaderboard] could not read {self.path}: {exc}")
                data = {}
            if not isinstance(data, dict):
                self.logger.error(f"[leaderboard] {self.path} is not a JSON object, ignoring it")
                data = {}
            self._wins = {
                str(name): count for name, count in data.items()
                if isinstance(count, int) and not isinstance(count, bool) and count >= 0
            }
            self.logger.info(f"[leaderboard] loaded entries={len(self._wins)}")
            return dict(self._wins)

    def increment(self, name: str) -> int:
        with self._lock:
            self._wins[name] = self._wins.get(name, 0) + 1
            self._write()
            return self._wins[name]

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._wins)

    def reset(self) -> None:
        with self._lock:
            self._wins = {}
            self._write()

    def _write(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix='.leaderboard-', suffix='.json', dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(self._wins, fh, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
