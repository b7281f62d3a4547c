from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from ...engine.game import Game


logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Replace or delete sessions
    - Serialize mutations of a single session via `locked(game_id)`
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, Game] = {}
        self._game_locks: Dict[str, threading.Lock] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            self._games[gid] = game
            self._game_locks[gid] = threading.Lock()
        logger.info("session created", extra={"game_id": gid})
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    def set(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            self._game_locks.pop(game_id, None)
            removed = self._games.pop(game_id, None) is not None
        if removed:
            logger.info("session deleted", extra={"game_id": game_id})
        return removed

    @contextmanager
    def locked(self, game_id: str) -> Iterator[Optional[Game]]:
        """Hold the per-session lock and yield the game (None if unknown)."""
        with self._lock:
            game_lock = self._game_locks.get(game_id)
        if game_lock is None:
            yield None
            return
        with game_lock:
            yield self.get(game_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
