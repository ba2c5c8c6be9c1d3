from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, Optional

from ...engine.game import Game


logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Register games under unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Delete sessions

    The store lock only guards the mapping; moves within a game are
    serialized by the game's own lock.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, Game] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Register a game (a fresh one by default) and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            self._games[gid] = game
        logger.info("session created game_id=%s", gid)
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    def delete(self, game_id: str) -> bool:
        with self._lock:
            removed = self._games.pop(game_id, None) is not None
        if removed:
            logger.info("session deleted game_id=%s", game_id)
        return removed
