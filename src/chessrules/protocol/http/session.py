from __future__ import annotations

import threading
import uuid
from typing import Dict, Iterator, Optional

from ...engine.game import GameController


class GameSessionStore:
    """Thread-safe registry of live games keyed by ``game_id``.

    The store lock only guards the map. Commands against one game are
    serialized with that controller's own ``lock``.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, GameController] = {}

    def create(self, game: Optional[GameController] = None) -> str:
        gid = uuid.uuid4().hex
        with self._lock:
            self._games[gid] = game if game is not None else GameController.new()
        return gid

    def get(self, game_id: str) -> Optional[GameController]:
        with self._lock:
            return self._games.get(game_id)

    def replace(self, game_id: str, game: GameController) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._games))
