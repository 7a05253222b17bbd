"""Session-scoped registry of computer-controlled players."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .actions import AIPlayer

logger = logging.getLogger(__name__)


class AIRegistry:
    """Maps (session, seat) to the AI player driving that seat.

    Owned by whoever orchestrates sessions; nothing here is module global.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Dict[int, AIPlayer]] = {}

    def create(self, session_id: str) -> None:
        self._sessions.setdefault(session_id, {})

    def register(self, session_id: str, player_index: int, player: AIPlayer) -> None:
        self.create(session_id)
        self._sessions[session_id][player_index] = player
        logger.info("session %s: seat %d driven by %s", session_id, player_index, player.name)

    def unregister(self, session_id: str, player_index: int) -> Optional[AIPlayer]:
        seats = self._sessions.get(session_id)
        if not seats:
            return None
        return seats.pop(player_index, None)

    def get(self, session_id: str, player_index: int) -> Optional[AIPlayer]:
        return self._sessions.get(session_id, {}).get(player_index)

    def is_ai(self, session_id: str, player_index: int) -> bool:
        return self.get(session_id, player_index) is not None

    def seats(self, session_id: str) -> List[int]:
        return sorted(self._sessions.get(session_id, {}))

    def cleanup(self, session_id: str) -> int:
        """Forget every AI of a session; returns how many were removed."""
        removed = len(self._sessions.pop(session_id, {}))
        if removed:
            logger.info("session %s: removed %d AI players", session_id, removed)
        return removed

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
