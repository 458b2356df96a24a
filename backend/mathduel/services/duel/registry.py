import random
from collections import deque
from typing import Deque, Dict, List, NamedTuple, Optional

from mathduel.errors import Full, NotFound, PreconditionFailed
from mathduel.models import Match, WaitingEntry, generate_match_code


class Matchmaking(NamedTuple):
    match: Match
    created: bool
    # Player who was waiting in the queue; None when a fresh match was created
    opponent_id: Optional[str] = None


class MatchRegistry:
    """In-memory table of live matches plus the random matchmaking queue."""

    def __init__(self, rng=None):
        self._matches: Dict[str, Match] = {}
        self._waiting: Deque[WaitingEntry] = deque()
        self._rng = rng or random.Random()

    def __len__(self):
        return len(self._matches)

    def get(self, code: Optional[str]) -> Optional[Match]:
        if not code:
            return None
        return self._matches.get(str(code).upper())

    def require(self, code: Optional[str]) -> Match:
        match = self.get(code)
        if match is None:
            raise NotFound()
        return match

    def matches_for(self, player_id: str) -> List[Match]:
        return [m for m in self._matches.values() if player_id in m.players]

    @property
    def waiting(self) -> List[WaitingEntry]:
        return list(self._waiting)

    def generate_unique_code(self) -> str:
        code = generate_match_code(self._rng)
        while code in self._matches:
            code = generate_match_code(self._rng)
        return code

    def create_match(self, creator_id: str, name: Optional[str]) -> Match:
        match = Match(self.generate_unique_code(), creator_id, name)
        self._matches[match.code] = match
        return match

    def join_match(self, code: Optional[str], joiner_id: str, name: Optional[str]) -> Match:
        match = self.require(code)
        if match.is_full:
            raise Full()
        if joiner_id in match.players:
            raise PreconditionFailed('Already in this game', notify=True)
        match.add_player(joiner_id, name)
        return match

    def random_match(self, player_id: str, name: Optional[str]) -> Optional[Matchmaking]:
        """Pair with the oldest waiting player, or open a match and wait.

        A stale queue entry (match gone or already paired) drops the request.
        """
        if any(e.player_id == player_id for e in self._waiting):
            return None
        if self._waiting:
            entry = self._waiting.popleft()
            match = self._matches.get(entry.code)
            if match is None or len(match.players) != 1:
                return None
            match.add_player(player_id, name)
            return Matchmaking(match, created=False, opponent_id=entry.player_id)
        match = self.create_match(player_id, name)
        self._waiting.append(WaitingEntry(player_id, match.code))
        return Matchmaking(match, created=True)

    def delete(self, code: str) -> Optional[Match]:
        return self._matches.pop(code, None)

    def disconnect(self, player_id: str) -> List[Match]:
        """Drop queue entries for the connection and delete every match it was in."""
        self._waiting = deque(e for e in self._waiting if e.player_id != player_id)
        deleted = []
        for match in self.matches_for(player_id):
            if self.delete(match.code) is not None:
                deleted.append(match)
        return deleted
