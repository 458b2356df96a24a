from typing import Dict, List, NamedTuple, Optional
import random
import string

DIRECTIONS = ('up', 'down', 'left', 'right')
CODE_ALPHABET = string.ascii_uppercase
CODE_LENGTH = 5


def full_direction_pools() -> Dict[str, List[str]]:
    return {'attacker': list(DIRECTIONS), 'defender': list(DIRECTIONS)}


def generate_match_code(rng=random, length=CODE_LENGTH):
    """Generate a short room code. Uniqueness is the registry's job."""
    return ''.join(rng.choice(CODE_ALPHABET) for _ in range(length))


class WaitingEntry(NamedTuple):
    player_id: str
    code: str


class Match:
    """Runtime state for one two-player duel, keyed by its room code."""

    def __init__(self, code: str, creator_id: str, name: Optional[str]):
        self.code = code
        self.players: List[str] = [creator_id]
        self.names: Dict[str, Optional[str]] = {creator_id: name}
        self.attacker_index = 0
        self.hit_streak = 0
        self.remaining_dirs = full_direction_pools()
        self.round_active = False
        self.round_number = 0
        # Round scoped; only meaningful while round_active
        self.question: Optional[str] = None
        self.correct_answer: Optional[int] = None
        self.answers: Dict[str, int] = {}
        self.atk_dir: Optional[str] = None
        self.def_dir: Optional[str] = None
        self.time_remaining = 0
        # Scheduler handles
        self.timer = None
        self.next_round = None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= 2

    @property
    def attacker_id(self) -> Optional[str]:
        if len(self.players) < 2:
            return None
        return self.players[self.attacker_index]

    @property
    def defender_id(self) -> Optional[str]:
        if len(self.players) < 2:
            return None
        return self.players[1 - self.attacker_index]

    def add_player(self, player_id: str, name: Optional[str]) -> None:
        self.players.append(player_id)
        self.names[player_id] = name

    def role_of(self, player_id: str) -> Optional[str]:
        if player_id == self.attacker_id:
            return 'attacker'
        if player_id == self.defender_id:
            return 'defender'
        return None

    def swap_roles(self) -> None:
        self.attacker_index = 1 - self.attacker_index

    def reset_direction_pools(self) -> None:
        self.remaining_dirs = full_direction_pools()

    def begin_round(self, question: str, answer: int, duration: int) -> None:
        self.question = question
        self.correct_answer = answer
        self.answers = {}
        self.atk_dir = None
        self.def_dir = None
        self.time_remaining = duration
        self.round_active = True
        self.round_number += 1

    def remaining_dirs_payload(self) -> Dict[str, List[str]]:
        return {role: list(dirs) for role, dirs in self.remaining_dirs.items()}

    def to_dict(self):
        return {
            'code': self.code,
            'players': [{'id': pid, 'name': self.names.get(pid)} for pid in self.players],
            'attacker': self.attacker_id,
            'defender': self.defender_id,
            'hit_streak': self.hit_streak,
            'round_active': self.round_active,
            'round_number': self.round_number,
            'question': self.question if self.round_active else None,
            'time_remaining': self.time_remaining if self.round_active else None,
            'remaining_dirs': self.remaining_dirs_payload(),
        }
