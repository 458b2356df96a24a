from typing import Dict, List, NamedTuple, Optional

from mathduel.models import Match


class RoleResult(NamedTuple):
    player_id: str
    name: Optional[str]
    correct: bool
    direction: Optional[str]

    def to_dict(self):
        return {'name': self.name, 'correct': self.correct, 'direction': self.direction}


class RoundOutcome(NamedTuple):
    hit: bool
    streak: int
    attacker: RoleResult
    defender: RoleResult
    remaining_dirs: Dict[str, List[str]]
    exhausted: bool

    def to_dict(self):
        return {
            'hit': self.hit,
            'streak': self.streak,
            'attacker': self.attacker.to_dict(),
            'defender': self.defender.to_dict(),
            'remainingDirs': self.remaining_dirs,
        }


def is_hit(atk_correct: bool, def_correct: bool, atk_dir: Optional[str], def_dir: Optional[str]) -> bool:
    """Attacker must be correct; a correct defender is only hit on a matching direction."""
    if not atk_correct:
        return False
    if not def_correct:
        return True
    return atk_dir == def_dir


def score_current_round(match: Match) -> RoundOutcome:
    """Apply the outcome of the current round to the match.

    Updates the hit streak, the attacker slot and both direction pools.
    Timers, the round_active flag and win handling belong to the engine.
    """
    attacker = match.attacker_id
    defender = match.defender_id
    atk_correct = attacker in match.answers and match.answers[attacker] == match.correct_answer
    def_correct = defender in match.answers and match.answers[defender] == match.correct_answer

    hit = is_hit(atk_correct, def_correct, match.atk_dir, match.def_dir)
    if hit:
        match.hit_streak += 1
        # No direction chosen by the attacker means nothing is consumed
        if match.atk_dir:
            for role in ('attacker', 'defender'):
                if match.atk_dir in match.remaining_dirs[role]:
                    match.remaining_dirs[role].remove(match.atk_dir)
    else:
        match.hit_streak = 0
        match.swap_roles()
        match.reset_direction_pools()

    exhausted = not match.remaining_dirs['attacker'] or not match.remaining_dirs['defender']
    if exhausted:
        match.swap_roles()
        match.reset_direction_pools()
        match.hit_streak = 0

    return RoundOutcome(
        hit=hit,
        streak=match.hit_streak,
        attacker=RoleResult(attacker, match.names.get(attacker), atk_correct, match.atk_dir),
        defender=RoleResult(defender, match.names.get(defender), def_correct, match.def_dir),
        remaining_dirs=match.remaining_dirs_payload(),
        exhausted=exhausted,
    )
