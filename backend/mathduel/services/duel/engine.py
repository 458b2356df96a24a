import logging
import math
import random
import re
import threading
from typing import Optional

from mathduel.errors import PreconditionFailed
from mathduel.models import DIRECTIONS, Match
from .problems import generate_problem, tier_max
from .scoring import RoundOutcome, score_current_round

_INT_PREFIX = re.compile(r'\s*([+-]?\d+)')


def parse_answer(value) -> Optional[int]:
    """Read a submitted answer as an integer, tolerating trailing junk ('12abc' -> 12)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    m = _INT_PREFIX.match(value)
    return int(m.group(1)) if m else None


class RoundSettings:
    def __init__(self, round_duration=15, tick_interval=1.0, cooldown=2.0, win_streak=3):
        self.round_duration = round_duration
        self.tick_interval = tick_interval
        self.cooldown = cooldown
        self.win_streak = win_streak

    @classmethod
    def from_config(cls, config):
        return cls(
            round_duration=int(config.get('ROUND_DURATION_SEC', 15)),
            tick_interval=float(config.get('TICK_INTERVAL_SEC', 1)),
            cooldown=float(config.get('ROUND_COOLDOWN_SEC', 2)),
            win_streak=int(config.get('WIN_STREAK', 3)),
        )


class RoundEngine:
    """Drives the round lifecycle of every live match.

    Idle -> Active on start_round, Active -> Resolving on timeout or once both
    answers and both directions are in, then either Over (streak reached the
    win threshold) or back to Active after a short cool-down.

    All public methods take the engine lock; the socket handlers and the
    timer callbacks share it so every event runs to completion on its own.
    """

    def __init__(self, registry, leaderboard, channel, scheduler, settings=None, logger=None, rng=None):
        self.registry = registry
        self.leaderboard = leaderboard
        self.channel = channel
        self.scheduler = scheduler
        self.settings = settings or RoundSettings()
        self.logger = logger or logging.getLogger(__name__)
        self.rng = rng or random.Random()
        self.lock = threading.RLock()

    # ---- Round lifecycle ----

    def start_round(self, code: str) -> bool:
        with self.lock:
            match = self.registry.get(code)
            if match is None or len(match.players) < 2:
                return False
            if match.round_active:
                return False
            self._cancel(match, 'next_round')
            max_operand = tier_max(match.hit_streak)
            problem = generate_problem(max_operand, self.rng)
            match.begin_round(problem.question, problem.answer, self.settings.round_duration)
            match.timer = self.scheduler.call_every(
                self.settings.tick_interval, self._tick, match.code, name=f'tick:{match.code}'
            )
            self.logger.info(
                f"[round-start] code={match.code} round={match.round_number} max={max_operand} "
                f"attacker={match.attacker_id} streak={match.hit_streak}"
            )
            self.channel.broadcast(match.code, 'roundStart', {
                'attacker': match.attacker_id,
                'defender': match.defender_id,
                'question': problem.question,
                'time': self.settings.round_duration,
                'remainingDirs': match.remaining_dirs_payload(),
            })
            return True

    def _tick(self, task, code: str) -> None:
        with self.lock:
            match = self.registry.get(code)
            if match is None or not match.round_active or match.timer is not task:
                task.cancel()
                return
            match.time_remaining -= 1
            self.channel.broadcast(code, 'tick', {'secondsRemaining': match.time_remaining})
            if match.time_remaining <= 0:
                self.logger.info(f"[round-timeout] code={code} round={match.round_number}")
                self.resolve_round(code)

    def submit_answer(self, code: str, player_id: str, value) -> bool:
        with self.lock:
            match = self._active_match(code)
            if player_id not in match.players:
                raise PreconditionFailed('Not a player in this game')
            answer = parse_answer(value)
            if answer is None:
                self.logger.debug(f"[answer-ignored] code={code} sid={player_id} value={value!r}")
                return False
            match.answers[player_id] = answer
            self.check_early_resolve(code)
            return True

    def submit_direction(self, code: str, player_id: str, direction) -> bool:
        with self.lock:
            match = self._active_match(code)
            if direction not in DIRECTIONS:
                raise PreconditionFailed('Invalid direction', notify=True)
            role = match.role_of(player_id)
            if role is None:
                raise PreconditionFailed('Not a player in this game')
            if direction not in match.remaining_dirs[role]:
                raise PreconditionFailed('Direction already used', notify=True)
            if role == 'attacker':
                match.atk_dir = direction
            else:
                match.def_dir = direction
            self.check_early_resolve(code)
            return True

    def check_early_resolve(self, code: str) -> bool:
        with self.lock:
            match = self.registry.get(code)
            if match is None or not match.round_active:
                return False
            both_answered = match.attacker_id in match.answers and match.defender_id in match.answers
            both_chose = match.atk_dir is not None and match.def_dir is not None
            if both_answered and both_chose:
                self.logger.info(f"[round-early] code={code} round={match.round_number}")
                self.resolve_round(code)
                return True
            return False

    def resolve_round(self, code: str) -> Optional[RoundOutcome]:
        with self.lock:
            match = self.registry.get(code)
            if match is None or not match.round_active:
                return None
            self._cancel(match, 'timer')
            match.round_active = False
            winner_id = match.attacker_id

            outcome = score_current_round(match)
            self.logger.info(
                f"[round-result] code={code} round={match.round_number} hit={outcome.hit} "
                f"streak={outcome.streak} atk_correct={outcome.attacker.correct} "
                f"def_correct={outcome.defender.correct} exhausted={outcome.exhausted}"
            )
            self.channel.broadcast(code, 'roundResult', outcome.to_dict())

            if match.hit_streak >= self.settings.win_streak:
                self._finish(match, winner_id)
                return outcome

            match.next_round = self.scheduler.call_later(
                self.settings.cooldown, self._next_round, code, name=f'next:{code}'
            )
            return outcome

    def _next_round(self, task, code: str) -> None:
        with self.lock:
            match = self.registry.get(code)
            if match is None or match.next_round is not task:
                return
            match.next_round = None
            self.start_round(code)

    def _finish(self, match: Match, winner_id: str) -> None:
        winner_name = match.names.get(winner_id)
        self.channel.broadcast(match.code, 'gameOver', {'winner': winner_id, 'winnerName': winner_name})
        try:
            if winner_name:
                wins = self.leaderboard.increment(winner_name)
                self.logger.info(f"[game-over] code={match.code} winner={winner_name} wins={wins}")
            else:
                self.logger.info(f"[game-over] code={match.code} winner={winner_id} (unnamed, not ranked)")
        except OSError:
            self.logger.exception(f"[game-over] code={match.code} could not save win for {winner_name}")
        finally:
            self._teardown(match)

    # ---- Disconnects ----

    def handle_disconnect(self, player_id: str):
        with self.lock:
            deleted = self.registry.disconnect(player_id)
            for match in deleted:
                self.logger.info(f"[disconnect] code={match.code} sid={player_id} round_active={match.round_active}")
                self.channel.leave(player_id, match.code)
                self.channel.broadcast(match.code, 'playerDisconnected', {})
                match.round_active = False
                self._teardown(match)
            return deleted

    # ---- Helpers ----

    def _active_match(self, code: str) -> Match:
        match = self.registry.get(code)
        if match is None or not match.round_active:
            raise PreconditionFailed('No active round')
        return match

    def _cancel(self, match: Match, attr: str) -> None:
        task = getattr(match, attr)
        if task is not None:
            task.cancel()
            setattr(match, attr, None)

    def _teardown(self, match: Match) -> None:
        self._cancel(match, 'timer')
        self._cancel(match, 'next_round')
        self.registry.delete(match.code)
        self.channel.close(match.code)
