import pytest

from mathduel.models import DIRECTIONS, Match
from mathduel.services.duel.scoring import is_hit, score_current_round


def _match(atk_answer=None, def_answer=None, atk_dir=None, def_dir=None, correct=42):
    match = Match('ABCDE', 'p1', 'Alice')
    match.add_player('p2', 'Bob')
    match.begin_round('40 + 2', correct, 15)
    if atk_answer is not None:
        match.answers['p1'] = atk_answer
    if def_answer is not None:
        match.answers['p2'] = def_answer
    match.atk_dir = atk_dir
    match.def_dir = def_dir
    return match


@pytest.mark.parametrize('atk_correct,def_correct,atk_dir,def_dir,expected', [
    (False, False, 'up', 'up', False),
    (False, True, 'up', 'up', False),
    (False, True, 'up', 'down', False),
    (True, False, 'up', 'down', True),
    (True, False, 'up', 'up', True),
    (True, True, 'up', 'up', True),
    (True, True, 'up', 'down', False),
])
def test_hit_truth_table(atk_correct, def_correct, atk_dir, def_dir, expected):
    assert is_hit(atk_correct, def_correct, atk_dir, def_dir) is expected


def test_both_correct_same_direction_consumes_direction():
    match = _match(42, 42, 'up', 'up')
    outcome = score_current_round(match)
    assert outcome.hit is True
    assert outcome.streak == 1
    assert match.attacker_index == 0
    assert match.remaining_dirs['attacker'] == ['down', 'left', 'right']
    assert match.remaining_dirs['defender'] == ['down', 'left', 'right']
    assert outcome.attacker.to_dict() == {'name': 'Alice', 'correct': True, 'direction': 'up'}
    assert outcome.defender.to_dict() == {'name': 'Bob', 'correct': True, 'direction': 'up'}


def test_attacker_correct_defender_wrong_is_hit_keyed_on_attacker_direction():
    match = _match(42, 41, 'left', 'right')
    outcome = score_current_round(match)
    assert outcome.hit is True
    assert 'left' not in match.remaining_dirs['attacker']
    assert 'left' not in match.remaining_dirs['defender']
    assert 'right' in match.remaining_dirs['defender']


def test_attacker_wrong_is_miss_and_swaps_roles():
    match = _match(7, 42, 'up', 'up')
    match.hit_streak = 2
    match.remaining_dirs['attacker'].remove('down')
    outcome = score_current_round(match)
    assert outcome.hit is False
    assert match.hit_streak == 0
    assert match.attacker_index == 1
    assert match.attacker_id == 'p2'
    assert match.remaining_dirs == {'attacker': list(DIRECTIONS), 'defender': list(DIRECTIONS)}


def test_missing_answers_count_as_incorrect():
    match = _match(None, 42, None, 'up')
    outcome = score_current_round(match)
    assert outcome.attacker.correct is False
    assert outcome.hit is False


def test_hit_without_attacker_direction_consumes_nothing():
    match = _match(42, None, None, 'down')
    outcome = score_current_round(match)
    assert outcome.hit is True
    assert match.remaining_dirs == {'attacker': list(DIRECTIONS), 'defender': list(DIRECTIONS)}


def test_both_correct_and_no_directions_is_hit():
    match = _match(42, 42, None, None)
    assert score_current_round(match).hit is True


def test_pool_exhaustion_resets_streak_and_swaps():
    match = _match(42, 42, 'up', 'up')
    match.hit_streak = 1
    match.remaining_dirs = {'attacker': ['up'], 'defender': ['up', 'down']}
    outcome = score_current_round(match)
    assert outcome.hit is True
    assert outcome.exhausted is True
    assert outcome.streak == 0
    assert match.hit_streak == 0
    assert match.attacker_index == 1
    assert match.remaining_dirs == {'attacker': list(DIRECTIONS), 'defender': list(DIRECTIONS)}


def test_result_payload_shape():
    match = _match(42, 1, 'right', None)
    payload = score_current_round(match).to_dict()
    assert set(payload) == {'hit', 'streak', 'attacker', 'defender', 'remainingDirs'}
    assert payload['defender'] == {'name': 'Bob', 'correct': False, 'direction': None}
