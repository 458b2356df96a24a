import random

import pytest

from mathduel.services.duel.problems import generate_problem, tier_max


def _evaluate(question):
    a, op, b = question.split()
    return int(a) + int(b) if op == '+' else int(a) - int(b)


@pytest.mark.parametrize('ceiling', [0, 1, 5, 30, 50, 100])
def test_problems_are_consistent_and_never_negative(ceiling):
    rng = random.Random(ceiling)
    ops = set()
    for _ in range(300):
        problem = generate_problem(ceiling, rng)
        a, op, b = problem.question.split()
        ops.add(op)
        assert 0 <= int(a) <= ceiling
        assert 0 <= int(b) <= ceiling
        assert problem.answer == _evaluate(problem.question)
        assert problem.answer >= 0
    assert ops == {'+', '-'}


def test_subtraction_orders_operands():
    class ScriptedRandom:
        def choice(self, seq):
            return 'sub'

        def __init__(self):
            self._values = iter([3, 9])

        def randint(self, lo, hi):
            return next(self._values)

    problem = generate_problem(10, ScriptedRandom())
    assert problem.question == '9 - 3'
    assert problem.answer == 6


def test_negative_ceiling_rejected():
    with pytest.raises(ValueError):
        generate_problem(-1)


def test_tier_policy_steps():
    assert [tier_max(s) for s in range(6)] == [30, 30, 50, 100, 100, 100]


def test_tier_policy_is_monotonic():
    ceilings = [tier_max(s) for s in range(50)]
    assert ceilings == sorted(ceilings)
