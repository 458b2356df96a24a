import random
from typing import NamedTuple


class Problem(NamedTuple):
    question: str
    answer: int


def tier_max(hit_streak: int) -> int:
    """Operand ceiling for the next round given the current hit streak."""
    if hit_streak <= 1:
        return 30
    if hit_streak == 2:
        return 50
    return 100


def generate_problem(max_operand: int, rng=random) -> Problem:
    """Build an addition or subtraction problem with operands in [0, max_operand].

    Subtraction operands are ordered so the answer is never negative.
    """
    if max_operand < 0:
        raise ValueError(f'max_operand must be non-negative, got {max_operand}')
    op = rng.choice(('add', 'sub'))
    a = rng.randint(0, max_operand)
    b = rng.randint(0, max_operand)
    if op == 'sub':
        if b > a:
            a, b = b, a
        return Problem(f'{a} - {b}', a - b)
    return Problem(f'{a} + {b}', a + b)
