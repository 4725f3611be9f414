import math
import random

from tactics.models import ROLL_COMBAT


def roll_die(sides=100):
    """One fair die, 1..sides inclusive."""
    return random.randint(1, sides)


def combat_result(roll_a, roll_b):
    """Average of the two combat dice, halves rounded up (true hit)."""
    return math.floor((roll_a + roll_b) / 2 + 0.5)


def resolve_roll(roll_type):
    """Roll the dice for a map roll.

    Returns (roll_a, roll_b, result). REGULAR rolls one d100 and roll_b is
    None; COMBAT rolls two and reports their rounded mean.
    """
    roll_a = roll_die(100)
    if roll_type == ROLL_COMBAT:
        roll_b = roll_die(100)
        return roll_a, roll_b, combat_result(roll_a, roll_b)
    return roll_a, None, roll_a
