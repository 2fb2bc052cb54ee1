"""
Overs arithmetic.

Cricket writes overs as "over.ball": the integer part is completed overs and
the single decimal digit is balls bowled in the current over (0-5). 20 legal
balls is 3.2, not 3.33. Every increment goes through a legal-ball count.
"""
import math

BALLS_PER_OVER = 6


def overs_from_legal_balls(legal_balls: int) -> float:
    """Legal-ball count to over.ball notation, e.g. 20 -> 3.2"""
    if legal_balls < 0:
        raise ValueError(f"Legal ball count cannot be negative: {legal_balls}")
    completed, in_over = divmod(legal_balls, BALLS_PER_OVER)
    return round(completed + in_over / 10, 1)


def legal_balls_from_overs(overs: float) -> int:
    """Over.ball notation back to a legal-ball count, e.g. 19.5 -> 119"""
    if overs is None:
        return 0
    if overs < 0:
        raise ValueError(f"Overs cannot be negative: {overs}")
    completed = math.floor(overs)
    # round() absorbs float noise such as 0.4999999
    in_over = round((overs % 1) * 10)
    if in_over >= BALLS_PER_OVER:
        raise ValueError(f"Invalid overs value {overs}: ball digit must be 0-5")
    return completed * BALLS_PER_OVER + in_over


def true_overs(legal_balls: int) -> float:
    """Overs as a real number (3 overs 2 balls -> 3.333...), for rates"""
    completed, in_over = divmod(legal_balls, BALLS_PER_OVER)
    return completed + in_over / BALLS_PER_OVER


def add_legal_balls(overs: float, count: int = 1) -> float:
    """Advance an over.ball value by `count` legal balls"""
    return overs_from_legal_balls(legal_balls_from_overs(overs) + count)


def ball_position(legal_balls: int) -> tuple[int, int]:
    """
    1-based (over_number, ball_number) of the next delivery after
    `legal_balls` legal balls. A wide or no-ball keeps the same position.
    """
    completed, in_over = divmod(legal_balls, BALLS_PER_OVER)
    return completed + 1, in_over + 1


def rate_per_over(runs: int, legal_balls: int) -> float:
    """Runs per true over rounded to 2 dp (0 if no legal balls)"""
    overs = true_overs(legal_balls)
    if overs == 0:
        return 0.0
    return round(runs / overs, 2)
