"""
Tests for over.ball arithmetic.
"""
import pytest

from clubscore.engine.overs import (
    overs_from_legal_balls, legal_balls_from_overs, add_legal_balls,
    ball_position, rate_per_over, true_overs,
)


class TestOversNotation:
    """Over.ball is a display notation, not a decimal."""

    @pytest.mark.parametrize("balls,overs", [(0, 0.0), (5, 0.5), (6, 1.0), (20, 3.2), (112, 18.4), (119, 19.5), (120, 20.0)])
    def test_legal_balls_to_overs(self, balls, overs):
        assert overs_from_legal_balls(balls) == overs

    @pytest.mark.parametrize("overs,balls", [(0.0, 0), (3.2, 20), (18.4, 112), (19.5, 119), (20.0, 120)])
    def test_overs_to_legal_balls(self, overs, balls):
        assert legal_balls_from_overs(overs) == balls

    def test_round_trip_for_every_ball_of_a_t20(self):
        for balls in range(0, 121):
            assert legal_balls_from_overs(overs_from_legal_balls(balls)) == balls

    def test_sixth_ball_rolls_the_over(self):
        assert add_legal_balls(0.5) == 1.0
        assert add_legal_balls(19.5) == 20.0

    def test_increment_is_monotonic(self):
        overs = 0.0
        for _ in range(60):
            nxt = add_legal_balls(overs)
            assert nxt > overs
            overs = nxt
        assert overs == 10.0

    def test_invalid_ball_digit_rejected(self):
        with pytest.raises(ValueError):
            legal_balls_from_overs(3.6)

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            overs_from_legal_balls(-1)
        with pytest.raises(ValueError):
            legal_balls_from_overs(-0.1)


class TestBallPosition:
    def test_first_ball(self):
        assert ball_position(0) == (1, 1)

    def test_last_ball_of_first_over(self):
        assert ball_position(5) == (1, 6)

    def test_first_ball_of_second_over(self):
        assert ball_position(6) == (2, 1)


class TestRates:
    def test_true_overs(self):
        assert true_overs(20) == pytest.approx(3.3333, rel=1e-3)

    def test_rate_uses_true_overs(self):
        # 20 runs off 3.2 overs is 6.0 an over, not 20 / 3.2
        assert rate_per_over(20, 20) == 6.0

    def test_rate_with_no_balls_is_zero(self):
        assert rate_per_over(10, 0) == 0.0
