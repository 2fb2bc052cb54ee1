"""
Tests for batting/bowling ledgers and innings totals.
"""
import pytest

from clubscore.models.match import Innings, BattingEntry, BowlingEntry, DismissalType, Match, MatchPhase
from clubscore.engine.deliveries import classify_delivery
from clubscore.engine.errors import PreconditionError
from clubscore.engine.innings import InningsAggregate, InningsLimits, CompletionReason, transition
from clubscore.engine.ledgers import BattingLedger, BowlingLedger, strike_rate


def new_batter(name="Batter"):
    return BattingEntry(
        player_name=name, batting_order=1, runs=0, balls_faced=0,
        fours=0, sixes=0, strike_rate=0.0, is_out=False,
    )


def new_bowler(name="Bowler"):
    return BowlingEntry(
        player_name=name, bowling_order=1, overs_bowled=0.0, maidens=0,
        runs_conceded=0, wickets=0, economy=0.0, extras=0, no_balls=0, wides=0,
    )


def new_innings(number=1):
    return Innings(
        innings_number=number, batting_team_name="Lions", bowling_team_name="Tigers",
        total_runs=0, total_wickets=0, total_overs=0.0, legal_balls=0, extras=0, is_complete=False,
    )


class TestBattingLedger:
    def test_strike_rate(self):
        assert strike_rate(0, 0) == 0.0
        assert strike_rate(50, 40) == 125.0
        assert strike_rate(10, 3) == 333.33

    def test_runs_balls_and_boundaries(self):
        entry = new_batter()
        for runs in (4, 6, 1, 0):
            BattingLedger.apply_delivery(entry, classify_delivery("Batter", "Bowler", runs_scored=runs))
        assert entry.runs == 11
        assert entry.balls_faced == 4
        assert entry.fours == 1
        assert entry.sixes == 1
        assert entry.strike_rate == 275.0

    def test_wide_leaves_batter_untouched(self):
        entry = new_batter()
        BattingLedger.apply_delivery(entry, classify_delivery("Batter", "Bowler", extra_type="WIDE", extra_runs=2))
        assert entry.runs == 0
        assert entry.balls_faced == 0

    def test_leg_bye_counts_ball_not_runs(self):
        entry = new_batter()
        BattingLedger.apply_delivery(
            entry, classify_delivery("Batter", "Bowler", runs_scored=1, extra_type="LEG_BYE", extra_runs=1)
        )
        assert entry.runs == 0
        assert entry.balls_faced == 1

    def test_run_out_has_no_bowler_credit(self):
        entry = new_batter()
        BattingLedger.apply_delivery(
            entry,
            classify_delivery("Batter", "Bowler", is_wicket=True, dismissal_type="RUN_OUT", fielder_name="Jonty"),
        )
        assert entry.is_out
        assert entry.dismissal_type == DismissalType.RUN_OUT
        assert entry.bowler_name is None
        assert entry.fielder_name == "Jonty"

    def test_caught_credits_bowler(self):
        entry = new_batter()
        BattingLedger.apply_delivery(
            entry,
            classify_delivery("Batter", "Bowler", is_wicket=True, dismissal_type="CAUGHT", fielder_name="Slip"),
        )
        assert entry.bowler_name == "Bowler"
        assert entry.fielder_name == "Slip"

    def test_retired_is_not_out(self):
        entry = new_batter()
        BattingLedger.apply_delivery(
            entry, classify_delivery("Batter", "Bowler", is_wicket=True, dismissal_type="RETIRED")
        )
        assert not entry.is_out

    def test_create_entry_is_idempotent_and_ordered(self, test_db):
        innings = new_innings()
        ledger = BattingLedger(test_db)
        first = ledger.create_entry(innings, "Opener One")
        second = ledger.create_entry(innings, "Opener Two", player_id=7)
        again = ledger.create_entry(innings, "Opener One")
        assert again is first
        assert [e.batting_order for e in innings.batting_entries] == [1, 2]
        assert second.player_id == 7


class TestBowlingLedger:
    def test_over_rolls_after_six_legal_balls(self):
        entry = new_bowler()
        for _ in range(6):
            BowlingLedger.apply_delivery(entry, classify_delivery("Batter", "Bowler", runs_scored=1))
        assert entry.overs_bowled == 1.0
        assert entry.runs_conceded == 6
        assert entry.economy == 6.0

    def test_wide_charged_without_a_legal_ball(self):
        entry = new_bowler()
        BowlingLedger.apply_delivery(entry, classify_delivery("Batter", "Bowler", extra_type="WIDE", extra_runs=2))
        assert entry.overs_bowled == 0.0
        assert entry.runs_conceded == 2
        assert entry.wides == 1
        assert entry.extras == 2

    def test_no_ball_counts(self):
        entry = new_bowler()
        BowlingLedger.apply_delivery(
            entry, classify_delivery("Batter", "Bowler", runs_scored=2, extra_type="NO_BALL", extra_runs=1)
        )
        assert entry.no_balls == 1
        assert entry.runs_conceded == 3
        assert entry.overs_bowled == 0.0

    def test_byes_not_charged(self):
        entry = new_bowler()
        BowlingLedger.apply_delivery(entry, classify_delivery("Batter", "Bowler", extra_type="BYE", extra_runs=4))
        assert entry.runs_conceded == 0
        assert entry.overs_bowled == 0.1
        assert entry.extras == 4

    def test_run_out_not_a_bowler_wicket(self):
        entry = new_bowler()
        BowlingLedger.apply_delivery(
            entry, classify_delivery("Batter", "Bowler", is_wicket=True, dismissal_type="RUN_OUT")
        )
        assert entry.wickets == 0

    def test_economy_uses_true_overs(self):
        entry = new_bowler()
        for _ in range(20):
            BowlingLedger.apply_delivery(entry, classify_delivery("Batter", "Bowler", runs_scored=1))
        assert entry.overs_bowled == 3.2
        assert entry.economy == 6.0


class TestInningsAggregate:
    def test_totals(self):
        innings = new_innings()
        deliveries = [
            classify_delivery("B", "W", runs_scored=4),
            classify_delivery("B", "W", extra_type="WIDE", extra_runs=1),
            classify_delivery("B", "W", runs_scored=1, extra_type="LEG_BYE", extra_runs=1),
            classify_delivery("B", "W", is_wicket=True, dismissal_type="BOWLED"),
            classify_delivery("B", "W", is_wicket=True, dismissal_type="RETIRED"),
        ]
        for d in deliveries:
            InningsAggregate.apply_delivery(innings, d)
        assert innings.total_runs == 6
        assert innings.extras == 2
        assert innings.total_wickets == 1
        assert innings.legal_balls == 4
        assert innings.total_overs == 0.4

    def test_all_out(self):
        innings = new_innings()
        innings.total_wickets = 10
        assert InningsAggregate.completion_reason(innings, InningsLimits(20, 10)) == CompletionReason.ALL_OUT

    def test_overs_complete(self):
        innings = new_innings()
        innings.legal_balls = 120
        assert InningsAggregate.completion_reason(innings, InningsLimits(20, 10)) == CompletionReason.OVERS_COMPLETE

    def test_target_only_in_second_innings(self):
        first = new_innings(1)
        first.total_runs = 200
        assert InningsAggregate.completion_reason(first, InningsLimits(), 150) is None

        second = new_innings(2)
        second.total_runs = 150
        assert InningsAggregate.completion_reason(second, InningsLimits(), 150) is None
        second.total_runs = 151
        assert InningsAggregate.completion_reason(second, InningsLimits(), 150) == CompletionReason.TARGET_CHASED

    def test_level_scores_do_not_end_innings(self):
        second = new_innings(2)
        second.total_runs = 150
        assert not InningsAggregate.is_complete(second, InningsLimits(), 150)


class TestPhaseMachine:
    def test_legal_path(self):
        match = Match(team_a="A", team_b="B", phase=MatchPhase.NOT_STARTED)
        for phase in (
            MatchPhase.INNINGS_1_ACTIVE,
            MatchPhase.INNINGS_BREAK,
            MatchPhase.INNINGS_2_ACTIVE,
            MatchPhase.COMPLETE,
        ):
            transition(match, phase)
        assert match.phase == MatchPhase.COMPLETE

    def test_cannot_skip_the_break(self):
        match = Match(team_a="A", team_b="B", phase=MatchPhase.INNINGS_1_ACTIVE)
        with pytest.raises(PreconditionError):
            transition(match, MatchPhase.INNINGS_2_ACTIVE)

    def test_complete_is_terminal(self):
        match = Match(team_a="A", team_b="B", phase=MatchPhase.COMPLETE)
        with pytest.raises(PreconditionError):
            transition(match, MatchPhase.INNINGS_1_ACTIVE)
