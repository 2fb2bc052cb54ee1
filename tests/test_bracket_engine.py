"""
Tests for bracket creation, advancement and tie resolution.
"""
import pytest

from clubscore.models import Match, MatchResult, TournamentStatus
from clubscore.models.match import TBD
from clubscore.engine.bracket_engine import BracketEngine
from clubscore.engine.completion import MatchCompletionDecider, describe_result
from clubscore.engine.errors import DeliveryValidationError, PreconditionError


class TestCreateTournament:
    def test_bracket_shape(self, knockout):
        tournament = knockout(size=8)
        assert tournament.total_rounds == 3
        assert [len(tournament.round_matches(r)) for r in (1, 2, 3)] == [4, 2, 1]
        first_round = tournament.round_matches(1)
        assert [(m.team_a, m.team_b) for m in first_round] == [
            ("T1", "T2"), ("T3", "T4"), ("T5", "T6"), ("T7", "T8"),
        ]
        assert all(m.team_a == TBD and m.team_b == TBD for m in tournament.round_matches(2))
        assert tournament.status == TournamentStatus.UPCOMING

    def test_default_team_names(self, test_db, club):
        tournament = BracketEngine(test_db).create_tournament(club, "Quick Cup", 2)
        assert (tournament.matches[0].team_a, tournament.matches[0].team_b) == ("Team 1", "Team 2")

    @pytest.mark.parametrize("size", [0, 3, 6, 32])
    def test_invalid_size(self, test_db, club, size):
        with pytest.raises(DeliveryValidationError):
            BracketEngine(test_db).create_tournament(club, "Odd Cup", size)

    def test_team_count_must_match(self, test_db, club):
        with pytest.raises(DeliveryValidationError, match="Exactly 4"):
            BracketEngine(test_db).create_tournament(club, "Cup", 4, team_names=["A", "B", "C"])

    def test_sides_linked_to_members_by_name(self, test_db, club, member):
        tournament = BracketEngine(test_db).create_tournament(
            club, "Members Cup", 2, team_names=["player priya", "Guest XI"]
        )
        match = tournament.matches[0]
        assert match.player_a_id == member("Player Priya").id
        assert match.player_b_id is None


class TestAdvancement:
    def test_odd_index_winner_fills_team_b(self, test_db, knockout, play_match):
        tournament = knockout(size=8)
        second = tournament.round_matches(1)[1]  # T3 vs T4
        result = play_match(second.id, runs_a=3, runs_b=4)

        assert result.winner == "T4"
        assert result.advanced_next_match is not None
        test_db.refresh(tournament)
        semi = tournament.round_matches(2)[0]
        assert semi.id == result.advanced_next_match.id
        assert semi.team_b == "T4"
        assert semi.team_a == TBD

    def test_even_index_winner_fills_team_a(self, test_db, knockout, play_match):
        tournament = knockout(size=4)
        first = tournament.round_matches(1)[0]
        play_match(first.id, runs_a=5, runs_b=2)
        test_db.refresh(tournament)
        assert tournament.round_matches(2)[0].team_a == "T1"

    def test_final_completes_tournament(self, test_db, knockout, play_match):
        tournament = knockout(size=2)
        result = play_match(tournament.matches[0].id, runs_a=1, runs_b=2)
        assert result.new_tournament_status == TournamentStatus.COMPLETED
        assert result.advanced_next_match is None
        test_db.refresh(tournament)
        assert tournament.status == TournamentStatus.COMPLETED

    def test_winner_link_moves_with_them(self, test_db, club, member, play_match):
        priya = member("Player Priya")
        tournament = BracketEngine(test_db).create_tournament(
            club, "Linked Cup", 4, team_names=["Player Priya", "T2", "T3", "T4"],
            overs=5, players_per_side=2,
        )
        play_match(tournament.round_matches(1)[0].id, runs_a=6, runs_b=1)
        test_db.refresh(tournament)
        final = tournament.round_matches(2)[0]
        assert final.team_a == "Player Priya"
        assert final.player_a_id == priya.id

    def test_full_bracket_to_champion(self, test_db, knockout, play_match):
        tournament = knockout(size=4)
        play_match(tournament.round_matches(1)[0].id, runs_a=3, runs_b=1)  # T1
        play_match(tournament.round_matches(1)[1].id, runs_a=1, runs_b=3)  # T4
        test_db.refresh(tournament)
        final = tournament.round_matches(2)[0]
        assert (final.team_a, final.team_b) == ("T1", "T4")
        result = play_match(final.id, runs_a=2, runs_b=0)
        assert result.winner == "T1"
        assert result.new_tournament_status == TournamentStatus.COMPLETED
        assert describe_result(test_db.get(Match, final.id)) == "T1 won by 2 runs"


class TestTies:
    def test_tie_does_not_advance(self, test_db, knockout, play_match):
        tournament = knockout(size=4)
        first = tournament.round_matches(1)[0]
        result = play_match(first.id, runs_a=3, runs_b=3)
        assert result.result == MatchResult.TIE
        assert result.advanced_next_match is None
        test_db.refresh(tournament)
        assert tournament.round_matches(2)[0].team_a == TBD
        assert describe_result(test_db.get(Match, first.id)) == "Match tied"

    def test_resolve_tie_advances_chosen_side(self, test_db, knockout, play_match):
        tournament = knockout(size=4)
        first = tournament.round_matches(1)[0]
        play_match(first.id, runs_a=3, runs_b=3)

        next_match = BracketEngine(test_db).resolve_tie(first.id, "B")
        assert next_match.team_a == "T2"
        assert test_db.get(Match, first.id).winner == "T2"

    def test_resolve_tie_only_once(self, test_db, knockout, play_match):
        tournament = knockout(size=4)
        first = tournament.round_matches(1)[0]
        play_match(first.id, runs_a=3, runs_b=3)
        BracketEngine(test_db).resolve_tie(first.id, "A")
        with pytest.raises(PreconditionError, match="already resolved"):
            BracketEngine(test_db).resolve_tie(first.id, "B")

    def test_resolve_requires_a_tie(self, test_db, knockout, play_match):
        tournament = knockout(size=2)
        play_match(tournament.matches[0].id, runs_a=1, runs_b=2)
        with pytest.raises(PreconditionError, match="Only a tied match"):
            BracketEngine(test_db).resolve_tie(tournament.matches[0].id, "A")


class TestDecider:
    def test_final_scores_follow_batting_side(self, test_db, knockout, engine):
        from clubscore.engine.scoring_engine import LineupPlayer
        tournament = knockout(size=2)
        match = tournament.matches[0]
        # Side B bats first
        engine.start_innings(match.id, "B", [LineupPlayer("B1"), LineupPlayer("B2")], LineupPlayer("A-Bowler"))
        for _ in range(4):
            engine.record_delivery(match.id, "B1", "A-Bowler", runs_scored=1)
        engine.record_delivery(match.id, "B1", "A-Bowler", is_wicket=True, dismissal_type="BOWLED")
        engine.start_innings(match.id, "A", [LineupPlayer("A1"), LineupPlayer("A2")], LineupPlayer("B-Bowler"))
        result = engine.record_delivery(match.id, "A1", "B-Bowler", is_wicket=True, dismissal_type="LBW")

        assert result.winner == "T2"
        assert result.result == MatchResult.B_WON
        test_db.refresh(match)
        assert (match.score_a, match.score_b) == (0, 4)
        assert describe_result(match) == "T2 won by 4 runs"

    def test_complete_requires_finished_second_innings(self, test_db, knockout, engine):
        from clubscore.engine.scoring_engine import LineupPlayer
        tournament = knockout(size=2)
        match = tournament.matches[0]
        first = engine.start_innings(match.id, "A", [LineupPlayer("A1"), LineupPlayer("A2")], LineupPlayer("X"))
        with pytest.raises(PreconditionError):
            MatchCompletionDecider(test_db).complete(match, first, first)
