"""
Match completion - result, final scores and bracket advancement
"""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session

from clubscore.models.match import Match, Innings, MatchPhase, MatchResult
from clubscore.models.tournament import TournamentStatus
from clubscore.engine.errors import PreconditionError
from clubscore.engine.innings import transition

logger = logging.getLogger(__name__)


@dataclass
class CompletionOutcome:
    """What changed when a match finished"""
    result: MatchResult
    winner: Optional[str]
    winner_player_id: Optional[int]
    score_a: int
    score_b: int
    advanced_next_match: Optional[Match] = None
    new_tournament_status: Optional[TournamentStatus] = None


class MatchCompletionDecider:
    """
    Decides the result once the second innings closes, then moves the
    winner through the bracket.
    """

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def decide_result(match: Match, first: Innings, second: Innings) -> tuple[MatchResult, Optional[str]]:
        if second.total_runs > first.total_runs:
            winner = second.batting_team_name
        elif second.total_runs < first.total_runs:
            winner = second.bowling_team_name
        else:
            return MatchResult.TIE, None
        result = MatchResult.A_WON if winner == match.team_a else MatchResult.B_WON
        return result, winner

    @staticmethod
    def final_scores(match: Match, innings: list[Innings]) -> tuple[int, int]:
        """Each side's score is the total of the innings it batted in"""
        score_a = next((i.total_runs for i in innings if i.batting_team_name == match.team_a), 0)
        score_b = next((i.total_runs for i in innings if i.batting_team_name == match.team_b), 0)
        return score_a, score_b

    def complete(self, match: Match, first: Innings, second: Innings) -> CompletionOutcome:
        if second.innings_number != 2 or not second.is_complete:
            raise PreconditionError("A match can only be completed by a finished second innings")
        if match.completed:
            raise PreconditionError("Match is already completed")

        result, winner = self.decide_result(match, first, second)
        score_a, score_b = self.final_scores(match, [first, second])

        match.score_a = score_a
        match.score_b = score_b
        match.result = result
        match.winner = winner
        match.completed = True
        transition(match, MatchPhase.COMPLETE)

        outcome = CompletionOutcome(
            result=result,
            winner=winner,
            winner_player_id=match.player_for_side(winner) if winner else None,
            score_a=score_a,
            score_b=score_b,
        )
        logger.info(
            "Match %s completed: %s %s - %s %s (%s)",
            match.id, match.team_a, score_a, score_b, match.team_b, result.value,
        )

        if winner is not None and match.tournament is not None:
            outcome.advanced_next_match, outcome.new_tournament_status = self.advance_bracket(match, winner)
        elif result == MatchResult.TIE:
            logger.warning("Match %s tied; bracket waits for the tie to be resolved", match.id)

        return outcome

    def advance_bracket(
        self, match: Match, winner: str
    ) -> tuple[Optional[Match], Optional[TournamentStatus]]:
        """
        Write the winner into the next round, or close the tournament after
        its final round. Returns (next-round match, new tournament status).
        """
        tournament = match.tournament
        if tournament is None:
            return None, None

        total_rounds = tournament.total_rounds
        if match.round >= total_rounds:
            tournament.status = TournamentStatus.COMPLETED
            logger.info("Tournament '%s' completed; champion %s", tournament.name, winner)
            return None, TournamentStatus.COMPLETED

        round_matches = tournament.round_matches(match.round)
        index = next(i for i, m in enumerate(round_matches) if m.id == match.id)
        next_round = tournament.round_matches(match.round + 1)
        next_slot = index // 2
        if next_slot >= len(next_round):
            logger.warning(
                "Tournament %s has no round %s slot %s for match %s",
                tournament.id, match.round + 1, next_slot, match.id,
            )
            return None, None

        next_match = next_round[next_slot]
        winner_player_id = match.player_for_side(winner)
        if index % 2 == 0:
            next_match.team_a = winner
            if winner_player_id:
                next_match.player_a_id = winner_player_id
        else:
            next_match.team_b = winner
            if winner_player_id:
                next_match.player_b_id = winner_player_id

        logger.info(
            "Advanced %s from match %s to match %s (round %s)",
            winner, match.id, next_match.id, next_match.round,
        )
        return next_match, None


def describe_result(match: Match) -> Optional[str]:
    """Human-readable result line, e.g. "Lions won by 4 wickets" """
    if not match.completed or len(match.innings) < 2:
        return None
    first, second = match.innings[0], match.innings[1]
    if second.total_runs > first.total_runs:
        wickets_left = match.max_wickets - second.total_wickets
        return f"{second.batting_team_name} won by {wickets_left} wicket{'s' if wickets_left != 1 else ''}"
    if first.total_runs > second.total_runs:
        margin = first.total_runs - second.total_runs
        return f"{first.batting_team_name} won by {margin} run{'s' if margin != 1 else ''}"
    return "Match tied"
