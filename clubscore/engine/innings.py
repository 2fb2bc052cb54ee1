"""
Innings totals, the innings completion test and the match phase machine
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from clubscore.models.match import Match, Innings, MatchPhase
from clubscore.engine.deliveries import ClassifiedDelivery
from clubscore.engine.errors import PreconditionError
from clubscore.engine.overs import overs_from_legal_balls, BALLS_PER_OVER

logger = logging.getLogger(__name__)


class CompletionReason(enum.Enum):
    ALL_OUT = "ALL_OUT"
    OVERS_COMPLETE = "OVERS_COMPLETE"
    TARGET_CHASED = "TARGET_CHASED"


@dataclass
class InningsLimits:
    """Format limits for one match"""
    max_overs: int = 20
    max_wickets: int = 10

    @classmethod
    def for_match(cls, match: Match) -> "InningsLimits":
        return cls(max_overs=match.max_overs, max_wickets=match.max_wickets)

    @property
    def max_legal_balls(self) -> int:
        return self.max_overs * BALLS_PER_OVER


# Allowed phase moves; anything else is a precondition failure
PHASE_TRANSITIONS = {
    MatchPhase.NOT_STARTED: {MatchPhase.INNINGS_1_ACTIVE},
    MatchPhase.INNINGS_1_ACTIVE: {MatchPhase.INNINGS_BREAK},
    MatchPhase.INNINGS_BREAK: {MatchPhase.INNINGS_2_ACTIVE},
    MatchPhase.INNINGS_2_ACTIVE: {MatchPhase.COMPLETE},
    MatchPhase.COMPLETE: set(),
}

ACTIVE_PHASES = {MatchPhase.INNINGS_1_ACTIVE, MatchPhase.INNINGS_2_ACTIVE}


def transition(match: Match, new_phase: MatchPhase) -> None:
    if new_phase not in PHASE_TRANSITIONS[match.phase]:
        raise PreconditionError(
            f"Match {match.id} cannot move from {match.phase.value} to {new_phase.value}"
        )
    logger.debug("Match %s phase %s -> %s", match.id, match.phase.value, new_phase.value)
    match.phase = new_phase


class InningsAggregate:
    """
    Innings-level totals. All mutation of an innings row goes through here.
    """

    @staticmethod
    def apply_delivery(innings: Innings, delivery: ClassifiedDelivery) -> Innings:
        innings.total_runs += delivery.total_runs
        if delivery.counts_as_wicket:
            innings.total_wickets += 1
        if delivery.extra_type is not None:
            innings.extras += delivery.extra_runs
        if delivery.is_legal:
            innings.legal_balls += 1
        innings.total_overs = overs_from_legal_balls(innings.legal_balls)
        return innings

    @staticmethod
    def completion_reason(
        innings: Innings,
        limits: InningsLimits,
        first_innings_total: Optional[int] = None,
    ) -> Optional[CompletionReason]:
        """
        Which termination condition (if any) holds after the latest delivery.
        The target can only be chased in the second innings.
        """
        if innings.total_wickets >= limits.max_wickets:
            return CompletionReason.ALL_OUT
        if innings.legal_balls >= limits.max_legal_balls:
            return CompletionReason.OVERS_COMPLETE
        if (
            innings.innings_number == 2
            and first_innings_total is not None
            and innings.total_runs > first_innings_total
        ):
            return CompletionReason.TARGET_CHASED
        return None

    @classmethod
    def is_complete(
        cls,
        innings: Innings,
        limits: InningsLimits,
        first_innings_total: Optional[int] = None,
    ) -> bool:
        return cls.completion_reason(innings, limits, first_innings_total) is not None

    @staticmethod
    def close(match: Match, innings: Innings) -> None:
        """Mark the innings complete and move the match out of its active phase"""
        innings.is_complete = True
        match.active_innings_id = None
        if innings.innings_number == 1:
            transition(match, MatchPhase.INNINGS_BREAK)
        logger.info(
            "Innings %s of match %s complete: %s (%s ov)",
            innings.innings_number, match.id, innings.score_display, innings.total_overs,
        )
