"""
Scoring Engine - the unit of work behind "start innings" and "record delivery".

Every write of one request (ball event, ledgers, innings totals, match
result, bracket, stat entries, goals) commits together or not at all.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Optional, Union
from sqlalchemy.orm import Session

from clubscore.models.user import User
from clubscore.models.match import Match, Innings, BallEvent, MatchPhase, MatchResult, TBD
from clubscore.models.tournament import SportType, TournamentStatus
from clubscore.auth import permissions
from clubscore.engine.completion import MatchCompletionDecider, CompletionOutcome
from clubscore.engine.deliveries import ClassifiedDelivery, classify_delivery
from clubscore.engine.errors import ScoringError, NotFoundError, PreconditionError, DeliveryValidationError
from clubscore.engine.innings import (
    InningsAggregate, InningsLimits, CompletionReason, ACTIVE_PHASES, transition,
)
from clubscore.engine.ledgers import BattingLedger, BowlingLedger
from clubscore.engine.overs import ball_position
from clubscore.engine.stat_sync import StatSyncEngine, StatSyncResult

logger = logging.getLogger(__name__)


class InningsLockRegistry:
    """One mutex per innings so two scorers cannot interleave deliveries"""

    def __init__(self):
        self._locks: dict[int, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, innings_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(innings_id, threading.Lock())

    def release(self, innings_id: int) -> None:
        """Forget a closed innings; late callers get a fresh lock and fail the active-innings check"""
        with self._guard:
            self._locks.pop(innings_id, None)

    def __len__(self):
        return len(self._locks)


innings_locks = InningsLockRegistry()


@dataclass
class LineupPlayer:
    name: str
    player_id: Optional[int] = None


@dataclass
class DeliveryResult:
    """Everything the caller needs after one recorded delivery"""
    ball_event: BallEvent
    innings: Innings
    innings_complete: bool = False
    completion_reason: Optional[CompletionReason] = None
    outcome: Optional[CompletionOutcome] = None
    stats: Optional[StatSyncResult] = None
    new_batter: Optional[str] = None

    @property
    def match_completed(self) -> bool:
        return self.outcome is not None

    @property
    def result(self) -> Optional[MatchResult]:
        return self.outcome.result if self.outcome else None

    @property
    def winner(self) -> Optional[str]:
        return self.outcome.winner if self.outcome else None

    @property
    def advanced_next_match(self) -> Optional[Match]:
        return self.outcome.advanced_next_match if self.outcome else None

    @property
    def new_tournament_status(self) -> Optional[TournamentStatus]:
        return self.outcome.new_tournament_status if self.outcome else None

    @property
    def stats_synced(self) -> bool:
        return self.stats is not None and self.stats.synced


class ScoringEngine:
    """
    Drives one cricket match through its innings, one delivery at a time.
    """

    def __init__(self, session: Session, locks: InningsLockRegistry = innings_locks):
        self.session = session
        self.locks = locks
        self.batting = BattingLedger(session)
        self.bowling = BowlingLedger(session)
        self.decider = MatchCompletionDecider(session)
        self.stat_sync = StatSyncEngine(session)

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def get_match(self, match_id: int) -> Match:
        match = self.session.get(Match, match_id)
        if match is None:
            raise NotFoundError("Match not found")
        return match

    def check_scorable(self, match: Match, scorer: Optional[User] = None) -> None:
        if match.completed:
            raise PreconditionError("Match is already completed")
        if match.effective_sport_type != SportType.CRICKET:
            raise PreconditionError("This is not a cricket match")
        if scorer is not None:
            self.check_permission(match, scorer)

    def check_permission(self, match: Match, scorer: User) -> None:
        permissions.require_match_scorer(self.session, scorer, match)

    def _active_innings(self, match: Match) -> Innings:
        self.session.refresh(match, with_for_update=True)
        if match.completed or match.phase not in ACTIVE_PHASES or match.active_innings_id is None:
            raise PreconditionError("No active innings. Start an innings first.")
        innings = (
            self.session.query(Innings)
            .filter_by(id=match.active_innings_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )
        if innings is None or innings.is_complete:
            raise PreconditionError("No active innings. Start an innings first.")
        return innings

    # ------------------------------------------------------------------
    # Start innings
    # ------------------------------------------------------------------

    def start_innings(
        self,
        match_id: int,
        batting_side: str,
        batting_lineup: list[LineupPlayer],
        opening_bowler: Optional[LineupPlayer] = None,
        bowling_lineup: Optional[list[LineupPlayer]] = None,
        scorer: Optional[User] = None,
    ) -> Innings:
        """
        Open the first innings, or the second once the first is complete.
        Creates the batting lineup and the bowling entries in one commit.
        """
        if batting_side not in ("A", "B"):
            raise DeliveryValidationError('battingTeam must be "A" or "B"')
        if not batting_lineup or len(batting_lineup) < 2:
            raise DeliveryValidationError("battingLineup must have at least 2 batsmen")
        names = [p.name.strip() for p in batting_lineup if p.name and p.name.strip()]
        if len(names) != len(batting_lineup) or len(set(names)) != len(names):
            raise DeliveryValidationError("battingLineup names must be present and unique")
        if not bowling_lineup and (opening_bowler is None or not opening_bowler.name.strip()):
            raise DeliveryValidationError("Opening bowler is required")

        match = self.get_match(match_id)
        self.check_scorable(match, scorer)
        if TBD in (match.team_a, match.team_b):
            raise PreconditionError("Cannot start scoring with undetermined teams")

        batting_team = match.team_a if batting_side == "A" else match.team_b
        bowling_team = match.team_b if batting_side == "A" else match.team_a

        if match.phase == MatchPhase.NOT_STARTED:
            innings_number = 1
        elif match.phase == MatchPhase.INNINGS_BREAK:
            innings_number = 2
            first = match.innings[0]
            if first.batting_team_name == batting_team:
                raise PreconditionError(f"{batting_team} already batted in the 1st innings")
        elif match.phase == MatchPhase.INNINGS_1_ACTIVE:
            raise PreconditionError("1st innings is still in progress")
        else:
            raise PreconditionError("Both innings already exist")

        try:
            innings = Innings(
                innings_number=innings_number,
                batting_team_name=batting_team,
                bowling_team_name=bowling_team,
                total_runs=0,
                total_wickets=0,
                total_overs=0.0,
                legal_balls=0,
                extras=0,
                is_complete=False,
            )
            match.innings.append(innings)
            self.session.add(innings)

            for player in batting_lineup:
                self.batting.create_entry(innings, player.name.strip(), player.player_id)
            for player in bowling_lineup or [opening_bowler]:
                self.bowling.create_entry(innings, player.name.strip(), player.player_id)

            self.session.flush()
            match.active_innings_id = innings.id
            transition(
                match,
                MatchPhase.INNINGS_1_ACTIVE if innings_number == 1 else MatchPhase.INNINGS_2_ACTIVE,
            )

            if match.tournament is not None and match.tournament.status == TournamentStatus.UPCOMING:
                match.tournament.status = TournamentStatus.IN_PROGRESS

            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception("Failed to start innings %s for match %s", innings_number, match_id)
            raise

        logger.info(
            "Innings %s started for match %s: %s batting", innings_number, match.id, batting_team
        )
        return innings

    # ------------------------------------------------------------------
    # Record delivery
    # ------------------------------------------------------------------

    def record_delivery(
        self,
        match_id: int,
        batsman_name: str,
        bowler_name: str,
        runs_scored: int = 0,
        extra_type: Union[str, None] = None,
        extra_runs: int = 0,
        is_wicket: bool = False,
        dismissal_type: Union[str, None] = None,
        fielder_name: Optional[str] = None,
        batsman_id: Optional[int] = None,
        bowler_id: Optional[int] = None,
        new_batsman_name: Optional[str] = None,
        new_batsman_id: Optional[int] = None,
        scorer: Optional[User] = None,
    ) -> DeliveryResult:
        """
        Record one ball. Validation and preconditions run before anything is
        written; after that every sub-step commits together or rolls back.
        """
        delivery = classify_delivery(
            batsman_name=batsman_name,
            bowler_name=bowler_name,
            runs_scored=runs_scored,
            extra_type=extra_type,
            extra_runs=extra_runs,
            is_wicket=is_wicket,
            dismissal_type=dismissal_type,
            fielder_name=fielder_name,
            batsman_id=batsman_id,
            bowler_id=bowler_id,
        )

        match = self.get_match(match_id)
        self.check_scorable(match, scorer)
        if match.active_innings_id is None:
            raise PreconditionError("No active innings. Start an innings first.")

        innings_id = match.active_innings_id
        with self.locks.lock_for(innings_id):
            try:
                result = self._apply(match, delivery, new_batsman_name, new_batsman_id)
                self.session.commit()
            except ScoringError:
                self.session.rollback()
                raise
            except Exception:
                self.session.rollback()
                logger.exception("Delivery for match %s rolled back", match_id)
                raise
        if result.innings_complete:
            self.locks.release(innings_id)
        return result

    def _apply(
        self,
        match: Match,
        delivery: ClassifiedDelivery,
        new_batsman_name: Optional[str],
        new_batsman_id: Optional[int],
    ) -> DeliveryResult:
        # Ball sequence is re-read under the row lock, never from an earlier snapshot
        innings = self._active_innings(match)
        limits = InningsLimits.for_match(match)
        first_innings = next((i for i in match.innings if i.innings_number == 1), None)

        batter = innings.batting_entry_for(delivery.batsman_name)
        if batter is not None and batter.is_out:
            raise PreconditionError(f"{delivery.batsman_name} is already out")

        # 1. Ball event
        over_number, ball_number = ball_position(innings.legal_balls)
        ball_event = BallEvent(
            over_number=over_number,
            ball_number=ball_number,
            batsman_name=delivery.batsman_name,
            batsman_id=delivery.batsman_id,
            bowler_name=delivery.bowler_name,
            bowler_id=delivery.bowler_id,
            runs_scored=delivery.runs_scored,
            extra_type=delivery.extra_type,
            extra_runs=delivery.extra_runs,
            is_wicket=delivery.is_wicket,
            dismissal_type=delivery.dismissal_type,
            fielder_name=delivery.fielder_name,
            commentary=delivery.commentary,
        )
        innings.ball_events.append(ball_event)
        self.session.add(ball_event)

        # 2. Batting ledger (a batter missing from the lineup is added on first ball)
        if batter is None:
            batter = self.batting.create_entry(innings, delivery.batsman_name, delivery.batsman_id)
        self.batting.apply_delivery(batter, delivery)

        # 3. Bowling ledger
        bowler = self.bowling.create_entry(innings, delivery.bowler_name, delivery.bowler_id)
        self.bowling.apply_delivery(bowler, delivery)

        # 4. Innings totals and completion
        InningsAggregate.apply_delivery(innings, delivery)
        reason = InningsAggregate.completion_reason(
            innings,
            limits,
            first_innings.total_runs if first_innings is not None and innings.innings_number == 2 else None,
        )

        result = DeliveryResult(ball_event=ball_event, innings=innings, completion_reason=reason)

        # 5. Replacement batter, only while the innings goes on
        if reason is None and delivery.counts_as_wicket and new_batsman_name and new_batsman_name.strip():
            self.batting.create_entry(innings, new_batsman_name.strip(), new_batsman_id)
            result.new_batter = new_batsman_name.strip()

        if reason is None:
            return result

        result.innings_complete = True
        InningsAggregate.close(match, innings)
        logger.debug("Innings %s of match %s closed by %s", innings.innings_number, match.id, reason.value)

        # 6. Match completion, bracket and stat sync
        if innings.innings_number == 2:
            self.session.flush()
            result.outcome = self.decider.complete(match, first_innings, innings)
            result.stats = self.stat_sync.sync_match(match)
        return result
