"""
Batting and bowling ledgers - per-player cumulative entries within an innings
"""
from typing import Optional
from sqlalchemy.orm import Session

from clubscore.models.match import Innings, BattingEntry, BowlingEntry, ExtraType
from clubscore.engine.deliveries import ClassifiedDelivery, BOWLER_CREDITED
from clubscore.engine.overs import legal_balls_from_overs, overs_from_legal_balls, rate_per_over


def strike_rate(runs: int, balls_faced: int) -> float:
    """Runs per 100 balls, 2 dp (0 if no balls faced)"""
    if balls_faced == 0:
        return 0.0
    return round(runs / balls_faced * 100, 2)


class BattingLedger:
    def __init__(self, session: Session):
        self.session = session

    def create_entry(self, innings: Innings, name: str, player_id: Optional[int] = None) -> BattingEntry:
        """Add a batter to the innings; an existing name is returned unchanged"""
        existing = innings.batting_entry_for(name)
        if existing:
            return existing

        entry = BattingEntry(
            player_name=name,
            player_id=player_id,
            batting_order=len(innings.batting_entries) + 1,
            runs=0,
            balls_faced=0,
            fours=0,
            sixes=0,
            strike_rate=0.0,
            is_out=False,
        )
        innings.batting_entries.append(entry)
        self.session.add(entry)
        return entry

    @staticmethod
    def apply_delivery(entry: BattingEntry, delivery: ClassifiedDelivery) -> BattingEntry:
        entry.runs += delivery.batter_runs
        if delivery.ball_faced:
            entry.balls_faced += 1
        if delivery.is_four:
            entry.fours += 1
        if delivery.is_six:
            entry.sixes += 1
        entry.strike_rate = strike_rate(entry.runs, entry.balls_faced)

        if delivery.counts_as_wicket:
            entry.is_out = True
            entry.dismissal_type = delivery.dismissal_type
            if delivery.dismissal_type in BOWLER_CREDITED:
                entry.bowler_name = delivery.bowler_name
                entry.bowler_id = delivery.bowler_id
            else:
                entry.bowler_name = None
                entry.bowler_id = None
            entry.fielder_name = delivery.fielder_name
        return entry


class BowlingLedger:
    def __init__(self, session: Session):
        self.session = session

    def create_entry(self, innings: Innings, name: str, player_id: Optional[int] = None) -> BowlingEntry:
        """Add a bowler to the innings; an existing name is returned unchanged"""
        existing = innings.bowling_entry_for(name)
        if existing:
            return existing

        entry = BowlingEntry(
            player_name=name,
            player_id=player_id,
            bowling_order=len(innings.bowling_entries) + 1,
            overs_bowled=0.0,
            maidens=0,
            runs_conceded=0,
            wickets=0,
            economy=0.0,
            extras=0,
            no_balls=0,
            wides=0,
        )
        innings.bowling_entries.append(entry)
        self.session.add(entry)
        return entry

    @staticmethod
    def apply_delivery(entry: BowlingEntry, delivery: ClassifiedDelivery) -> BowlingEntry:
        legal_balls = legal_balls_from_overs(entry.overs_bowled)
        if delivery.is_legal:
            legal_balls += 1
        entry.overs_bowled = overs_from_legal_balls(legal_balls)

        entry.runs_conceded += delivery.bowler_runs
        if delivery.bowler_wicket:
            entry.wickets += 1
        # Economy uses true overs (3.2 -> 3.333), not the display notation
        entry.economy = rate_per_over(entry.runs_conceded, legal_balls)

        if delivery.extra_type is not None:
            entry.extras += delivery.extra_runs
        if delivery.extra_type == ExtraType.NO_BALL:
            entry.no_balls += 1
        if delivery.extra_type == ExtraType.WIDE:
            entry.wides += 1
        return entry
