from typing import Optional, List
from sqlalchemy import String, Integer, Float, ForeignKey, Enum, DateTime, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from clubscore.config import settings
from clubscore.database import Base
from clubscore.models.tournament import SportType

# Placeholder side name for bracket slots not yet decided
TBD = "TBD"


class MatchPhase(enum.Enum):
    NOT_STARTED = "NOT_STARTED"
    INNINGS_1_ACTIVE = "INNINGS_1_ACTIVE"
    INNINGS_BREAK = "INNINGS_BREAK"
    INNINGS_2_ACTIVE = "INNINGS_2_ACTIVE"
    COMPLETE = "COMPLETE"


class MatchResult(enum.Enum):
    A_WON = "A_WON"
    B_WON = "B_WON"
    TIE = "TIE"


class ExtraType(enum.Enum):
    WIDE = "WIDE"
    NO_BALL = "NO_BALL"
    BYE = "BYE"
    LEG_BYE = "LEG_BYE"
    PENALTY = "PENALTY"


class DismissalType(enum.Enum):
    BOWLED = "BOWLED"
    CAUGHT = "CAUGHT"
    LBW = "LBW"
    RUN_OUT = "RUN_OUT"
    STUMPED = "STUMPED"
    HIT_WICKET = "HIT_WICKET"
    RETIRED = "RETIRED"


class Match(Base):
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Bracket position (None for standalone matches)
    tournament_id: Mapped[Optional[int]] = mapped_column(ForeignKey("tournaments.id"), nullable=True)
    tournament: Mapped[Optional["Tournament"]] = relationship("Tournament", back_populates="matches")
    round: Mapped[int] = mapped_column(Integer, default=1)
    bracket_slot: Mapped[int] = mapped_column(Integer, default=0)  # creation order within the round

    # Sides
    team_a: Mapped[str] = mapped_column(String(100), default=TBD)
    team_b: Mapped[str] = mapped_column(String(100), default=TBD)
    player_a_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    player_b_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)

    # Standalone match settings (tournament matches inherit from the tournament)
    sport_type: Mapped[Optional[SportType]] = mapped_column(Enum(SportType), nullable=True)
    overs: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    players_per_side: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_by_user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)

    # State machine
    phase: Mapped[MatchPhase] = mapped_column(Enum(MatchPhase), default=MatchPhase.NOT_STARTED)
    active_innings_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Result
    completed: Mapped[bool] = mapped_column(default=False)
    score_a: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    score_b: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    result: Mapped[Optional[MatchResult]] = mapped_column(Enum(MatchResult), nullable=True)
    winner: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    innings: Mapped[List["Innings"]] = relationship(
        "Innings", back_populates="match", order_by="Innings.innings_number"
    )

    @property
    def is_standalone(self) -> bool:
        return self.tournament_id is None

    @property
    def effective_sport_type(self) -> Optional[SportType]:
        if self.is_standalone:
            return self.sport_type
        return self.tournament.sport_type if self.tournament else None

    @property
    def max_overs(self) -> int:
        source = self if self.is_standalone else self.tournament
        return (source.overs if source else None) or settings.DEFAULT_OVERS

    @property
    def max_wickets(self) -> int:
        source = self if self.is_standalone else self.tournament
        players = (source.players_per_side if source else None) or settings.DEFAULT_PLAYERS_PER_SIDE
        return players - 1

    def player_for_side(self, team_name: str) -> Optional[int]:
        if team_name == self.team_a:
            return self.player_a_id
        if team_name == self.team_b:
            return self.player_b_id
        return None

    def opponent_of(self, team_name: str) -> str:
        return self.team_b if team_name == self.team_a else self.team_a

    def __repr__(self):
        return f"<Match {self.team_a} vs {self.team_b} (round {self.round})>"


class Innings(Base):
    __tablename__ = "innings"

    id: Mapped[int] = mapped_column(primary_key=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"))
    match: Mapped["Match"] = relationship("Match", back_populates="innings")

    innings_number: Mapped[int] = mapped_column(Integer)  # 1 or 2
    batting_team_name: Mapped[str] = mapped_column(String(100))
    bowling_team_name: Mapped[str] = mapped_column(String(100))

    # Score
    total_runs: Mapped[int] = mapped_column(Integer, default=0)
    total_wickets: Mapped[int] = mapped_column(Integer, default=0)
    total_overs: Mapped[float] = mapped_column(Float, default=0.0)  # over.ball notation
    legal_balls: Mapped[int] = mapped_column(Integer, default=0)
    extras: Mapped[int] = mapped_column(Integer, default=0)

    is_complete: Mapped[bool] = mapped_column(default=False)

    batting_entries: Mapped[List["BattingEntry"]] = relationship(
        "BattingEntry", back_populates="innings", order_by="BattingEntry.batting_order"
    )
    bowling_entries: Mapped[List["BowlingEntry"]] = relationship(
        "BowlingEntry", back_populates="innings", order_by="BowlingEntry.bowling_order"
    )
    ball_events: Mapped[List["BallEvent"]] = relationship(
        "BallEvent",
        back_populates="innings",
        order_by="[BallEvent.over_number, BallEvent.ball_number, BallEvent.id]",
    )

    __table_args__ = (
        UniqueConstraint('match_id', 'innings_number', name='unique_match_innings'),
    )

    def batting_entry_for(self, name: str) -> Optional["BattingEntry"]:
        return next((b for b in self.batting_entries if b.player_name == name), None)

    def bowling_entry_for(self, name: str) -> Optional["BowlingEntry"]:
        return next((b for b in self.bowling_entries if b.player_name == name), None)

    @property
    def score_display(self) -> str:
        return f"{self.total_runs}/{self.total_wickets}"

    def __repr__(self):
        return f"<Innings {self.innings_number}: {self.total_runs}/{self.total_wickets} ({self.total_overs})>"


class BattingEntry(Base):
    __tablename__ = "batting_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    innings_id: Mapped[int] = mapped_column(ForeignKey("innings.id"))
    innings: Mapped["Innings"] = relationship("Innings", back_populates="batting_entries")

    player_name: Mapped[str] = mapped_column(String(100))
    player_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    batting_order: Mapped[int] = mapped_column(Integer)

    runs: Mapped[int] = mapped_column(Integer, default=0)
    balls_faced: Mapped[int] = mapped_column(Integer, default=0)
    fours: Mapped[int] = mapped_column(Integer, default=0)
    sixes: Mapped[int] = mapped_column(Integer, default=0)
    strike_rate: Mapped[float] = mapped_column(Float, default=0.0)

    # Dismissal
    is_out: Mapped[bool] = mapped_column(default=False)
    dismissal_type: Mapped[Optional[DismissalType]] = mapped_column(Enum(DismissalType), nullable=True)
    bowler_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bowler_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    fielder_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint('innings_id', 'player_name', name='unique_innings_batter'),
    )

    def __repr__(self):
        return f"<BattingEntry {self.player_name}: {self.runs} ({self.balls_faced})>"


class BowlingEntry(Base):
    __tablename__ = "bowling_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    innings_id: Mapped[int] = mapped_column(ForeignKey("innings.id"))
    innings: Mapped["Innings"] = relationship("Innings", back_populates="bowling_entries")

    player_name: Mapped[str] = mapped_column(String(100))
    player_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    bowling_order: Mapped[int] = mapped_column(Integer)

    overs_bowled: Mapped[float] = mapped_column(Float, default=0.0)  # over.ball notation
    maidens: Mapped[int] = mapped_column(Integer, default=0)
    runs_conceded: Mapped[int] = mapped_column(Integer, default=0)
    wickets: Mapped[int] = mapped_column(Integer, default=0)
    economy: Mapped[float] = mapped_column(Float, default=0.0)

    extras: Mapped[int] = mapped_column(Integer, default=0)
    no_balls: Mapped[int] = mapped_column(Integer, default=0)
    wides: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        UniqueConstraint('innings_id', 'player_name', name='unique_innings_bowler'),
    )

    @property
    def figures(self) -> str:
        return f"{self.wickets}/{self.runs_conceded}"

    def __repr__(self):
        return f"<BowlingEntry {self.player_name}: {self.overs_bowled}-{self.runs_conceded}-{self.wickets}>"


class BallEvent(Base):
    __tablename__ = "ball_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    innings_id: Mapped[int] = mapped_column(ForeignKey("innings.id"))
    innings: Mapped["Innings"] = relationship("Innings", back_populates="ball_events")

    over_number: Mapped[int] = mapped_column(Integer)  # 1-based
    ball_number: Mapped[int] = mapped_column(Integer)  # 1-6, repeats on wides and no-balls

    # Players involved
    batsman_name: Mapped[str] = mapped_column(String(100))
    batsman_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    bowler_name: Mapped[str] = mapped_column(String(100))
    bowler_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)

    # Outcome
    runs_scored: Mapped[int] = mapped_column(Integer, default=0)
    extra_type: Mapped[Optional[ExtraType]] = mapped_column(Enum(ExtraType), nullable=True)
    extra_runs: Mapped[int] = mapped_column(Integer, default=0)

    # Wicket
    is_wicket: Mapped[bool] = mapped_column(default=False)
    dismissal_type: Mapped[Optional[DismissalType]] = mapped_column(Enum(DismissalType), nullable=True)
    fielder_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    commentary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @property
    def is_legal(self) -> bool:
        return self.extra_type not in (ExtraType.WIDE, ExtraType.NO_BALL)

    def __repr__(self):
        return f"<Ball {self.over_number}.{self.ball_number}: {self.runs_scored} runs>"
