"""
Pydantic schemas for API request/response models.
Field names are snake_case in Python and camelCase on the wire.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from clubscore.models.match import MatchPhase, MatchResult, ExtraType, DismissalType
from clubscore.models.tournament import SportType, TournamentStatus
from clubscore.models.profile import StatSource


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# Scoring requests
class LineupPlayer(CamelModel):
    name: str
    player_id: Optional[int] = None


class StartInningsRequest(CamelModel):
    batting_team: str  # "A" or "B"
    batting_lineup: List[LineupPlayer]
    bowler: Optional[LineupPlayer] = None
    bowling_lineup: Optional[List[LineupPlayer]] = None


class DeliveryRequest(CamelModel):
    # Names are checked by the engine so a missing one is a 400, not a 422
    batsman_name: Optional[str] = None
    batsman_id: Optional[int] = None
    bowler_name: Optional[str] = None
    bowler_id: Optional[int] = None
    runs_scored: int = 0
    extra_type: Optional[str] = None
    extra_runs: int = 0
    is_wicket: bool = False
    dismissal_type: Optional[str] = None
    fielder_name: Optional[str] = None
    new_batsman_name: Optional[str] = None
    new_batsman_id: Optional[int] = None


class ResolveTieRequest(CamelModel):
    winner: str  # "A" or "B"


class StandaloneMatchCreate(CamelModel):
    sport_type: str = "CRICKET"
    team_a: Optional[str] = None
    team_b: Optional[str] = None
    overs: Optional[int] = None
    players_per_side: Optional[int] = None


# Scoring responses
class BallEventResponse(CamelModel):
    id: int
    over_number: int
    ball_number: int
    batsman_name: str
    bowler_name: str
    runs_scored: int
    extra_type: Optional[ExtraType] = None
    extra_runs: int
    is_wicket: bool
    dismissal_type: Optional[DismissalType] = None
    fielder_name: Optional[str] = None
    commentary: Optional[str] = None


class InningsTotals(CamelModel):
    total_runs: int
    total_wickets: int
    total_overs: float
    extras: int
    is_complete: bool


class MatchBrief(CamelModel):
    id: int
    team_a: str
    team_b: str
    round: int
    player_a_id: Optional[int] = None
    player_b_id: Optional[int] = None


class DeliveryResponse(CamelModel):
    success: bool = True
    ball_event: BallEventResponse
    innings: InningsTotals
    innings_complete: bool
    completion_reason: Optional[str] = None
    match_completed: bool
    result: Optional[MatchResult] = None
    winner: Optional[str] = None
    advanced_next_match: Optional[MatchBrief] = None
    new_tournament_status: Optional[TournamentStatus] = None
    stats_synced: bool = False


class BattingEntryResponse(CamelModel):
    player_name: str
    player_id: Optional[int] = None
    batting_order: int
    runs: int
    balls_faced: int
    fours: int
    sixes: int
    strike_rate: float
    is_out: bool
    dismissal_type: Optional[DismissalType] = None
    bowler_name: Optional[str] = None
    fielder_name: Optional[str] = None


class BowlingEntryResponse(CamelModel):
    player_name: str
    player_id: Optional[int] = None
    bowling_order: int
    overs_bowled: float
    maidens: int
    runs_conceded: int
    wickets: int
    economy: float
    extras: int
    no_balls: int
    wides: int


class InningsResponse(InningsTotals):
    id: int
    innings_number: int
    batting_team_name: str
    bowling_team_name: str
    batting_entries: List[BattingEntryResponse] = []
    bowling_entries: List[BowlingEntryResponse] = []
    ball_events: List[BallEventResponse] = []


class MatchResponse(MatchBrief):
    tournament_id: Optional[int] = None
    bracket_slot: int
    completed: bool
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    result: Optional[MatchResult] = None
    winner: Optional[str] = None
    phase: MatchPhase


class ScorecardResponse(CamelModel):
    match: MatchResponse
    max_overs: int
    result_text: Optional[str] = None
    innings: List[InningsResponse]


# Live summary
class CreaseBatter(CamelModel):
    name: str
    runs: int
    balls: int
    strike_rate: float


class CurrentBowler(CamelModel):
    name: str
    overs: float
    runs: int
    wickets: int
    economy: float


class RecentBall(CamelModel):
    runs: int
    extra: Optional[ExtraType] = None
    extra_runs: int
    is_wicket: bool
    commentary: Optional[str] = None


class LiveInningsSummary(InningsTotals):
    innings_number: int
    batting_team_name: str
    bowling_team_name: str
    run_rate: float
    target: Optional[int] = None
    required_rate: Optional[float] = None
    batsmen_on_crease: Optional[List[CreaseBatter]] = None
    current_bowler: Optional[CurrentBowler] = None
    last_six_balls: Optional[List[RecentBall]] = None


class LiveMatchResponse(CamelModel):
    match_id: int
    team_a: str
    team_b: str
    match_status: MatchPhase
    completed: bool
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    result: Optional[MatchResult] = None
    winner: Optional[str] = None
    result_text: Optional[str] = None
    max_overs: int
    innings: List[LiveInningsSummary]


# Tournament Schemas
class TournamentCreate(CamelModel):
    club_id: int
    name: str
    sport_type: str = "CRICKET"
    bracket_size: int
    teams: Optional[List[str]] = None
    overs: Optional[int] = None
    players_per_side: Optional[int] = None
    start_date: Optional[datetime] = None


class TournamentResponse(CamelModel):
    id: int
    club_id: int
    name: str
    sport_type: SportType
    status: TournamentStatus
    overs: Optional[int] = None
    players_per_side: Optional[int] = None
    bracket_size: int
    start_date: Optional[datetime] = None
    matches: List[MatchResponse] = []


# Profile Schemas
class SportProfileCreate(CamelModel):
    sport_type: str = "CRICKET"


class SportProfileResponse(CamelModel):
    id: int
    user_id: int
    sport_type: SportType


class GoalCreate(CamelModel):
    sport_profile_id: int
    metric: str
    target: float
    deadline: Optional[datetime] = None


class GoalResponse(CamelModel):
    id: int
    sport_profile_id: int
    metric: str
    target: float
    current: float
    completed: bool
    progress: float
    deadline: Optional[datetime] = None


class StatEntryResponse(CamelModel):
    id: int
    match_id: Optional[int] = None
    date: datetime
    opponent: Optional[str] = None
    notes: Optional[str] = None
    metrics: dict
    source: StatSource
