"""
Cricket scoring routes: start innings, record deliveries, scorecards and
the live summary polled by spectators.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from clubscore.database import get_db
from clubscore.auth import get_current_user
from clubscore.models.user import User
from clubscore.models.match import Match, Innings, MatchPhase
from clubscore.models.tournament import SportType
from clubscore.engine.bracket_engine import BracketEngine
from clubscore.engine.completion import describe_result
from clubscore.engine.errors import ScoringError
from clubscore.engine.overs import legal_balls_from_overs, rate_per_over, BALLS_PER_OVER
from clubscore.engine.scoring_engine import ScoringEngine, LineupPlayer as Lineup
from clubscore.api.schemas import (
    StandaloneMatchCreate, StartInningsRequest, DeliveryRequest, ResolveTieRequest,
    DeliveryResponse, BallEventResponse, InningsTotals, InningsResponse,
    MatchBrief, MatchResponse, ScorecardResponse,
    LiveMatchResponse, LiveInningsSummary, CreaseBatter, CurrentBowler, RecentBall,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matches", tags=["Cricket Scoring"])


def _get_match(db: Session, match_id: int) -> Match:
    match = db.get(Match, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    return match


@router.post("", response_model=MatchResponse)
def create_match(
    request: StandaloneMatchCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a standalone match outside any tournament; only its creator may score it"""
    try:
        sport_type = SportType(request.sport_type.upper())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown sportType: {request.sport_type}")

    team_a = (request.team_a or "").strip()
    team_b = (request.team_b or "").strip()
    if not team_a or not team_b:
        raise HTTPException(status_code=400, detail="teamA and teamB are required")
    if team_a.lower() == team_b.lower():
        raise HTTPException(status_code=400, detail="teamA and teamB must be different")

    overs = players_per_side = None
    if sport_type == SportType.CRICKET:
        if request.overs is not None and request.overs < 1:
            raise HTTPException(status_code=400, detail="overs must be at least 1")
        if request.players_per_side is not None and request.players_per_side < 2:
            raise HTTPException(status_code=400, detail="playersPerSide must be at least 2")
        overs, players_per_side = request.overs, request.players_per_side

    match = Match(
        team_a=team_a,
        team_b=team_b,
        sport_type=sport_type,
        overs=overs,
        players_per_side=players_per_side,
        created_by_user_id=current_user.id,
        phase=MatchPhase.NOT_STARTED,
    )
    db.add(match)
    db.commit()
    db.refresh(match)
    logger.info("User %s created standalone match %s: %s vs %s", current_user.id, match.id, team_a, team_b)
    return MatchResponse.model_validate(match)


@router.post("/{match_id}/cricket/start", response_model=InningsResponse)
def start_innings(
    match_id: int,
    request: StartInningsRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Open the 1st innings, or the 2nd once the 1st is complete"""
    engine = ScoringEngine(db)
    try:
        innings = engine.start_innings(
            match_id,
            batting_side=request.batting_team,
            batting_lineup=[Lineup(p.name, p.player_id) for p in request.batting_lineup],
            opening_bowler=Lineup(request.bowler.name, request.bowler.player_id) if request.bowler else None,
            bowling_lineup=[Lineup(p.name, p.player_id) for p in request.bowling_lineup]
            if request.bowling_lineup else None,
            scorer=current_user,
        )
    except ScoringError as e:
        logger.warning("Start innings rejected for match %s: %s", match_id, e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return InningsResponse.model_validate(innings)


@router.post("/{match_id}/cricket/ball", response_model=DeliveryResponse)
def record_ball(
    match_id: int,
    request: DeliveryRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record one delivery against the active innings"""
    engine = ScoringEngine(db)
    try:
        result = engine.record_delivery(
            match_id,
            batsman_name=request.batsman_name,
            bowler_name=request.bowler_name,
            runs_scored=request.runs_scored,
            extra_type=request.extra_type,
            extra_runs=request.extra_runs,
            is_wicket=request.is_wicket,
            dismissal_type=request.dismissal_type,
            fielder_name=request.fielder_name,
            batsman_id=request.batsman_id,
            bowler_id=request.bowler_id,
            new_batsman_name=request.new_batsman_name,
            new_batsman_id=request.new_batsman_id,
            scorer=current_user,
        )
    except ScoringError as e:
        logger.warning("Delivery rejected for match %s: %s", match_id, e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)

    next_match = result.advanced_next_match
    return DeliveryResponse(
        ball_event=BallEventResponse.model_validate(result.ball_event),
        innings=InningsTotals.model_validate(result.innings),
        innings_complete=result.innings_complete,
        completion_reason=result.completion_reason.value if result.completion_reason else None,
        match_completed=result.match_completed,
        result=result.result,
        winner=result.winner,
        advanced_next_match=MatchBrief.model_validate(next_match) if next_match else None,
        new_tournament_status=result.new_tournament_status,
        stats_synced=result.stats_synced,
    )


@router.get("/{match_id}/cricket", response_model=ScorecardResponse)
def get_scorecard(
    match_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Full scorecard: both innings with ledgers and ball-by-ball events"""
    match = _get_match(db, match_id)
    return ScorecardResponse(
        match=MatchResponse.model_validate(match),
        max_overs=match.max_overs,
        result_text=describe_result(match),
        innings=[InningsResponse.model_validate(inn) for inn in match.innings],
    )


def _live_innings_summary(match: Match, innings: Innings) -> LiveInningsSummary:
    legal_balls = legal_balls_from_overs(innings.total_overs)
    target = None
    required_rate = None
    if innings.innings_number == 2 and match.innings:
        target = match.innings[0].total_runs + 1
        balls_left = match.max_overs * BALLS_PER_OVER - legal_balls
        if balls_left > 0:
            required_rate = round((target - innings.total_runs) * BALLS_PER_OVER / balls_left, 2)

    summary = LiveInningsSummary(
        innings_number=innings.innings_number,
        batting_team_name=innings.batting_team_name,
        bowling_team_name=innings.bowling_team_name,
        total_runs=innings.total_runs,
        total_wickets=innings.total_wickets,
        total_overs=innings.total_overs,
        extras=innings.extras,
        is_complete=innings.is_complete,
        run_rate=rate_per_over(innings.total_runs, legal_balls),
        target=target,
        required_rate=required_rate,
    )
    if innings.is_complete:
        return summary

    # Detail only for the innings in progress
    summary.batsmen_on_crease = [
        CreaseBatter(name=b.player_name, runs=b.runs, balls=b.balls_faced, strike_rate=b.strike_rate)
        for b in innings.batting_entries if not b.is_out
    ][:2]

    recent = innings.ball_events[-6:]
    bowler = None
    if recent:
        bowler = innings.bowling_entry_for(recent[-1].bowler_name)
    elif innings.bowling_entries:
        bowler = innings.bowling_entries[0]
    if bowler:
        summary.current_bowler = CurrentBowler(
            name=bowler.player_name,
            overs=bowler.overs_bowled,
            runs=bowler.runs_conceded,
            wickets=bowler.wickets,
            economy=bowler.economy,
        )
    summary.last_six_balls = [
        RecentBall(
            runs=b.runs_scored,
            extra=b.extra_type,
            extra_runs=b.extra_runs,
            is_wicket=b.is_wicket,
            commentary=b.commentary,
        )
        for b in recent
    ]
    return summary


@router.get("/{match_id}/cricket/live", response_model=LiveMatchResponse)
def get_live(
    match_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Lightweight live score for polling clients"""
    match = _get_match(db, match_id)
    return LiveMatchResponse(
        match_id=match.id,
        team_a=match.team_a,
        team_b=match.team_b,
        match_status=match.phase,
        completed=match.completed,
        score_a=match.score_a,
        score_b=match.score_b,
        result=match.result,
        winner=match.winner,
        result_text=describe_result(match),
        max_overs=match.max_overs,
        innings=[_live_innings_summary(match, inn) for inn in match.innings],
    )


@router.post("/{match_id}/resolve-tie", response_model=MatchResponse)
def resolve_tie(
    match_id: int,
    request: ResolveTieRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Pick the side that goes through after a tied knockout"""
    match = _get_match(db, match_id)
    engine = ScoringEngine(db)
    try:
        if match.is_standalone:
            raise ScoringError("Standalone matches have no bracket to advance")
        engine.check_permission(match, current_user)
        BracketEngine(db).resolve_tie(match_id, request.winner)
    except ScoringError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    db.refresh(match)
    return MatchResponse.model_validate(match)
