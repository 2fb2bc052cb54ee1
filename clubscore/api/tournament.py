"""
Tournament routes: create a bracket and read it back
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from clubscore.database import get_db
from clubscore.auth import get_current_user
from clubscore.auth.permissions import require_club_permission
from clubscore.models.user import User
from clubscore.models.club import Club
from clubscore.models.tournament import Tournament, SportType
from clubscore.engine.bracket_engine import BracketEngine
from clubscore.engine.errors import ScoringError
from clubscore.api.schemas import TournamentCreate, TournamentResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tournaments", tags=["Tournaments"])


@router.post("", response_model=TournamentResponse)
def create_tournament(
    request: TournamentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a tournament with its full single-elimination bracket"""
    club = db.get(Club, request.club_id)
    if not club:
        raise HTTPException(status_code=404, detail="Club not found")

    try:
        sport_type = SportType(request.sport_type.upper())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown sportType: {request.sport_type}")

    try:
        require_club_permission(db, current_user, club, "create_tournament")
        tournament = BracketEngine(db).create_tournament(
            club,
            name=request.name,
            bracket_size=request.bracket_size,
            team_names=request.teams,
            sport_type=sport_type,
            overs=request.overs,
            players_per_side=request.players_per_side,
            start_date=request.start_date,
        )
    except ScoringError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return TournamentResponse.model_validate(tournament)


@router.get("/{tournament_id}", response_model=TournamentResponse)
def get_tournament(
    tournament_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a tournament and its bracket in (round, slot) order"""
    tournament = db.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return TournamentResponse.model_validate(tournament)
