"""
Player progress routes: sport profiles, goals and synced stat entries
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from clubscore.database import get_db
from clubscore.auth import get_current_user
from clubscore.models.user import User
from clubscore.models.tournament import SportType
from clubscore.models.profile import SportProfile, Goal, CRICKET_METRICS
from clubscore.api.schemas import (
    SportProfileCreate, SportProfileResponse, GoalCreate, GoalResponse, StatEntryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Player Progress"])


@router.post("/profiles", response_model=SportProfileResponse)
def create_profile(
    request: SportProfileCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create the current user's profile for a sport (one per sport)"""
    try:
        sport_type = SportType(request.sport_type.upper())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown sportType: {request.sport_type}")

    existing = db.query(SportProfile).filter_by(user_id=current_user.id, sport_type=sport_type).first()
    if existing:
        raise HTTPException(status_code=400, detail=f"You already have a {sport_type.value} profile")

    profile = SportProfile(user_id=current_user.id, sport_type=sport_type)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info("User %s created a %s profile", current_user.id, sport_type.value)
    return SportProfileResponse.model_validate(profile)


@router.post("/goals", response_model=GoalResponse)
def create_goal(
    request: GoalCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set a goal on one of the current user's profiles"""
    profile = db.get(SportProfile, request.sport_profile_id)
    if not profile or profile.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Sport profile not found")

    if profile.sport_type == SportType.CRICKET and request.metric not in CRICKET_METRICS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown metric '{request.metric}'. Use one of: {', '.join(CRICKET_METRICS)}",
        )
    if request.target <= 0:
        raise HTTPException(status_code=400, detail="target must be greater than 0")

    goal = Goal(
        sport_profile_id=profile.id,
        metric=request.metric,
        target=request.target,
        current=0.0,
        completed=False,
        deadline=request.deadline,
    )
    db.add(goal)
    db.commit()
    db.refresh(goal)
    return GoalResponse.model_validate(goal)


@router.get("/profiles/{profile_id}/stats", response_model=List[StatEntryResponse])
def list_stats(
    profile_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Stat entries of a profile, oldest first"""
    profile = db.get(SportProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Sport profile not found")
    return [StatEntryResponse.model_validate(entry) for entry in profile.stat_entries]
