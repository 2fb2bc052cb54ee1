"""
Club role permissions.

Roles, highest to lowest: ADMIN, HOST, PARTICIPANT, SPECTATOR.
Each permission names the minimum role that holds it.
"""
from typing import Optional
from sqlalchemy.orm import Session

from clubscore.models.user import User
from clubscore.models.club import Club, ClubMember, ClubRole
from clubscore.models.match import Match
from clubscore.engine.errors import PermissionDeniedError

ROLE_HIERARCHY = [ClubRole.ADMIN, ClubRole.HOST, ClubRole.PARTICIPANT, ClubRole.SPECTATOR]

PERMISSION_MAP = {
    # Club management
    "edit_club": ClubRole.ADMIN,
    "delete_club": ClubRole.ADMIN,
    "manage_members": ClubRole.ADMIN,
    "manage_roles": ClubRole.ADMIN,
    # Tournament management
    "create_tournament": ClubRole.HOST,
    "edit_tournament": ClubRole.HOST,
    "enter_scores": ClubRole.HOST,
    "schedule_matches": ClubRole.HOST,
    # Participation
    "join_tournament": ClubRole.PARTICIPANT,
    # View-only
    "view_club": ClubRole.SPECTATOR,
    "view_bracket": ClubRole.SPECTATOR,
    "view_scores": ClubRole.SPECTATOR,
}


def role_rank(role: Optional[ClubRole]) -> float:
    """Lower rank = more privilege; unknown roles rank below everything"""
    if role not in ROLE_HIERARCHY:
        return float("inf")
    return ROLE_HIERARCHY.index(role)


def has_min_role(role: Optional[ClubRole], min_role: ClubRole) -> bool:
    return role_rank(role) <= role_rank(min_role)


def has_permission(role: Optional[ClubRole], permission: str) -> bool:
    min_role = PERMISSION_MAP.get(permission)
    if min_role is None:
        return False
    return has_min_role(role, min_role)


def club_role(session: Session, user: User, club: Club) -> Optional[ClubRole]:
    """The club owner is always ADMIN; everyone else has their membership role"""
    if club.admin_user_id == user.id:
        return ClubRole.ADMIN
    membership = session.query(ClubMember).filter_by(club_id=club.id, user_id=user.id).first()
    return membership.role if membership else None


def require_club_permission(session: Session, user: User, club: Club, permission: str) -> None:
    if not has_permission(club_role(session, user, club), permission):
        raise PermissionDeniedError(f"You do not have permission to {permission.replace('_', ' ')}")


def require_match_scorer(session: Session, user: User, match: Match) -> None:
    """
    Standalone matches are scored by their creator only; tournament matches
    by club members holding enter_scores.
    """
    if match.is_standalone:
        if match.created_by_user_id != user.id:
            raise PermissionDeniedError("Only the match creator can score this match")
        return

    role = club_role(session, user, match.tournament.club)
    if not has_permission(role, "enter_scores"):
        raise PermissionDeniedError("Only Admins and Hosts can score matches")
