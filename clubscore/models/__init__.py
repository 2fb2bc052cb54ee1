from clubscore.models.user import User
from clubscore.models.club import Club, ClubMember, ClubRole
from clubscore.models.tournament import Tournament, TournamentStatus, SportType
from clubscore.models.match import (
    Match, Innings, BattingEntry, BowlingEntry, BallEvent,
    MatchPhase, MatchResult, ExtraType, DismissalType,
)
from clubscore.models.profile import SportProfile, StatEntry, Goal, StatSource

__all__ = [
    "User",
    "Club",
    "ClubMember",
    "ClubRole",
    "Tournament",
    "TournamentStatus",
    "SportType",
    "Match",
    "Innings",
    "BattingEntry",
    "BowlingEntry",
    "BallEvent",
    "MatchPhase",
    "MatchResult",
    "ExtraType",
    "DismissalType",
    "SportProfile",
    "StatEntry",
    "Goal",
    "StatSource",
]
