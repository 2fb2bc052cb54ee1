"""
Shared fixtures: an in-memory database and small match builders.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from clubscore.database import Base
from clubscore.models import (
    User, Club, ClubMember, ClubRole, Match, SportType, SportProfile,
)
from clubscore.engine.bracket_engine import BracketEngine
from clubscore.engine.scoring_engine import ScoringEngine, InningsLockRegistry, LineupPlayer


@pytest.fixture
def test_db():
    """Create an in-memory test database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = Session(engine)
    yield session
    session.close()


@pytest.fixture
def make_user(test_db):
    """Factory for users"""
    counter = {"n": 0}

    def _make(name: str) -> User:
        counter["n"] += 1
        user = User(external_id=f"ext_{counter['n']}", name=name, email=f"user{counter['n']}@example.com")
        test_db.add(user)
        test_db.commit()
        return user

    return _make


@pytest.fixture
def club(test_db, make_user):
    """A club owned by 'Admin Alice' with a host, a participant and a spectator."""
    admin = make_user("Admin Alice")
    club = Club(name="Riverside CC", admin_user_id=admin.id)
    test_db.add(club)
    test_db.flush()
    for name, role in (
        ("Host Harry", ClubRole.HOST),
        ("Player Priya", ClubRole.PARTICIPANT),
        ("Spectator Sam", ClubRole.SPECTATOR),
    ):
        user = make_user(name)
        club.members.append(ClubMember(user_id=user.id, role=role))
    test_db.commit()
    return club


@pytest.fixture
def member(test_db, club):
    """Look up a club user by name"""
    def _member(name: str) -> User:
        return test_db.query(User).filter_by(name=name).one()
    return _member


@pytest.fixture
def engine(test_db):
    return ScoringEngine(test_db, locks=InningsLockRegistry())


@pytest.fixture
def standalone_match(test_db, make_user):
    """20-over, 11-a-side standalone match between two linked players."""
    creator = make_user("Lions Captain")
    rival = make_user("Tigers Captain")
    match = Match(
        team_a="Lions",
        team_b="Tigers",
        player_a_id=creator.id,
        player_b_id=rival.id,
        sport_type=SportType.CRICKET,
        overs=20,
        players_per_side=11,
        created_by_user_id=creator.id,
    )
    test_db.add(match)
    test_db.commit()
    return match


@pytest.fixture
def cricket_profile(test_db):
    def _profile(user_id: int) -> SportProfile:
        profile = SportProfile(user_id=user_id, sport_type=SportType.CRICKET)
        test_db.add(profile)
        test_db.commit()
        return profile
    return _profile


@pytest.fixture
def knockout(test_db, club):
    """Factory for a short-format bracket: 5 overs, 2 players a side (1 wicket ends an innings)."""
    def _knockout(size: int = 4, overs: int = 5, players_per_side: int = 2):
        teams = [f"T{i + 1}" for i in range(size)]
        return BracketEngine(test_db).create_tournament(
            club, "Summer Knockout", size, team_names=teams,
            overs=overs, players_per_side=players_per_side,
        )
    return _knockout


@pytest.fixture
def play_match(engine):
    """
    Play a short-format match: side A scores `runs_a` in singles then loses its
    only wicket; side B chases in singles, losing its wicket if it falls short.
    Returns the result of the final delivery.
    """
    def _play(match_id: int, runs_a: int, runs_b: int):
        engine.start_innings(match_id, "A", [LineupPlayer("A1"), LineupPlayer("A2")], LineupPlayer("B Quick"))
        for _ in range(runs_a):
            engine.record_delivery(match_id, "A1", "B Quick", runs_scored=1)
        engine.record_delivery(match_id, "A1", "B Quick", is_wicket=True, dismissal_type="BOWLED")

        engine.start_innings(match_id, "B", [LineupPlayer("B1"), LineupPlayer("B2")], LineupPlayer("A Quick"))
        result = None
        for _ in range(runs_b):
            result = engine.record_delivery(match_id, "B1", "A Quick", runs_scored=1)
            if result.match_completed:
                return result
        return engine.record_delivery(match_id, "B1", "A Quick", is_wicket=True, dismissal_type="CAUGHT")

    return _play
