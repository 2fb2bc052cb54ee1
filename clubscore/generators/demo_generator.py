"""
Demo Generator - seeds a club with Faker-named members and a knockout
tournament whose sides are the members themselves
"""
import random
from typing import Optional
from faker import Faker
from sqlalchemy.orm import Session

from clubscore.models.user import User
from clubscore.models.club import Club, ClubMember, ClubRole
from clubscore.models.tournament import Tournament, SportType
from clubscore.models.profile import SportProfile
from clubscore.engine.bracket_engine import BracketEngine
from clubscore.engine.scoring_engine import LineupPlayer

fake = Faker('en_GB')


class DemoGenerator:
    """Generates a playable demo club"""

    CLUB_SUFFIXES = ["Cricket Club", "CC", "Strollers", "Wanderers", "Gymkhana"]

    def __init__(self, session: Session, seed: Optional[int] = None):
        self.session = session
        if seed is not None:
            Faker.seed(seed)
            random.seed(seed)

    def generate_user(self) -> User:
        name = fake.unique.name()
        user = User(
            external_id=f"demo_{fake.unique.uuid4()}",
            name=name,
            email=fake.unique.email(),
        )
        self.session.add(user)
        return user

    def generate_club(self, member_count: int) -> tuple[Club, User, list[User]]:
        """Club with an admin, one host and `member_count` participants"""
        admin = self.generate_user()
        self.session.flush()

        club = Club(
            name=f"{fake.city()} {random.choice(self.CLUB_SUFFIXES)}",
            admin_user_id=admin.id,
        )
        self.session.add(club)
        self.session.flush()

        host = self.generate_user()
        participants = [self.generate_user() for _ in range(member_count)]
        self.session.flush()

        club.members.append(ClubMember(user_id=host.id, role=ClubRole.HOST))
        for user in participants:
            club.members.append(ClubMember(user_id=user.id, role=ClubRole.PARTICIPANT))
            self.session.add(SportProfile(user_id=user.id, sport_type=SportType.CRICKET))
        self.session.flush()
        return club, host, participants

    def generate_tournament(
        self, bracket_size: int = 4, overs: int = 5, players_per_side: int = 6
    ) -> Tournament:
        """
        Seeds a club and a bracket whose sides are named after members,
        so the name-link adapter can attach each side to its user.
        """
        club, _, participants = self.generate_club(bracket_size)
        return BracketEngine(self.session).create_tournament(
            club,
            name=f"{club.name} {fake.word().title()} Cup",
            bracket_size=bracket_size,
            team_names=[u.name for u in participants],
            sport_type=SportType.CRICKET,
            overs=overs,
            players_per_side=players_per_side,
        )

    @staticmethod
    def generate_lineup(size: int) -> list[LineupPlayer]:
        return [LineupPlayer(name=fake.unique.last_name()) for _ in range(size)]

    # (runs, extra_type, is_wicket, dismissal_type) with weights
    DELIVERY_OUTCOMES = [
        ((0, None, False, None), 34),
        ((1, None, False, None), 28),
        ((2, None, False, None), 8),
        ((4, None, False, None), 10),
        ((6, None, False, None), 4),
        ((0, "WIDE", False, None), 4),
        ((0, "NO_BALL", False, None), 2),
        ((0, "LEG_BYE", False, None), 2),
        ((0, None, True, "BOWLED"), 3),
        ((0, None, True, "CAUGHT"), 4),
        ((0, None, True, "LBW"), 1),
    ]

    @classmethod
    def random_delivery(cls) -> dict:
        """Raw fields of one plausible delivery, minus the player names"""
        outcomes, weights = zip(*cls.DELIVERY_OUTCOMES)
        runs, extra_type, is_wicket, dismissal_type = random.choices(outcomes, weights=weights)[0]
        return {
            "runs_scored": runs,
            "extra_type": extra_type,
            "extra_runs": 1 if extra_type else 0,
            "is_wicket": is_wicket,
            "dismissal_type": dismissal_type,
        }
