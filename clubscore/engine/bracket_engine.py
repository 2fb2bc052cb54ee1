"""
Bracket Engine - single-elimination tournaments
"""
import logging
import math
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from clubscore.models.club import Club, ClubMember
from clubscore.models.match import Match, MatchPhase, MatchResult, TBD
from clubscore.models.tournament import Tournament, TournamentStatus, SportType
from clubscore.models.user import User
from clubscore.engine.completion import MatchCompletionDecider
from clubscore.engine.errors import DeliveryValidationError, NotFoundError, PreconditionError

logger = logging.getLogger(__name__)

VALID_BRACKET_SIZES = (2, 4, 8, 16)


class BracketEngine:
    """
    Creates brackets and settles results that need a human decision.
    """

    def __init__(self, session: Session):
        self.session = session

    def create_tournament(
        self,
        club: Club,
        name: str,
        bracket_size: int,
        team_names: Optional[list[str]] = None,
        sport_type: SportType = SportType.CRICKET,
        overs: Optional[int] = None,
        players_per_side: Optional[int] = None,
        start_date: Optional[datetime] = None,
    ) -> Tournament:
        """
        Create a tournament and every match of its bracket.
        Round 1 is seeded pairwise from `team_names`; later rounds start as TBD.
        """
        if not name or not name.strip():
            raise DeliveryValidationError("Tournament name is required")
        if bracket_size not in VALID_BRACKET_SIZES:
            raise DeliveryValidationError("bracketSize must be 2, 4, 8, or 16")

        if team_names:
            team_names = [t.strip() for t in team_names if t and t.strip()]
            if len(team_names) != bracket_size:
                raise DeliveryValidationError(f"Exactly {bracket_size} team names required")
        else:
            team_names = [f"Team {i + 1}" for i in range(bracket_size)]

        if overs is not None and overs <= 0:
            raise DeliveryValidationError("overs must be positive")
        if players_per_side is not None and players_per_side < 2:
            raise DeliveryValidationError("playersPerSide must be at least 2")

        try:
            tournament = Tournament(
                club_id=club.id,
                name=name.strip(),
                sport_type=sport_type,
                status=TournamentStatus.UPCOMING,
                overs=overs,
                players_per_side=players_per_side,
                bracket_size=bracket_size,
                start_date=start_date,
            )
            self.session.add(tournament)
            self.session.flush()

            total_rounds = int(math.log2(bracket_size))
            for slot in range(bracket_size // 2):
                tournament.matches.append(Match(
                    round=1,
                    bracket_slot=slot,
                    team_a=team_names[slot * 2],
                    team_b=team_names[slot * 2 + 1],
                    phase=MatchPhase.NOT_STARTED,
                ))
            for round_number in range(2, total_rounds + 1):
                for slot in range(bracket_size // (2 ** round_number)):
                    tournament.matches.append(Match(
                        round=round_number,
                        bracket_slot=slot,
                        team_a=TBD,
                        team_b=TBD,
                        phase=MatchPhase.NOT_STARTED,
                    ))

            self.session.flush()
            self.link_players_by_name(tournament)
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception("Failed to create tournament '%s'", name)
            raise

        logger.info(
            "Tournament '%s' created with %d teams over %d rounds",
            tournament.name, bracket_size, total_rounds,
        )
        return tournament

    def link_players_by_name(self, tournament: Tournament) -> int:
        """
        Legacy adapter: fill missing player links by matching a side name to
        a club member's name (case-insensitive). The scoring core never
        matches by name; this only runs at the boundary.
        Returns the number of links made. Does not commit.
        """
        members = (
            self.session.query(User)
            .join(ClubMember, ClubMember.user_id == User.id)
            .filter(ClubMember.club_id == tournament.club_id)
            .all()
        )
        admin = self.session.get(User, tournament.club.admin_user_id) if tournament.club else None
        if admin is not None:
            members.append(admin)
        by_name = {u.name.lower(): u.id for u in members if u.name}

        linked = 0
        for match in tournament.matches:
            if match.player_a_id is None and match.team_a != TBD:
                match.player_a_id = by_name.get(match.team_a.lower())
                linked += match.player_a_id is not None
            if match.player_b_id is None and match.team_b != TBD:
                match.player_b_id = by_name.get(match.team_b.lower())
                linked += match.player_b_id is not None
        if linked:
            logger.info("Linked %d bracket sides to club members by name", linked)
        return linked

    def resolve_tie(self, match_id: int, winner_side: str) -> Optional[Match]:
        """
        Settle a tied knockout (e.g. after a super over played off-book)
        and push the chosen side through the bracket.
        Returns the next-round match the winner moved into, if any.
        """
        match = self.session.get(Match, match_id)
        if match is None:
            raise NotFoundError("Match not found")
        if match.result != MatchResult.TIE:
            raise PreconditionError("Only a tied match can have its tie resolved")
        if match.winner is not None:
            raise PreconditionError("Tie already resolved")
        if winner_side not in ("A", "B"):
            raise DeliveryValidationError('winner must be "A" or "B"')

        winner = match.team_a if winner_side == "A" else match.team_b
        try:
            match.winner = winner
            next_match, _ = MatchCompletionDecider(self.session).advance_bracket(match, winner)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info("Tie in match %s resolved in favour of %s", match.id, winner)
        return next_match
