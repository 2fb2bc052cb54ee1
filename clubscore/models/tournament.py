"""
Tournament model - a single-elimination bracket inside a club
"""
from typing import Optional, List
from sqlalchemy import String, Integer, ForeignKey, Enum, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from clubscore.database import Base


class SportType(enum.Enum):
    CRICKET = "CRICKET"
    FOOTBALL = "FOOTBALL"
    BASKETBALL = "BASKETBALL"
    TENNIS = "TENNIS"


class TournamentStatus(enum.Enum):
    UPCOMING = "UPCOMING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Tournament(Base):
    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(primary_key=True)
    club_id: Mapped[int] = mapped_column(ForeignKey("clubs.id"))
    club: Mapped["Club"] = relationship("Club", back_populates="tournaments")

    name: Mapped[str] = mapped_column(String(100))
    sport_type: Mapped[SportType] = mapped_column(Enum(SportType), default=SportType.CRICKET)
    status: Mapped[TournamentStatus] = mapped_column(Enum(TournamentStatus), default=TournamentStatus.UPCOMING)

    # Cricket format (None falls back to settings defaults)
    overs: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    players_per_side: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    bracket_size: Mapped[int] = mapped_column(Integer)  # 2, 4, 8 or 16
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Bracket, in (round, slot) order
    matches: Mapped[List["Match"]] = relationship(
        "Match",
        back_populates="tournament",
        order_by="[Match.round, Match.bracket_slot, Match.id]",
    )

    @property
    def total_rounds(self) -> int:
        if not self.matches:
            return 0
        return max(m.round for m in self.matches)

    def round_matches(self, round_number: int) -> list:
        """Matches of one round in creation order"""
        return [m for m in self.matches if m.round == round_number]

    def __repr__(self):
        return f"<Tournament '{self.name}' ({self.status.value})>"
