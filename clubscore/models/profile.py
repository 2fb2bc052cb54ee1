"""
Player-progress models: sport profiles, stat entries and goals
"""
from typing import Optional, List
from sqlalchemy import String, Float, ForeignKey, Enum, DateTime, Text, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from clubscore.database import Base
from clubscore.models.tournament import SportType


class StatSource(enum.Enum):
    TOURNAMENT = "TOURNAMENT"
    STANDALONE = "STANDALONE"
    MANUAL = "MANUAL"


# Metric keys a cricket stat entry carries and a cricket goal may track
CRICKET_METRICS = [
    "runs",
    "balls_faced",
    "fours",
    "sixes",
    "strike_rate",
    "wickets",
    "overs_bowled",
    "runs_conceded",
    "economy",
    "catches",
    "match_result",
]


class SportProfile(Base):
    """
    A user's performance-tracking profile for one sport.
    """
    __tablename__ = "sport_profiles"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    user: Mapped["User"] = relationship("User", back_populates="sport_profiles")
    sport_type: Mapped[SportType] = mapped_column(Enum(SportType))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    stat_entries: Mapped[List["StatEntry"]] = relationship(
        "StatEntry", back_populates="sport_profile", order_by="StatEntry.date"
    )
    goals: Mapped[List["Goal"]] = relationship("Goal", back_populates="sport_profile")

    __table_args__ = (
        UniqueConstraint('user_id', 'sport_type', name='unique_user_sport'),
    )

    def __repr__(self):
        return f"<SportProfile user={self.user_id} {self.sport_type.value}>"


class StatEntry(Base):
    """
    One match worth of metrics for a profile.
    Created once per (match, profile) and never edited afterwards.
    """
    __tablename__ = "stat_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    sport_profile_id: Mapped[int] = mapped_column(ForeignKey("sport_profiles.id"))
    sport_profile: Mapped["SportProfile"] = relationship("SportProfile", back_populates="stat_entries")
    match_id: Mapped[Optional[int]] = mapped_column(ForeignKey("matches.id"), nullable=True)

    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    opponent: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    metrics: Mapped[dict] = mapped_column(JSON, default=dict)
    source: Mapped[StatSource] = mapped_column(Enum(StatSource), default=StatSource.MANUAL)

    __table_args__ = (
        UniqueConstraint('match_id', 'sport_profile_id', name='unique_match_stat_entry'),
    )

    def __repr__(self):
        return f"<StatEntry profile={self.sport_profile_id} match={self.match_id}>"


class Goal(Base):
    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(primary_key=True)
    sport_profile_id: Mapped[int] = mapped_column(ForeignKey("sport_profiles.id"))
    sport_profile: Mapped["SportProfile"] = relationship("SportProfile", back_populates="goals")

    metric: Mapped[str] = mapped_column(String(50))
    target: Mapped[float] = mapped_column(Float)
    current: Mapped[float] = mapped_column(Float, default=0.0)
    completed: Mapped[bool] = mapped_column(default=False)
    deadline: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @property
    def progress(self) -> float:
        """Progress towards target as a percentage (capped at 100)"""
        if self.target <= 0:
            return 0.0
        return round(min(self.current / self.target, 1.0) * 100, 1)

    def __repr__(self):
        return f"<Goal {self.metric}: {self.current}/{self.target}>"
