from typing import List
from sqlalchemy import String, ForeignKey, Enum, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from clubscore.database import Base


class ClubRole(enum.Enum):
    # Ordered from highest to lowest privilege
    ADMIN = "ADMIN"
    HOST = "HOST"
    PARTICIPANT = "PARTICIPANT"
    SPECTATOR = "SPECTATOR"


class Club(Base):
    __tablename__ = "clubs"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    admin_user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    admin: Mapped["User"] = relationship("User", foreign_keys=[admin_user_id])
    members: Mapped[List["ClubMember"]] = relationship(
        "ClubMember", back_populates="club", cascade="all, delete-orphan"
    )
    tournaments: Mapped[List["Tournament"]] = relationship("Tournament", back_populates="club")

    def __repr__(self):
        return f"<Club {self.name}>"


class ClubMember(Base):
    __tablename__ = "club_members"

    id: Mapped[int] = mapped_column(primary_key=True)
    club_id: Mapped[int] = mapped_column(ForeignKey("clubs.id", ondelete="CASCADE"))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    role: Mapped[ClubRole] = mapped_column(Enum(ClubRole), default=ClubRole.PARTICIPANT)

    club: Mapped["Club"] = relationship("Club", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint('user_id', 'club_id', name='unique_club_member'),
    )

    def __repr__(self):
        return f"<ClubMember club={self.club_id} user={self.user_id} role={self.role.value}>"
