"""
User model for authentication
"""
from typing import List, Optional
from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from clubscore.database import Base


class User(Base):
    """
    Account resolved from the identity provider.
    A user can belong to many clubs and own one sport profile per sport.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    memberships: Mapped[List["ClubMember"]] = relationship("ClubMember", back_populates="user")
    sport_profiles: Mapped[List["SportProfile"]] = relationship(
        "SportProfile", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User '{self.name}'>"
