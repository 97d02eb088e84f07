import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from huddle.models.base import Base


class FriendshipStatus:
    PENDING = "pending"
    ACCEPTED = "accepted"
    # Part of the schema but never written: rejecting deletes the row
    REJECTED = "rejected"

    ALL = (PENDING, ACCEPTED, REJECTED)


def ordered_pair(a: uuid.UUID, b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
    return (min(a, b), max(a, b))


class Friendship(Base):
    __tablename__ = "friendships"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )  # initiator
    friend_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )  # recipient
    # Direction-free copy of the endpoints so one unique constraint covers both orders
    pair_low: Mapped[uuid.UUID] = mapped_column(nullable=False)
    pair_high: Mapped[uuid.UUID] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FriendshipStatus.PENDING
    )  # pending, accepted
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("pair_low", "pair_high", name="uq_friendships_pair"),
        CheckConstraint("user_id <> friend_id", name="ck_friendships_not_self"),
        CheckConstraint("pair_low < pair_high", name="ck_friendships_pair_order"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')", name="ck_friendships_status"
        ),
    )

    @classmethod
    def request(cls, user_id: uuid.UUID, friend_id: uuid.UUID, status: str = FriendshipStatus.PENDING) -> "Friendship":
        """Build an edge from initiator to recipient with its pair columns filled in."""
        low, high = ordered_pair(user_id, friend_id)
        return cls(
            user_id=user_id,
            friend_id=friend_id,
            pair_low=low,
            pair_high=high,
            status=status,
        )

    def involves(self, profile_id: uuid.UUID) -> bool:
        return profile_id in (self.user_id, self.friend_id)

    def other(self, profile_id: uuid.UUID) -> uuid.UUID:
        return self.friend_id if self.user_id == profile_id else self.user_id
