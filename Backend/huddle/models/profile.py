from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from huddle.models.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Provisioned with the account; never changed afterwards
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    bio: Mapped[str] = mapped_column(String(1000), nullable=False, default="", server_default="")
    avatar_url: Mapped[str] = mapped_column(String(1024), nullable=False, default="", server_default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
