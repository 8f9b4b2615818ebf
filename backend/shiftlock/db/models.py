from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ProfileRow(Base):
    """Single-row table: the one local user's profile."""

    __tablename__ = "profile"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    company: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(2), nullable=False)
    root_date: Mapped[date] = mapped_column(Date, nullable=False)
    weekly_base: Mapped[float] = mapped_column(Float, nullable=False, default=35)
    money_mode_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<ProfileRow role={self.role} root_date={self.root_date}>"


class ShiftRow(Base):
    __tablename__ = "shifts"

    day: Mapped[date] = mapped_column(Date, primary_key=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="EMPTY")
    start: Mapped[str] = mapped_column(String(5), nullable=False, default="")
    end: Mapped[str] = mapped_column(String(5), nullable=False, default="")
    is_night: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    # [{"start": "12:00", "end": "13:00", "location": "ON_SITE"}, ...]
    pauses: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<ShiftRow day={self.day} status={self.status} {self.start}-{self.end}>"
