"""SQLAlchemy ORM models for Tickdown."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, BigInteger, String, Boolean, DateTime, UniqueConstraint
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class TimerPreference(Base):
    """One scalar of the durable timer snapshot.

    Rows are grouped by ``namespace`` and addressed by ``key``; a key holds
    either an integer or a boolean value.
    """

    __tablename__ = "timer_prefs"
    __table_args__ = (UniqueConstraint("namespace", "key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    namespace = Column(String(64), nullable=False, default="timer_prefs")
    key = Column(String(64), nullable=False)
    int_value = Column(BigInteger, nullable=True)
    bool_value = Column(Boolean, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        value = self.bool_value if self.bool_value is not None else self.int_value
        return f"<TimerPreference {self.namespace}/{self.key}={value}>"
