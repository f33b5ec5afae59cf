"""Player model: hint balance and progression stats, keyed by external user id."""
from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from codecase.db.session import Base

# Lists stored as JSON text, same as content elsewhere on SQLite


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), unique=True, nullable=False, index=True)
    hints = Column(Integer, nullable=False, default=0)
    total_points = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    evidence_count = Column(Integer, nullable=False, default=0)
    hints_used = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    best_streak = Column(Integer, nullable=False, default=0)
    total_time_spent = Column(Integer, nullable=False, default=0)  # seconds
    average_case_time = Column(Float, nullable=False, default=0.0)
    completed_cases_json = Column(Text, nullable=False, default="[]")
    achievements_json = Column(Text, nullable=False, default="[]")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    completions = relationship("CaseCompletion", back_populates="player", order_by="CaseCompletion.id")
