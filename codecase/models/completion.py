"""CaseCompletion model: one finished play of a case, first or repeat."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from codecase.db.session import Base


class CaseCompletion(Base):
    __tablename__ = "case_completions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    case_id = Column(String(128), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    points_awarded = Column(Integer, nullable=False, default=0)  # 0 on repeats
    clues_found = Column(Integer, nullable=False, default=0)
    hints_used = Column(Integer, nullable=False, default=0)
    time_spent = Column(Integer, nullable=False, default=0)
    is_repeat = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    player = relationship("Player", back_populates="completions")
