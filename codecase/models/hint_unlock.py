"""HintUnlock model: one unlocked hint step or puzzle hint for one user."""
from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from codecase.db.session import Base


class HintUnlock(Base):
    __tablename__ = "hint_unlocks"
    __table_args__ = (UniqueConstraint("user_id", "unlock_id", name="uq_hint_unlocks_user_unlock"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), nullable=False, index=True)
    case_id = Column(String(128), nullable=False, index=True)
    unlock_id = Column(String(128), nullable=False)
    method = Column(String(16), nullable=False)  # auto | purchased
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
