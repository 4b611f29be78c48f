"""
RankingRun model — one row per end-to-end scoring run.

Lifecycle: pending → running → completed | failed. Terminal states are final.
"""
import uuid

from sqlalchemy import Column, Text, Integer, Float, DateTime
from sqlalchemy.sql import func

from leadrank.config import TERMINAL_STATUSES
from leadrank.database import Base


class RankingRun(Base):
    __tablename__ = 'ranking_runs'

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    status = Column(Text, nullable=False, default='pending', index=True)
    total_leads = Column(Integer, nullable=False, default=0)
    processed_leads = Column(Integer, nullable=False, default=0)
    total_tokens = Column(Integer, nullable=False, default=0)
    total_cost = Column(Float, nullable=False, default=0.0)
    summary = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'status': self.status,
            'is_terminal': self.status in TERMINAL_STATUSES,
            'total_leads': self.total_leads or 0,
            'processed_leads': self.processed_leads or 0,
            'total_tokens': self.total_tokens or 0,
            'total_cost': self.total_cost or 0.0,
            'summary': self.summary or '',
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }
