"""
RankingResult model — one row per lead per run (the scorer's judgement).

`rank` stays NULL until the run is finalized; finalize is its only writer.
"""
from sqlalchemy import (
    Column, Integer, Text, Boolean, DateTime, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from leadrank.database import Base


class RankingResult(Base):
    __tablename__ = 'ranking_results'
    __table_args__ = (
        UniqueConstraint('ranking_run_id', 'lead_id', name='uq_ranking_result_run_lead'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    ranking_run_id = Column(Text, ForeignKey('ranking_runs.id'), nullable=False, index=True)
    lead_id = Column(Integer, ForeignKey('leads.id'), nullable=False)
    rank = Column(Integer, nullable=True)
    relevance_score = Column(Integer, nullable=False, default=0)
    is_relevant = Column(Boolean, nullable=False, default=False)
    reasoning = Column(Text, default='')
    department_fit = Column(Text, default='poor')
    seniority_fit = Column(Text, default='poor')
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lead = relationship('Lead', lazy='joined')

    def to_dict(self, include_lead=True):
        data = {
            'id': self.id,
            'ranking_run_id': self.ranking_run_id,
            'lead_id': self.lead_id,
            'rank': self.rank,
            'relevance_score': self.relevance_score,
            'is_relevant': bool(self.is_relevant),
            'reasoning': self.reasoning or '',
            'department_fit': self.department_fit,
            'seniority_fit': self.seniority_fit,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_lead:
            data['lead'] = self.lead.to_dict() if self.lead else None
        return data
