"""
Lead model — one row per imported prospect.

Rows are immutable after ingestion; a re-seed replaces the whole table.
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from leadrank.database import Base


class Lead(Base):
    __tablename__ = 'leads'

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_name = Column(Text, default='')
    lead_first_name = Column(Text, default='')
    lead_last_name = Column(Text, default='')
    lead_job_title = Column(Text, default='')
    account_domain = Column(Text, default='')
    account_employee_range = Column(Text, default='')
    account_industry = Column(Text, default='')
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'account_name': self.account_name or '',
            'lead_first_name': self.lead_first_name or '',
            'lead_last_name': self.lead_last_name or '',
            'lead_job_title': self.lead_job_title or '',
            'account_domain': self.account_domain or '',
            'account_employee_range': self.account_employee_range or '',
            'account_industry': self.account_industry or '',
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
