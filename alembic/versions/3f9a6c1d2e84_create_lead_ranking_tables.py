"""Create leads, ranking_runs and ranking_results tables

Revision ID: 3f9a6c1d2e84
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a6c1d2e84'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('leads',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_name', sa.Text(), nullable=True),
        sa.Column('lead_first_name', sa.Text(), nullable=True),
        sa.Column('lead_last_name', sa.Text(), nullable=True),
        sa.Column('lead_job_title', sa.Text(), nullable=True),
        sa.Column('account_domain', sa.Text(), nullable=True),
        sa.Column('account_employee_range', sa.Text(), nullable=True),
        sa.Column('account_industry', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('ranking_runs',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('total_leads', sa.Integer(), nullable=False),
        sa.Column('processed_leads', sa.Integer(), nullable=False),
        sa.Column('total_tokens', sa.Integer(), nullable=False),
        sa.Column('total_cost', sa.Float(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ranking_runs_status', 'ranking_runs', ['status'])

    op.create_table('ranking_results',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('ranking_run_id', sa.Text(), nullable=False),
        sa.Column('lead_id', sa.Integer(), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=True),
        sa.Column('relevance_score', sa.Integer(), nullable=False),
        sa.Column('is_relevant', sa.Boolean(), nullable=False),
        sa.Column('reasoning', sa.Text(), nullable=True),
        sa.Column('department_fit', sa.Text(), nullable=True),
        sa.Column('seniority_fit', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['ranking_run_id'], ['ranking_runs.id']),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('ranking_run_id', 'lead_id', name='uq_ranking_result_run_lead'),
    )
    op.create_index('ix_ranking_results_ranking_run_id', 'ranking_results', ['ranking_run_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_ranking_results_ranking_run_id', table_name='ranking_results')
    op.drop_table('ranking_results')
    op.drop_index('ix_ranking_runs_status', table_name='ranking_runs')
    op.drop_table('ranking_runs')
    op.drop_table('leads')
