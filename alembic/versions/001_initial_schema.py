"""Initial ProductFlow schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _id():
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True)


def _fk(name: str, target: str):
    return sa.Column(name, postgresql.UUID(as_uuid=True), sa.ForeignKey(target), nullable=False)


def upgrade() -> None:
    """
    Create the eight ProductFlow tables.

    users -> projects -> data_files / analyses -> feature_proposals -> tasks,
    plus company_research -> research_findings.
    """
    op.create_table(
        'users',
        _id(),
        sa.Column('open_id', sa.String(64), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('plan_id', sa.String(20), nullable=False, server_default='free'),
        sa.Column('stripe_customer_id', sa.String(255), nullable=True),
        sa.Column('stripe_subscription_id', sa.String(255), nullable=True),
        sa.Column('plan_period_end', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'projects',
        _id(),
        _fk('user_id', 'users.id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_projects_user_id', 'projects', ['user_id'])
    op.create_index('ix_projects_created_at', 'projects', ['created_at'])

    op.create_table(
        'data_files',
        _id(),
        _fk('project_id', 'projects.id'),
        _fk('user_id', 'users.id'),
        sa.Column('file_name', sa.String(512), nullable=False),
        sa.Column('file_type', sa.String(20), nullable=False),
        sa.Column('file_key', sa.String(1024), nullable=False),
        sa.Column('file_url', sa.Text(), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('mime_type', sa.String(128), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_data_files_project_id', 'data_files', ['project_id'])
    op.create_index('ix_data_files_created_at', 'data_files', ['created_at'])

    op.create_table(
        'analyses',
        _id(),
        _fk('project_id', 'projects.id'),
        _fk('user_id', 'users.id'),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('themes', postgresql.JSONB(), nullable=True),
        sa.Column('pain_points', postgresql.JSONB(), nullable=True),
        sa.Column('feature_requests', postgresql.JSONB(), nullable=True),
        sa.Column('sentiment_summary', postgresql.JSONB(), nullable=True),
        sa.Column('raw_analysis', sa.Text(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_analyses_project_id', 'analyses', ['project_id'])
    op.create_index('ix_analyses_status', 'analyses', ['status'])
    op.create_index('ix_analyses_created_at', 'analyses', ['created_at'])
    op.create_index('ix_analyses_user_created', 'analyses', ['user_id', 'created_at'])

    op.create_table(
        'feature_proposals',
        _id(),
        _fk('project_id', 'projects.id'),
        _fk('analysis_id', 'analyses.id'),
        _fk('user_id', 'users.id'),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('problem_statement', sa.Text(), nullable=False),
        sa.Column('proposed_solution', sa.Text(), nullable=False),
        sa.Column('ui_changes', sa.Text(), nullable=True),
        sa.Column('data_model_changes', sa.Text(), nullable=True),
        sa.Column('workflow_changes', sa.Text(), nullable=True),
        sa.Column('priority', sa.String(20), nullable=False),
        sa.Column('effort', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_feature_proposals_project_id', 'feature_proposals', ['project_id'])
    op.create_index('ix_feature_proposals_created_at', 'feature_proposals', ['created_at'])

    op.create_table(
        'tasks',
        _id(),
        _fk('feature_proposal_id', 'feature_proposals.id'),
        _fk('project_id', 'projects.id'),
        _fk('user_id', 'users.id'),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(20), nullable=False),
        sa.Column('priority', sa.String(20), nullable=False),
        sa.Column('estimated_hours', sa.Float(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_tasks_feature_proposal_id', 'tasks', ['feature_proposal_id'])
    op.create_index('ix_tasks_project_id', 'tasks', ['project_id'])
    op.create_index('ix_tasks_created_at', 'tasks', ['created_at'])

    op.create_table(
        'company_research',
        _id(),
        _fk('project_id', 'projects.id'),
        _fk('user_id', 'users.id'),
        sa.Column('company_url', sa.String(2048), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=True),
        sa.Column('company_description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('overall_sentiment', sa.String(20), nullable=True),
        sa.Column('positive_count', sa.Integer(), nullable=True),
        sa.Column('negative_count', sa.Integer(), nullable=True),
        sa.Column('neutral_count', sa.Integer(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('key_strengths', postgresql.JSONB(), nullable=True),
        sa.Column('key_weaknesses', postgresql.JSONB(), nullable=True),
        sa.Column('recommendations', postgresql.JSONB(), nullable=True),
        sa.Column('raw_search_results', postgresql.JSONB(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_company_research_project_id', 'company_research', ['project_id'])
    op.create_index('ix_company_research_status', 'company_research', ['status'])
    op.create_index('ix_company_research_created_at', 'company_research', ['created_at'])
    op.create_index('ix_company_research_user_created', 'company_research', ['user_id', 'created_at'])

    op.create_table(
        'research_findings',
        _id(),
        _fk('research_id', 'company_research.id'),
        _fk('project_id', 'projects.id'),
        sa.Column('source', sa.String(255), nullable=False),
        sa.Column('source_type', sa.String(20), nullable=False),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('sentiment', sa.String(20), nullable=False),
        sa.Column('sentiment_score', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('tags', postgresql.JSONB(), nullable=True),
        sa.Column('source_url', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_research_findings_research_id', 'research_findings', ['research_id'])
    op.create_index('ix_research_findings_project_id', 'research_findings', ['project_id'])
    op.create_index('ix_research_findings_created_at', 'research_findings', ['created_at'])


def downgrade() -> None:
    """Drop all tables, children first."""
    op.drop_table('research_findings')
    op.drop_table('company_research')
    op.drop_table('tasks')
    op.drop_table('feature_proposals')
    op.drop_table('analyses')
    op.drop_table('data_files')
    op.drop_table('projects')
    op.drop_table('users')
