"""Create jobs, companies, source stats and employer tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Companies first; jobs reference them
    op.create_table(
        'companies',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('normalized_name', sa.String(length=255), nullable=False),
        sa.Column('aliases', sa.JSON(), nullable=False),
        sa.Column('logo_url', sa.String(length=1000), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('job_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_companies_normalized_name', 'companies', ['normalized_name'], unique=True)
    op.create_index('ix_companies_is_verified', 'companies', ['is_verified'])

    op.create_table(
        'jobs',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('employer', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('job_type', sa.String(length=20), nullable=True),
        sa.Column('mode', sa.String(length=20), nullable=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('description_summary', sa.Text(), nullable=True),
        sa.Column('apply_link', sa.Text(), nullable=False),
        sa.Column('slug', sa.String(length=300), nullable=True),

        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=100), nullable=True),
        sa.Column('state_code', sa.String(length=2), nullable=True),
        sa.Column('country', sa.String(length=2), nullable=True),
        sa.Column('is_remote', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_hybrid', sa.Boolean(), nullable=False, server_default=sa.false()),

        sa.Column('salary_range', sa.String(length=255), nullable=True),
        sa.Column('min_salary', sa.Integer(), nullable=True),
        sa.Column('max_salary', sa.Integer(), nullable=True),
        sa.Column('salary_period', sa.String(length=20), nullable=True),
        sa.Column('normalized_min_salary', sa.Integer(), nullable=True),
        sa.Column('normalized_max_salary', sa.Integer(), nullable=True),
        sa.Column('salary_is_estimated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('salary_confidence', sa.Float(), nullable=True),
        sa.Column('display_salary', sa.String(length=100), nullable=True),

        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_verified_employer', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('quality_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('apply_click_count', sa.Integer(), nullable=False, server_default='0'),

        sa.Column('source_type', sa.String(length=20), nullable=False, server_default='external'),
        sa.Column('source_provider', sa.String(length=50), nullable=True),
        sa.Column('external_id', sa.String(length=255), nullable=True),

        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('original_posted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('company_id', sa.String(length=32), nullable=True),

        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('slug', name='uq_job_slug'),
        sa.CheckConstraint('quality_score >= 0 AND quality_score <= 100', name='ck_job_quality_score_range'),
        sa.CheckConstraint("source_type IN ('external', 'employer', 'direct')", name='ck_job_source_type_valid'),
    )

    op.create_index('idx_job_source_external_id', 'jobs', ['source_provider', 'external_id'])
    op.create_index('idx_job_is_published', 'jobs', ['is_published'])
    op.create_index('idx_job_expires_at', 'jobs', ['expires_at'])
    op.create_index('idx_job_employer', 'jobs', ['employer'])
    op.create_index('idx_job_state_code', 'jobs', ['state_code'])
    op.create_index('idx_job_published_created', 'jobs', ['is_published', 'created_at'])

    op.create_table(
        'source_stats',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('source', sa.String(length=50), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('jobs_fetched', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('jobs_added', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('jobs_duplicate', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('jobs_expired', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('avg_quality_score', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source', 'date', name='uq_source_stats_source_date'),
    )

    op.create_table(
        'employer_jobs',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('job_id', sa.String(length=32), nullable=False),
        sa.Column('employer_name', sa.String(length=255), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=False),
        sa.Column('edit_token', sa.String(length=64), nullable=False),
        sa.Column('dashboard_token', sa.String(length=64), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('expiry_warning_sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('job_id'),
    )

    op.create_table(
        'email_leads',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('source', sa.String(length=50), nullable=True),
        sa.Column('unsubscribe_token', sa.String(length=64), nullable=False),
        sa.Column('is_subscribed', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('unsubscribe_token'),
    )
    op.create_index('ix_email_leads_email', 'email_leads', ['email'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_email_leads_email', table_name='email_leads')
    op.drop_table('email_leads')
    op.drop_table('employer_jobs')
    op.drop_table('source_stats')

    op.drop_index('idx_job_published_created', table_name='jobs')
    op.drop_index('idx_job_state_code', table_name='jobs')
    op.drop_index('idx_job_employer', table_name='jobs')
    op.drop_index('idx_job_expires_at', table_name='jobs')
    op.drop_index('idx_job_is_published', table_name='jobs')
    op.drop_index('idx_job_source_external_id', table_name='jobs')
    op.drop_table('jobs')

    op.drop_index('ix_companies_is_verified', table_name='companies')
    op.drop_index('ix_companies_normalized_name', table_name='companies')
    op.drop_table('companies')
