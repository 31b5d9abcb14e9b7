"""create_marketplace_tables

Creates the job board and order workflow schema:
1. users / freelancer_profiles / gigs (shared with the account and gig services)
2. jobs, job_categories, applications
3. orders, order_status_history

Revision ID: 3f1a9c2e7b40
Revises:
Create Date: 2026-10-19 09:12:44.120931

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUSES = ('PENDING', 'ACCEPTED', 'IN_PROGRESS', 'DELIVERED', 'DISPUTED', 'COMPLETED', 'CANCELLED')


def upgrade() -> None:
    """Create marketplace tables."""

    # 1. Accounts and gigs
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('firstname', sa.String(), nullable=False),
        sa.Column('lastname', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', sa.Enum('FREELANCER', 'CLIENT', 'ADMIN', name='userrole'), nullable=False, server_default='CLIENT'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'])
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'])

    op.create_table(
        'freelancer_profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_freelancer_profiles_id'), 'freelancer_profiles', ['id'])
    op.create_index(op.f('ix_freelancer_profiles_user_id'), 'freelancer_profiles', ['user_id'], unique=True)

    op.create_table(
        'gigs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('freelancer_id', sa.Integer(), sa.ForeignKey('freelancer_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('pricing', postgresql.JSONB(), nullable=False),
        sa.Column('delivery_time', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum('DRAFT', 'ACTIVE', 'PAUSED', name='gigstatus'), nullable=False, server_default='DRAFT'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index(op.f('ix_gigs_id'), 'gigs', ['id'])
    op.create_index(op.f('ix_gigs_freelancer_id'), 'gigs', ['freelancer_id'])
    op.create_index(op.f('ix_gigs_status'), 'gigs', ['status'])

    # 2. Job board
    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('posted_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('budget_min', sa.Float(), nullable=True),
        sa.Column('budget_max', sa.Float(), nullable=True),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('job_difficulty', sa.String(), nullable=True),
        sa.Column('project_length', sa.String(), nullable=True),
        sa.Column('key_responsibilities', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('required_skills', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('tools', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('scope', sa.Text(), nullable=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('company', sa.String(), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('video_file_url', sa.String(), nullable=True),
        sa.Column('proposals', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index(op.f('ix_jobs_id'), 'jobs', ['id'])
    op.create_index(op.f('ix_jobs_posted_by_id'), 'jobs', ['posted_by_id'])
    op.create_index(op.f('ix_jobs_title'), 'jobs', ['title'])
    op.create_index(op.f('ix_jobs_is_verified'), 'jobs', ['is_verified'])
    op.create_index(op.f('ix_jobs_created_at'), 'jobs', ['created_at'])

    op.create_table(
        'job_categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index(op.f('ix_job_categories_job_id'), 'job_categories', ['job_id'])
    op.create_index(op.f('ix_job_categories_name'), 'job_categories', ['name'])

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('freelancer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('about_freelancer', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        # One application per freelancer per job, enforced by the database
        sa.UniqueConstraint('freelancer_id', 'job_id', name='uq_applications_freelancer_job'),
    )
    op.create_index(op.f('ix_applications_id'), 'applications', ['id'])
    op.create_index(op.f('ix_applications_freelancer_id'), 'applications', ['freelancer_id'])
    op.create_index(op.f('ix_applications_job_id'), 'applications', ['job_id'])

    # 3. Orders
    order_status = sa.Enum(*ORDER_STATUSES, name='orderstatus')

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_number', sa.String(length=32), nullable=False),
        sa.Column('gig_id', sa.Integer(), sa.ForeignKey('gigs.id'), nullable=False),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('freelancer_id', sa.Integer(), sa.ForeignKey('freelancer_profiles.id'), nullable=False),
        sa.Column('package', sa.String(), nullable=False),
        sa.Column('total_price', sa.Float(), nullable=False),
        sa.Column('requirements', sa.Text(), nullable=True),
        sa.Column('custom_details', postgresql.JSONB(), nullable=True),
        sa.Column('is_urgent', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('priority_fee', sa.Float(), nullable=True),
        sa.Column('status', order_status, nullable=False, server_default='PENDING'),
        sa.Column('delivery_deadline', sa.DateTime(timezone=True), nullable=False),
        sa.Column('delivery_extensions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('extension_reason', sa.Text(), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('cancellation_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index(op.f('ix_orders_id'), 'orders', ['id'])
    op.create_index(op.f('ix_orders_order_number'), 'orders', ['order_number'], unique=True)
    op.create_index(op.f('ix_orders_gig_id'), 'orders', ['gig_id'])
    op.create_index(op.f('ix_orders_client_id'), 'orders', ['client_id'])
    op.create_index(op.f('ix_orders_freelancer_id'), 'orders', ['freelancer_id'])
    op.create_index(op.f('ix_orders_status'), 'orders', ['status'])
    op.create_index(op.f('ix_orders_created_at'), 'orders', ['created_at'])

    op.create_table(
        'order_status_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', postgresql.ENUM(*ORDER_STATUSES, name='orderstatus', create_type=False), nullable=False),
        sa.Column('changed_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(op.f('ix_order_status_history_id'), 'order_status_history', ['id'])
    op.create_index(op.f('ix_order_status_history_order_id'), 'order_status_history', ['order_id'])


def downgrade() -> None:
    """Drop marketplace tables."""
    op.drop_table('order_status_history')
    op.drop_table('orders')
    op.drop_table('applications')
    op.drop_table('job_categories')
    op.drop_table('jobs')
    op.drop_table('gigs')
    op.drop_table('freelancer_profiles')
    op.drop_table('users')

    sa.Enum(name='orderstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='gigstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
