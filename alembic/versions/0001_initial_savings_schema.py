"""initial savings schema

Revision ID: 0001_initial_savings_schema
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_savings_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String, nullable=False),
        sa.Column('full_name', sa.String, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )

    op.create_table(
        'expenses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('description', sa.String(255), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('payment_mode', sa.Enum('cash', 'card', 'upi', 'other', name='paymentmode'), nullable=False),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_expenses_user_id', 'expenses', ['user_id'])
    op.create_index('ix_expenses_date', 'expenses', ['date'])

    op.create_table(
        'savings_goals',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('target_amount', sa.Float, nullable=False),
        sa.Column('current_amount', sa.Float, nullable=False, server_default='0'),
        sa.Column('deadline', sa.Date, nullable=True),
        sa.Column('priority', sa.Enum('high', 'medium', 'low', name='goalpriority'), nullable=False),
        sa.Column('type', sa.Enum('emergency', 'investment', 'goal', name='goaltype'), nullable=False),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_savings_goals_user_id', 'savings_goals', ['user_id'])

    op.create_table(
        'contributions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('goal_id', sa.Uuid(), sa.ForeignKey('savings_goals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('notes', sa.String(200), nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_contributions_goal_id', 'contributions', ['goal_id'])

    op.create_table(
        'milestones',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('goal_id', sa.Uuid(), sa.ForeignKey('savings_goals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(50), nullable=False),
        sa.Column('description', sa.String(200), nullable=True),
        sa.Column('target_amount', sa.Float, nullable=False),
        sa.Column('deadline', sa.Date, nullable=True),
        sa.Column('achieved', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('achieved_at', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_milestones_goal_id', 'milestones', ['goal_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String, nullable=False),
        sa.Column('message', sa.String, nullable=False),
        sa.Column('type', sa.String, nullable=False),
        sa.Column('priority', sa.String, nullable=False, server_default='medium'),
        sa.Column('status', sa.String, nullable=False, server_default='unread'),
        sa.Column('action_url', sa.String, nullable=True),
        sa.Column('dedupe_key', sa.String, nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('read_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'dedupe_key', name='uq_notifications_user_dedupe_key'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    op.create_table(
        'issued_notification_keys',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('dedupe_key', sa.String, nullable=False),
        sa.Column('issued_at', sa.DateTime, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'dedupe_key', name='uq_issued_notification_keys_user_key'),
    )
    op.create_index('ix_issued_notification_keys_user_id', 'issued_notification_keys', ['user_id'])

    op.create_table(
        'notification_preferences',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('goal_deadline_reminder', sa.Boolean, nullable=False),
        sa.Column('deadline_days_threshold', sa.Integer, nullable=False),
        sa.Column('goal_progress_alert', sa.Boolean, nullable=False),
        sa.Column('progress_threshold', sa.Float, nullable=False),
        sa.Column('monthly_spending_alert', sa.Boolean, nullable=False),
        sa.Column('spending_threshold', sa.Float, nullable=False),
        sa.Column('email_notifications', sa.Boolean, nullable=False),
        sa.Column('notification_types', sa.JSON, nullable=False),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )


def downgrade():
    op.drop_table('notification_preferences')
    op.drop_table('issued_notification_keys')
    op.drop_table('notifications')
    op.drop_table('milestones')
    op.drop_table('contributions')
    op.drop_table('savings_goals')
    op.drop_table('expenses')
    op.drop_table('categories')
    op.drop_table('users')
    sa.Enum(name='goaltype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='goalpriority').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='paymentmode').drop(op.get_bind(), checkfirst=True)
