"""Initial retention schema: members, activity, predictions, campaigns, recipes.

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0a1b2c3d4e5f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create all retention tables."""
    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('external_id', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='member'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_members_external_id', 'members', ['external_id'], unique=True)

    op.create_table(
        'memberships',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('membership_type', sa.String(30), nullable=False, server_default='basic'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_memberships_member_id', 'memberships', ['member_id'])
    op.create_index('ix_memberships_member_status', 'memberships', ['member_id', 'status'])

    op.create_table(
        'fitness_plans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('TRUE')),
        sa.Column('fitness_goal', sa.String(100), nullable=True),
        sa.Column('daily_calories', sa.Integer(), nullable=False, server_default=sa.text('2000')),
        sa.Column('workout_schedule', sa.JSON(), nullable=True),
        sa.Column('workout_exercises', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_fitness_plans_member_id', 'fitness_plans', ['member_id'])

    op.create_table(
        'member_check_ins',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('check_in_time', sa.DateTime(), nullable=False),
        sa.Column('location', sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_check_ins_member_time', 'member_check_ins', ['member_id', 'check_in_time'])

    op.create_table(
        'workout_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='completed'),
        sa.Column('workout_name', sa.String(150), nullable=True),
        sa.Column('logged_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_workout_logs_member_time', 'workout_logs', ['member_id', 'logged_at'])

    op.create_table(
        'member_predictions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('churn_risk', sa.Integer(), nullable=False),
        sa.Column('churn_risk_level', sa.String(10), nullable=False),
        sa.Column('engagement_score', sa.Integer(), nullable=False),
        sa.Column('workout_completion_probability', sa.Float(), nullable=False),
        sa.Column('optimal_visit_hour', sa.Integer(), nullable=False),
        sa.Column('predicted_next_visit', sa.DateTime(), nullable=False),
        sa.Column('days_since_last_activity', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('check_in_frequency', sa.Float(), nullable=False, server_default=sa.text('0')),
        sa.Column('risk_factors', sa.JSON(), nullable=True),
        sa.Column('calculated_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('member_id', name='uq_member_predictions_member'),
    )
    op.create_index('ix_member_predictions_churn_risk_level', 'member_predictions', ['churn_risk_level'])

    op.create_table(
        'win_back_campaigns',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('tier', sa.String(30), nullable=False),
        sa.Column('days_since_last_activity', sa.Integer(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=False),
        sa.Column('delivery_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('delivery_error', sa.Text(), nullable=True),
        sa.Column('opened_at', sa.DateTime(), nullable=True),
        sa.Column('clicked_at', sa.DateTime(), nullable=True),
        sa.Column('converted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('member_id', 'tier', name='uq_win_back_member_tier'),
    )
    op.create_index('ix_win_back_campaigns_member_id', 'win_back_campaigns', ['member_id'])
    op.create_index('ix_win_back_member_sent', 'win_back_campaigns', ['member_id', 'sent_at'])

    op.create_table(
        'recipes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(30), nullable=False),
        sa.Column('difficulty', sa.String(10), nullable=False, server_default='easy'),
        sa.Column('calories', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('protein', sa.Float(), nullable=False, server_default=sa.text('0')),
        sa.Column('carbs', sa.Float(), nullable=False, server_default=sa.text('0')),
        sa.Column('fat', sa.Float(), nullable=False, server_default=sa.text('0')),
        sa.Column('cooking_time', sa.Integer(), nullable=False, server_default=sa.text('30')),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('is_recommended', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recipes_category', 'recipes', ['category'])


def downgrade():
    """Drop all retention tables."""
    op.drop_index('ix_recipes_category', table_name='recipes')
    op.drop_table('recipes')
    op.drop_index('ix_win_back_member_sent', table_name='win_back_campaigns')
    op.drop_index('ix_win_back_campaigns_member_id', table_name='win_back_campaigns')
    op.drop_table('win_back_campaigns')
    op.drop_index('ix_member_predictions_churn_risk_level', table_name='member_predictions')
    op.drop_table('member_predictions')
    op.drop_index('ix_workout_logs_member_time', table_name='workout_logs')
    op.drop_table('workout_logs')
    op.drop_index('ix_check_ins_member_time', table_name='member_check_ins')
    op.drop_table('member_check_ins')
    op.drop_index('ix_fitness_plans_member_id', table_name='fitness_plans')
    op.drop_table('fitness_plans')
    op.drop_index('ix_memberships_member_status', table_name='memberships')
    op.drop_index('ix_memberships_member_id', table_name='memberships')
    op.drop_table('memberships')
    op.drop_index('ix_members_external_id', table_name='members')
    op.drop_table('members')
