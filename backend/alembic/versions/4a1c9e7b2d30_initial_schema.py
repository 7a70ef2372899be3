"""initial schema: roles, users, menu items, feedback

Revision ID: 4a1c9e7b2d30
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4a1c9e7b2d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MEAL_TYPES = ('breakfast', 'lunch', 'dinner')
FEEDBACK_STATUSES = ('pending', 'processing', 'resolved')


def upgrade() -> None:
    # ── roles ────────────────────────────────────────────────
    roles = op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('role_name', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role_name'),
    )
    op.bulk_insert(roles, [
        {'id': 1, 'role_name': 'admin', 'description': 'System Administrator'},
        {'id': 2, 'role_name': 'user', 'description': 'Regular User'},
    ])

    # ── users ────────────────────────────────────────────────
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role_id', sa.Integer(), nullable=False, server_default='2'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role_id'), 'users', ['role_id'], unique=False)

    # ── menu_items ───────────────────────────────────────────
    op.create_table(
        'menu_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('meal_date', sa.Date(), nullable=False),
        sa.Column(
            'meal_type',
            sa.Enum(*MEAL_TYPES, name='menu_meal_type_enum'),
            nullable=False,
        ),
        sa.Column('dish_name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('meal_date', 'meal_type', 'dish_name', name='uq_menu_item'),
    )
    op.create_index(op.f('ix_menu_items_meal_date'), 'menu_items', ['meal_date'], unique=False)

    # ── feedback ─────────────────────────────────────────────
    op.create_table(
        'feedback',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(length=500), nullable=True),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'status',
            sa.Enum(*FEEDBACK_STATUSES, name='feedback_status_enum'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('meal_date', sa.Date(), nullable=False),
        sa.Column(
            'meal_type',
            sa.Enum(*MEAL_TYPES, name='meal_type_enum'),
            nullable=False,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_feedback_rating_range'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_feedback_rating'), 'feedback', ['rating'], unique=False)
    op.create_index('ix_feedback_user_date', 'feedback', ['user_id', 'meal_date'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_feedback_user_date', table_name='feedback')
    op.drop_index(op.f('ix_feedback_rating'), table_name='feedback')
    op.drop_table('feedback')
    op.drop_index(op.f('ix_menu_items_meal_date'), table_name='menu_items')
    op.drop_table('menu_items')
    op.drop_index(op.f('ix_users_role_id'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_table('users')
    op.drop_table('roles')

    # PostgreSQL keeps enum types after their tables are gone
    for enum_name in ('feedback_status_enum', 'meal_type_enum', 'menu_meal_type_enum'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
