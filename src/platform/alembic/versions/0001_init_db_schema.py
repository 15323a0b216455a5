"""init_db_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Schema:
- user: users mirrored from Clerk (id is the Clerk user id)
- movie: movie reference data
- show: screenings with the occupied-seat mapping {seat_label: user_id}
- booking: seat holds, deleted by the payment-timeout workflow when unpaid
- function_run: durable function runs (memoized steps, wake-up time, failures)

References between tables are logical only; there are no foreign keys.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            'created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
        ),
        sa.Column(
            'updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
        ),
    ]


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('image', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'movie',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('overview', sa.Text(), nullable=False, server_default=''),
        sa.Column('poster_path', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('backdrop_path', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('release_date', sa.Date(), nullable=True),
        sa.Column('original_language', sa.String(length=16), nullable=True),
        sa.Column('tagline', sa.Text(), nullable=True),
        sa.Column('genres', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('casts', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('vote_average', sa.Float(), nullable=False, server_default='0'),
        sa.Column('runtime', sa.Integer(), nullable=False, server_default='0'),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
        ),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'show',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('movie_id', sa.String(length=64), nullable=False),
        sa.Column('show_date_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('show_price', sa.Integer(), nullable=False),
        sa.Column(
            'occupied_seats', JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")
        ),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_show_movie_id', 'show', ['movie_id'])
    op.create_index('ix_show_show_date_time', 'show', ['show_date_time'])

    op.create_table(
        'booking',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('show_id', sa.String(length=64), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('booked_seats', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('payment_link', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_booking_user_id', 'booking', ['user_id'])
    op.create_index('ix_booking_show_id', 'booking', ['show_id'])

    op.create_table(
        'function_run',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('function_id', sa.String(length=100), nullable=False),
        sa.Column('event_name', sa.String(length=100), nullable=False),
        sa.Column('event_id', sa.String(length=255), nullable=True),
        sa.Column('event_data', JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('event_ts', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('attempt', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('steps', JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('wake_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('lease_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('lease_token', sa.String(length=64), nullable=True),
        sa.Column('output', JSONB, nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_function_run_function_id', 'function_run', ['function_id'])
    op.create_index('ix_function_run_status', 'function_run', ['status'])
    op.create_index('ix_function_run_wake_at', 'function_run', ['wake_at'])


def downgrade() -> None:
    op.drop_table('function_run')
    op.drop_table('booking')
    op.drop_table('show')
    op.drop_table('movie')
    op.drop_table('user')
