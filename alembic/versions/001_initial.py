"""Initial migration

Revision ID: 001
Revises: 
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum labels are the Python member names, as SQLAlchemy stores them
user_role = sa.Enum('ADMINISTRATOR', 'CLIENT', name='userrole')
place_status = sa.Enum('AVAILABLE', 'OCCUPIED', 'MAINTENANCE', 'INACTIVE', name='placestatus')
reservation_status = sa.Enum(
    'PENDING', 'CONFIRMED', 'CHECKED_IN', 'CHECKED_OUT', 'COMPLETED', 'CANCELLED',
    name='reservationstatus',
)
alert_type = sa.Enum(
    'RESERVATION_REMINDER', 'CHECK_IN_REMINDER', 'CHECK_OUT_REMINDER',
    'PAYMENT_REMINDER', 'CANCELLATION_NOTICE',
    name='alerttype',
)


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column('phone', sa.String(20)),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('refresh_token', sa.String(500)),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create categories table
    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), unique=True, nullable=False),
        sa.Column('description', sa.String(500)),
        sa.Column('icon', sa.String(50)),
        sa.Column('color', sa.String(20)),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create places table
    op.create_table(
        'places',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('code', sa.String(10), unique=True, nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.String(1000)),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('capacity', sa.Integer()),
        sa.Column('location', sa.String(300)),
        sa.Column('status', place_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reservation_code', sa.String(15), unique=True, nullable=False),
        sa.Column('place_id', sa.Uuid(), sa.ForeignKey('places.id'), nullable=False),
        sa.Column('client_name', sa.String(200), nullable=False),
        sa.Column('client_email', sa.String(200), nullable=False),
        sa.Column('client_phone', sa.String(20)),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date()),
        sa.Column('start_time', sa.Time()),
        sa.Column('end_time', sa.Time()),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('place_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', reservation_status, nullable=False),
        sa.Column('check_in_date', sa.DateTime()),
        sa.Column('check_out_date', sa.DateTime()),
        sa.Column('notes', sa.Text()),
        sa.Column('alert_sent', sa.Boolean(), nullable=False, default=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('party_size > 0', name='ck_reservations_party_size_positive'),
    )

    # Create alerts table
    op.create_table(
        'alerts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'reservation_id',
            sa.Uuid(),
            sa.ForeignKey('reservations.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('type', alert_type, nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.String(1000), nullable=False),
        sa.Column('alert_date', sa.Date(), nullable=False),
        sa.Column('is_sent', sa.Boolean(), nullable=False, default=False),
        sa.Column('sent_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_reservations_client_email', 'reservations', ['client_email'])
    op.create_index('ix_reservations_start_date', 'reservations', ['start_date'])
    op.create_index('ix_reservations_place_status', 'reservations', ['place_id', 'status'])
    op.create_index('ix_alerts_reservation_id', 'alerts', ['reservation_id'])
    op.create_index('ix_alerts_alert_date', 'alerts', ['alert_date', 'is_sent'])


def downgrade() -> None:
    op.drop_table('alerts')
    op.drop_table('reservations')
    op.drop_table('places')
    op.drop_table('categories')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (alert_type, reservation_status, place_status, user_role):
        enum_type.drop(bind, checkfirst=True)
