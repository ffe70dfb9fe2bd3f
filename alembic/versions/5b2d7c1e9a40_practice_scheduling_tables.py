"""practice scheduling tables

Revision ID: 5b2d7c1e9a40
Revises:
Create Date: 2026-10-16 23:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5b2d7c1e9a40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Practitioners and their clients
    op.create_table(
        'practitioners',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('username', sa.String(100), nullable=False, unique=True),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('timezone', sa.String(50), nullable=False, server_default='Europe/Madrid'),
        *_timestamps()
    )
    op.create_index('idx_practitioners_username', 'practitioners', ['username'])

    op.create_table(
        'clients',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('practitioners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('last_name', sa.String(200), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
    )
    op.create_index('idx_clients_user', 'clients', ['user_id'])

    # 2. Weekly availability (several rows per weekday for split shifts)
    op.create_table(
        'weekly_availability',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('practitioners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('weekday', sa.SmallInteger, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('timezone', sa.String(50), nullable=False, server_default='Europe/Madrid'),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'weekday', 'start_time', 'end_time', name='uq_weekly_availability_range'),
        sa.CheckConstraint('weekday BETWEEN 0 AND 6', name='ck_weekly_availability_weekday'),
        sa.CheckConstraint('end_time > start_time', name='ck_weekly_availability_order')
    )
    op.create_index('idx_weekly_availability_user', 'weekly_availability', ['user_id'])

    # 3. Booking series
    op.create_table(
        'booking_series',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('practitioners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('timezone', sa.String(50), nullable=False),
        sa.Column('dtstart_local', sa.DateTime(timezone=False), nullable=False),
        sa.Column('duration_min', sa.Integer, nullable=False),
        sa.Column('recurrence_kind', sa.String(10), nullable=False, server_default='WEEKLY'),
        sa.Column('interval_weeks', sa.Integer, nullable=False, server_default='1'),
        sa.Column('by_weekday', sa.Integer, nullable=False),
        sa.Column('mode', sa.String(20), nullable=True),
        sa.Column('location_text', sa.Text, nullable=True),
        sa.Column('consultation_type', sa.String(20), nullable=True),
        sa.Column('status', sa.String(10), nullable=False, server_default='active'),
        sa.Column('until_local', sa.DateTime(timezone=False), nullable=True),
        sa.Column('google_master_event_id', sa.String, nullable=True),
        *_timestamps(),
        sa.CheckConstraint('duration_min > 0', name='ck_booking_series_duration'),
        sa.CheckConstraint('interval_weeks IN (1, 2)', name='ck_booking_series_interval'),
        sa.CheckConstraint('by_weekday BETWEEN 0 AND 6', name='ck_booking_series_weekday'),
        sa.CheckConstraint("recurrence_kind IN ('WEEKLY')", name='ck_booking_series_kind')
    )
    op.create_index('idx_booking_series_user', 'booking_series', ['user_id'])
    op.create_index('idx_booking_series_status', 'booking_series', ['status'])
    op.create_index('idx_booking_series_master_event', 'booking_series', ['google_master_event_id'])

    # 4. Bookings
    op.create_table(
        'bookings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('practitioners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('consultation_type', sa.String(20), nullable=True),
        sa.Column('mode', sa.String(20), nullable=True, server_default='online'),
        sa.Column('location_text', sa.Text, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('series_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('booking_series.id', ondelete='SET NULL'), nullable=True),
        sa.Column('occurrence_index', sa.Integer, nullable=True),
        sa.Column('is_conflicted', sa.Boolean, nullable=False, server_default=sa.text('false')),
        *_timestamps(),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('series_id', 'occurrence_index', name='uq_bookings_series_occurrence'),
        sa.CheckConstraint('occurrence_index >= 0', name='ck_bookings_occurrence_index'),
        sa.CheckConstraint('end_time > start_time', name='ck_bookings_time_order')
    )
    op.create_index('idx_bookings_user_start', 'bookings', ['user_id', 'start_time'])
    op.create_index('idx_bookings_series', 'bookings', ['series_id'])

    # 5. Google events created for bookings
    op.create_table(
        'calendar_events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('practitioners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('google_event_id', sa.String, nullable=False),
        sa.Column('google_meet_link', sa.String, nullable=True),
        sa.Column('event_type', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('event_status', sa.String(20), nullable=False, server_default='created'),
        *_timestamps()
    )
    op.create_index('idx_calendar_events_booking', 'calendar_events', ['booking_id'])
    op.create_index('idx_calendar_events_user', 'calendar_events', ['user_id'])
    op.create_index('idx_calendar_events_google_id', 'calendar_events', ['google_event_id'])

    # 6. Google Calendar connections
    op.create_table(
        'calendar_integrations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('practitioners.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('provider', sa.String(20), nullable=False, server_default='google'),
        sa.Column('is_active', sa.Boolean, server_default=sa.text('true')),
        sa.Column('calendar_id', sa.String, nullable=False, server_default='primary'),
        sa.Column('access_token_encrypted', sa.LargeBinary),
        sa.Column('refresh_token_encrypted', sa.LargeBinary),
        sa.Column('token_expires_at', sa.DateTime(timezone=True)),
        sa.Column('last_sync_at', sa.DateTime(timezone=True)),
        sa.Column('last_sync_status', sa.String(20)),
        *_timestamps()
    )

    # 7. Billing
    op.create_table(
        'billing_settings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('practitioners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=True),
        sa.Column('is_default', sa.Boolean, nullable=False, server_default=sa.text('false')),
        sa.Column('billing_type', sa.String(20), nullable=False),
        sa.Column('billing_amount', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('first_consultation_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='EUR'),
        sa.Column('payment_email_lead_hours', sa.Integer, nullable=True),
        *_timestamps()
    )
    op.create_index('idx_billing_settings_user_client', 'billing_settings', ['user_id', 'client_id'])

    op.create_table(
        'bills',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('practitioners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('client_name', sa.String(400), nullable=False),
        sa.Column('client_email', sa.String(255), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='EUR'),
        sa.Column('billing_type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('email_scheduled_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps()
    )
    op.create_index('idx_bills_booking', 'bills', ['booking_id'])
    op.create_index('idx_bills_email_scheduled', 'bills', ['email_scheduled_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('bills')
    op.drop_table('billing_settings')
    op.drop_table('calendar_integrations')
    op.drop_table('calendar_events')
    op.drop_table('bookings')
    op.drop_table('booking_series')
    op.drop_table('weekly_availability')
    op.drop_table('clients')
    op.drop_table('practitioners')
