"""create scheduling tables

Revision ID: 7c1f3a9d2b40
Revises:
Create Date: 2025-01-06 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '7c1f3a9d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')

    # 1. Staff
    op.create_table(
        'staff',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.text('true'))
    )

    # 2. Service catalog
    op.create_table(
        'services',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('base_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('duration_min', sa.Integer, nullable=True),
        sa.Column('buffer_pre_min', sa.Integer, nullable=True, server_default='0'),
        sa.Column('buffer_post_min', sa.Integer, nullable=True, server_default='0'),
        sa.Column('is_active', sa.Boolean, nullable=True, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_services_is_active', 'services', ['is_active'])

    op.create_table(
        'add_ons',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0')
    )

    # 3. Availability
    op.create_table(
        'availability_rules',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('staff_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('staff.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rrule_text', sa.Text, nullable=False),
        sa.Column('tz', sa.String(64), nullable=True),
        sa.Column('buffer_pre_min', sa.Integer, nullable=True, server_default='0'),
        sa.Column('buffer_post_min', sa.Integer, nullable=True, server_default='0')
    )
    op.create_index('ix_availability_rules_staff_id', 'availability_rules', ['staff_id'])

    op.create_table(
        'blackout_dates',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('staff_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('staff.id', ondelete='CASCADE'), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reason', sa.String, nullable=True)
    )
    op.create_index('ix_blackout_dates_staff_id', 'blackout_dates', ['staff_id'])

    # 4. Appointments
    op.create_table(
        'appointments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('staff_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('staff.id'), nullable=True),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('pet_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('service_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('services.id'), nullable=True),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('price_service', sa.Numeric(10, 2), nullable=True, server_default='0'),
        sa.Column('price_addons', sa.Numeric(10, 2), nullable=True, server_default='0'),
        sa.Column('discount', sa.Numeric(10, 2), nullable=True, server_default='0'),
        sa.Column('tax', sa.Numeric(10, 2), nullable=True, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='booked'),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_appointments_staff_id', 'appointments', ['staff_id'])
    op.create_index('idx_appointments_staff_window', 'appointments', ['staff_id', 'starts_at', 'ends_at'])

    # A groomer can never hold two active bookings over the same instant
    op.execute("""
        ALTER TABLE appointments
        ADD CONSTRAINT appointments_no_overlap
        EXCLUDE USING gist (
            staff_id WITH =,
            tstzrange(starts_at, ends_at, '[)') WITH &&
        )
        WHERE (status IN ('booked', 'checked_in', 'in_progress', 'completed'))
    """)

    op.create_table(
        'appointment_add_ons',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('appointment_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('add_on_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('add_ons.id'), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.UniqueConstraint('appointment_id', 'add_on_id', name='uq_appointment_add_on')
    )
    op.create_index('ix_appointment_add_ons_appointment_id', 'appointment_add_ons', ['appointment_id'])

    # 5. Reschedule links
    op.create_table(
        'reschedule_links',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('appointment_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_reschedule_links_token', 'reschedule_links', ['token'], unique=True)
    op.create_index('ix_reschedule_links_appointment_id', 'reschedule_links', ['appointment_id'])

    # 6. Audit trail and push tokens
    op.create_table(
        'audit_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('action', sa.String(64), nullable=False),
        sa.Column('entity', sa.String(64), nullable=False),
        sa.Column('entity_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
    )
    op.create_index('ix_audit_log_action', 'audit_log', ['action'])
    op.create_index('ix_audit_log_entity_id', 'audit_log', ['entity_id'])

    op.create_table(
        'notification_tokens',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('platform', sa.String(20), nullable=False, server_default='web'),
        sa.Column('token', sa.String(512), nullable=False, unique=True),
        sa.Column('last_seen_at', sa.DateTime(timezone=True), nullable=True)
    )
    op.create_index('ix_notification_tokens_user_id', 'notification_tokens', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table('notification_tokens')
    op.drop_table('audit_log')
    op.drop_table('reschedule_links')
    op.drop_table('appointment_add_ons')
    op.execute('ALTER TABLE appointments DROP CONSTRAINT IF EXISTS appointments_no_overlap')
    op.drop_table('appointments')
    op.drop_table('blackout_dates')
    op.drop_table('availability_rules')
    op.drop_table('add_ons')
    op.drop_table('services')
    op.drop_table('staff')
