"""Initial booking schema: stores, staff, services, working hours, blocks, appointments

Revision ID: bk001_initial_booking
Revises:
Create Date: 2026-10-17

This migration adds:
1. Store (tenant root, public slug, IANA time zone)
2. Staff (optimistic-lock version_id) and Service
3. Weekly working hours (one row per staff/weekday/shift slot)
4. Availability blocks (store-wide or per staff)
5. Appointments (confirmed/cancelled, buffer snapshot)
6. PostgreSQL only: exclusion constraint so two confirmed appointments of
   the same staff member can never overlap
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'bk001_initial_booking'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. STORES
    # ==========================================================================
    op.create_table('stores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('slug', sa.String(length=60), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('stores', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_stores_slug'), ['slug'], unique=True)

    # ==========================================================================
    # 2. STAFF AND SERVICES
    # ==========================================================================
    op.create_table('staff',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('last_booked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('staff', schema=None) as batch_op:
        batch_op.create_index('ix_staff_store_id', ['store_id'], unique=False)

    op.create_table('services',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('duration_minutes > 0', name='ck_services_duration_positive'),
        sa.CheckConstraint('price_cents >= 0', name='ck_services_price_non_negative'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('services', schema=None) as batch_op:
        batch_op.create_index('ix_services_store_id', ['store_id'], unique=False)

    # ==========================================================================
    # 3. WEEKLY WORKING HOURS
    # ==========================================================================
    op.create_table('staff_working_hours',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('slot', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_open', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='ck_working_hours_day'),
        sa.CheckConstraint('slot >= 1', name='ck_working_hours_slot'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('staff_id', 'day_of_week', 'slot', name='uq_working_hours_staff_day_slot'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('staff_working_hours', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_staff_working_hours_store_id'), ['store_id'], unique=False)
        batch_op.create_index('ix_working_hours_staff_day', ['staff_id', 'day_of_week'], unique=False)

    # ==========================================================================
    # 4. AVAILABILITY BLOCKS
    # ==========================================================================
    op.create_table('availability_blocks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=True),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reason', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('end_at > start_at', name='ck_availability_blocks_order'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('availability_blocks', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_availability_blocks_staff_id'), ['staff_id'], unique=False)
        batch_op.create_index('ix_availability_blocks_store_range', ['store_id', 'start_at', 'end_at'], unique=False)

    # ==========================================================================
    # 5. APPOINTMENTS
    # ==========================================================================
    op.create_table('appointments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=True),
        sa.Column('customer_name', sa.String(length=80), nullable=False),
        sa.Column('customer_phone', sa.String(length=40), nullable=False),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('buffer_after_minutes_snapshot', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='confirmed'),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('end_at > start_at', name='ck_appointments_order'),
        sa.CheckConstraint("status IN ('confirmed', 'cancelled')", name='ck_appointments_status'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id'], ),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('appointments', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_appointments_staff_id'), ['staff_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_appointments_status'), ['status'], unique=False)
        batch_op.create_index('ix_appointments_staff_start', ['store_id', 'staff_id', 'start_at'], unique=False)

    # ==========================================================================
    # 6. NO-OVERLAP GUARANTEE (PostgreSQL)
    # ==========================================================================
    # The stored end excludes the buffer, so the constraint guards the
    # service time itself; buffers are enforced by the booking transaction.
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
        op.execute(
            "ALTER TABLE appointments ADD CONSTRAINT ex_appointments_staff_no_overlap "
            "EXCLUDE USING gist (staff_id WITH =, tstzrange(start_at, end_at, '[)') WITH &&) "
            "WHERE (status = 'confirmed')"
        )


def downgrade():
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        op.execute('ALTER TABLE appointments DROP CONSTRAINT IF EXISTS ex_appointments_staff_no_overlap')

    with op.batch_alter_table('appointments', schema=None) as batch_op:
        batch_op.drop_index('ix_appointments_staff_start')
        batch_op.drop_index(batch_op.f('ix_appointments_status'))
        batch_op.drop_index(batch_op.f('ix_appointments_staff_id'))
    op.drop_table('appointments')

    with op.batch_alter_table('availability_blocks', schema=None) as batch_op:
        batch_op.drop_index('ix_availability_blocks_store_range')
        batch_op.drop_index(batch_op.f('ix_availability_blocks_staff_id'))
    op.drop_table('availability_blocks')

    with op.batch_alter_table('staff_working_hours', schema=None) as batch_op:
        batch_op.drop_index('ix_working_hours_staff_day')
        batch_op.drop_index(batch_op.f('ix_staff_working_hours_store_id'))
    op.drop_table('staff_working_hours')

    with op.batch_alter_table('services', schema=None) as batch_op:
        batch_op.drop_index('ix_services_store_id')
    op.drop_table('services')

    with op.batch_alter_table('staff', schema=None) as batch_op:
        batch_op.drop_index('ix_staff_store_id')
    op.drop_table('staff')

    with op.batch_alter_table('stores', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_stores_slug'))
    op.drop_table('stores')
