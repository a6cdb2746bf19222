"""Create hospitals and bookings tables

Revision ID: 3f9c2b7d1a64
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2b7d1a64'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the hospital directory and booking tables with their indexes."""
    op.create_table(
        'hospitals',
        sa.Column('hospital_id', sa.String(36), nullable=False),
        sa.Column('sr_no', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('discipline', sa.String(255), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('state', sa.String(100), nullable=False),
        sa.Column('district', sa.String(100), nullable=False),
        sa.Column('pincode', sa.String(20), nullable=False),
        sa.Column('telephone', sa.String(100), nullable=False),
        sa.Column('emergency_num', sa.String(100), nullable=False),
        sa.Column('bloodbank_phone', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('website', sa.String(255), nullable=False),
        sa.Column('specialties', sa.JSON(), nullable=False),
        sa.Column('facilities', sa.JSON(), nullable=False),
        sa.Column('accreditation', sa.String(255), nullable=False),
        sa.Column('ayush', sa.String(50), nullable=False),
        sa.Column('total_beds', sa.Integer(), nullable=False),
        sa.Column('available_beds', sa.Integer(), nullable=False),
        sa.Column('private_wards', sa.Integer(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('location_coordinates', sa.String(100), nullable=False),
        sa.Column('dormentry', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('hospital_id', name='pk_hospitals'),
    )
    op.create_index('ix_hospitals_name', 'hospitals', ['name'])
    op.create_index('ix_hospitals_category', 'hospitals', ['category'])
    op.create_index('ix_hospitals_state', 'hospitals', ['state'])
    op.create_index('ix_hospitals_district', 'hospitals', ['district'])
    op.create_index('ix_hospitals_available_beds', 'hospitals', ['available_beds'])
    op.create_index('ix_hospitals_location', 'hospitals', ['latitude', 'longitude'])

    op.create_table(
        'bookings',
        sa.Column('booking_id', sa.String(36), nullable=False),
        sa.Column('hospital_id', sa.String(36), nullable=False),
        sa.Column('patient_name', sa.String(255), nullable=False),
        sa.Column('patient_age', sa.Integer(), nullable=False),
        sa.Column('patient_gender', sa.String(10), nullable=False),
        sa.Column('contact_phone', sa.String(50), nullable=False),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('emergency_type', sa.String(255), nullable=False),
        sa.Column('medical_condition', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('booking_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('confirmation_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('confirmation_token', sa.String(64), nullable=False),
        sa.Column('hospital_name', sa.String(255), nullable=False),
        sa.Column('hospital_contact', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['hospital_id'],
            ['hospitals.hospital_id'],
            name='fk_bookings_hospital_id_hospitals',
            ondelete='RESTRICT',
        ),
        sa.PrimaryKeyConstraint('booking_id', name='pk_bookings'),
        sa.UniqueConstraint('confirmation_token', name='uq_bookings_confirmation_token'),
    )
    op.create_index('ix_bookings_hospital_id', 'bookings', ['hospital_id'])


def downgrade() -> None:
    """Drop booking and hospital tables."""
    op.drop_index('ix_bookings_hospital_id', table_name='bookings')
    op.drop_table('bookings')
    for index in (
        'ix_hospitals_location',
        'ix_hospitals_available_beds',
        'ix_hospitals_district',
        'ix_hospitals_state',
        'ix_hospitals_category',
        'ix_hospitals_name',
    ):
        op.drop_index(index, table_name='hospitals')
    op.drop_table('hospitals')
