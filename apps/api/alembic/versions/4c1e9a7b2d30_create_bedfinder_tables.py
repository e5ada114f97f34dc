"""create_bedfinder_tables

Hospitals (with a lat/lng index for the nearby bounding-box query),
bookings and emergency requests.

Revision ID: 4c1e9a7b2d30
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1e9a7b2d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- Hospitals ---
    op.create_table('hospitals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lng', sa.Float(), nullable=False),
        sa.Column('type', sa.String(length=20), server_default='General', nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('about', sa.Text(), nullable=True),
        sa.Column('specialties', sa.Text(), nullable=True),
        sa.Column('bed_total_icu', sa.Integer(), server_default='0', nullable=False),
        sa.Column('bed_av_icu', sa.Integer(), server_default='0', nullable=False),
        sa.Column('bed_total_oxygen', sa.Integer(), server_default='0', nullable=False),
        sa.Column('bed_av_oxygen', sa.Integer(), server_default='0', nullable=False),
        sa.Column('bed_total_general', sa.Integer(), server_default='0', nullable=False),
        sa.Column('bed_av_general', sa.Integer(), server_default='0', nullable=False),
        sa.Column('verified', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('source', sa.String(length=20), server_default='Staff', nullable=False),
        sa.Column('added_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_hospitals_name'), 'hospitals', ['name'], unique=False)
    op.create_index('ix_hospitals_lat_lng', 'hospitals', ['lat', 'lng'], unique=False)

    # --- Bookings ---
    op.create_table('bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('hospital_id', sa.Uuid(), nullable=False),
        sa.Column('patient_name', sa.String(), nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('condition', sa.Text(), nullable=True),
        sa.Column('contact_phone', sa.String(), nullable=False),
        sa.Column('bed_type', sa.Enum('icu', 'oxygen', 'general', name='bed_type'), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'CONFIRMED', 'REJECTED', name='booking_status'),
                  server_default='PENDING', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['hospital_id'], ['hospitals.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)
    op.create_index(op.f('ix_bookings_hospital_id'), 'bookings', ['hospital_id'], unique=False)

    # --- Emergency requests ---
    op.create_table('emergency_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('patient_name', sa.String(), nullable=False),
        sa.Column('patient_age', sa.String(length=10), nullable=False),
        sa.Column('severity', sa.Enum('Critical', 'Serious', 'Moderate', name='emergency_severity'),
                  nullable=False),
        sa.Column('nature_of_emergency', sa.Text(), nullable=False),
        sa.Column('location_text', sa.Text(), nullable=False),
        sa.Column('contact_number', sa.String(), nullable=False),
        sa.Column('status', sa.Enum('OPEN', 'RESOLVED', name='emergency_status'),
                  server_default='OPEN', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_emergency_requests_user_id'), 'emergency_requests', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_emergency_requests_user_id'), table_name='emergency_requests')
    op.drop_table('emergency_requests')
    op.drop_index(op.f('ix_bookings_hospital_id'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_user_id'), table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_hospitals_lat_lng', table_name='hospitals')
    op.drop_index(op.f('ix_hospitals_name'), table_name='hospitals')
    op.drop_table('hospitals')
    op.execute("DROP TYPE IF EXISTS emergency_status")
    op.execute("DROP TYPE IF EXISTS emergency_severity")
    op.execute("DROP TYPE IF EXISTS booking_status")
    op.execute("DROP TYPE IF EXISTS bed_type")
