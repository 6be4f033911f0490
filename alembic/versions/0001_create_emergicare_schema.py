"""create profiles, doctors and consultations

Revision ID: 0001
Revises:
Create Date: 2026-02-03 12:29:48.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.Enum('patient', 'doctor', name='user_role', native_enum=False), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_profiles_role', 'profiles', ['role'])

    op.create_table(
        'doctors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('specialization', sa.String(length=100), nullable=False),
        sa.Column('license_number', sa.String(length=100), nullable=False),
        sa.Column('is_available', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('years_of_experience', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('years_of_experience >= 0', name='ck_doctors_experience_non_negative'),
        sa.ForeignKeyConstraint(['id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('license_number'),
    )
    op.create_index('idx_doctors_is_available', 'doctors', ['is_available'])

    op.create_table(
        'consultations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('doctor_id', sa.Uuid(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pending', 'assigned', 'in_progress', 'completed', 'cancelled',
                    name='consultation_status', native_enum=False),
            server_default='pending',
            nullable=False,
        ),
        sa.Column(
            'urgency_level',
            sa.Enum('low', 'medium', 'high', 'critical', name='urgency_level', native_enum=False),
            nullable=False,
        ),
        sa.Column('symptoms', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(trim(symptoms)) > 0', name='ck_consultations_symptoms_not_blank'),
        sa.CheckConstraint(
            "(doctor_id IS NOT NULL) = (status IN ('assigned', 'in_progress', 'completed'))",
            name='ck_consultations_doctor_matches_status',
        ),
        sa.CheckConstraint(
            "(started_at IS NOT NULL) = (status IN ('in_progress', 'completed'))",
            name='ck_consultations_started_matches_status',
        ),
        sa.CheckConstraint(
            "(completed_at IS NOT NULL) = (status = 'completed')",
            name='ck_consultations_completed_matches_status',
        ),
        sa.ForeignKeyConstraint(['patient_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['doctor_id'], ['doctors.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_consultations_patient_id', 'consultations', ['patient_id'])
    op.create_index('idx_consultations_doctor_id', 'consultations', ['doctor_id'])
    op.create_index('idx_consultations_status', 'consultations', ['status'])
    op.create_index('idx_consultations_created_at', 'consultations', [sa.text('created_at DESC')])


def downgrade() -> None:
    op.drop_index('idx_consultations_created_at', table_name='consultations')
    op.drop_index('idx_consultations_status', table_name='consultations')
    op.drop_index('idx_consultations_doctor_id', table_name='consultations')
    op.drop_index('idx_consultations_patient_id', table_name='consultations')
    op.drop_table('consultations')
    op.drop_index('idx_doctors_is_available', table_name='doctors')
    op.drop_table('doctors')
    op.drop_index('idx_profiles_role', table_name='profiles')
    op.drop_table('profiles')
