"""create rehab schema (users, profiles, routines, completions, nfts)

Revision ID: 3f9a1c7d2b10
Revises:
Create Date: 2026-10-18 17:40:12.508113
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f9a1c7d2b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),   # doctor | patient
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'doctors',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=80), nullable=False),
        sa.Column('last_name', sa.String(length=80), nullable=False),
        sa.Column('medical_license', sa.String(length=80), nullable=True),
        sa.Column('specialization', sa.String(length=120), nullable=True),
        sa.Column('hospital_affiliation', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=40), nullable=True),
        sa.Column('profile_image_url', sa.String(length=500), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )

    op.create_table(
        'patients',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=80), nullable=False),
        sa.Column('last_name', sa.String(length=80), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('phone', sa.String(length=40), nullable=True),
        sa.Column('emergency_contact_name', sa.String(length=160), nullable=True),
        sa.Column('emergency_contact_phone', sa.String(length=40), nullable=True),
        sa.Column('medical_conditions', sa.JSON(), nullable=True),
        sa.Column('current_medications', sa.JSON(), nullable=True),
        sa.Column('nft_wallet_address', sa.String(length=64), nullable=True),
        sa.Column('profile_image_url', sa.String(length=500), nullable=True),
        sa.Column('assigned_doctor_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assigned_doctor_id'], ['doctors.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )
    op.create_index('ix_patients_assigned_doctor_id', 'patients', ['assigned_doctor_id'])

    op.create_table(
        'exercises',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=160), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=60), nullable=True),
        sa.Column('difficulty_level', sa.Integer(), nullable=True),      # 1-5
        sa.Column('default_sets', sa.Integer(), nullable=True),
        sa.Column('default_reps', sa.Integer(), nullable=True),
        sa.Column('default_duration_seconds', sa.Integer(), nullable=True),
        sa.Column('rest_seconds', sa.Integer(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('video_demo_url', sa.String(length=500), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('equipment_needed', sa.String(length=255), nullable=True),
        sa.Column('muscle_groups', sa.JSON(), nullable=True),
        sa.Column('safety_notes', sa.Text(), nullable=True),
        sa.Column('ai_generated', sa.Boolean(), nullable=False),
        sa.Column('created_by_doctor_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['created_by_doctor_id'], ['doctors.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_exercises_name', 'exercises', ['name'])

    op.create_table(
        'routines',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('patient_id', sa.String(length=36), nullable=False),
        sa.Column('prescribed_by_doctor_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('frequency_per_week', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['prescribed_by_doctor_id'], ['doctors.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_routines_patient_id', 'routines', ['patient_id'])
    op.create_index('ix_routines_prescribed_by_doctor_id', 'routines', ['prescribed_by_doctor_id'])

    op.create_table(
        'routine_exercises',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('routine_id', sa.String(length=36), nullable=False),
        sa.Column('exercise_id', sa.String(length=36), nullable=False),
        sa.Column('sets', sa.Integer(), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.Column('rest_seconds', sa.Integer(), nullable=True),
        sa.Column('order_in_routine', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['routine_id'], ['routines.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['exercise_id'], ['exercises.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_routine_exercises_routine_id', 'routine_exercises', ['routine_id'])
    op.create_index('ix_routine_exercises_exercise_id', 'routine_exercises', ['exercise_id'])

    op.create_table(
        'exercise_completions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('routine_exercise_id', sa.String(length=36), nullable=False),
        sa.Column('patient_id', sa.String(length=36), nullable=False),
        sa.Column('video_url', sa.String(length=500), nullable=True),
        sa.Column('ai_analysis_result', sa.JSON(), nullable=True),
        sa.Column('form_score', sa.Float(), nullable=True),             # 0-100
        sa.Column('completion_status', sa.String(length=30), nullable=False),
        sa.Column('actual_sets', sa.Integer(), nullable=True),
        sa.Column('actual_reps', sa.Integer(), nullable=True),
        sa.Column('actual_duration_seconds', sa.Integer(), nullable=True),
        sa.Column('completion_date', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('doctor_feedback', sa.Text(), nullable=True),
        sa.Column('nft_minted', sa.Boolean(), nullable=False),
        sa.Column('nft_token_id', sa.String(length=80), nullable=True),
        sa.Column('idempotency_key', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['routine_exercise_id'], ['routine_exercises.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('idempotency_key', name='uq_exercise_completions_idempotency_key')
    )
    op.create_index('ix_exercise_completions_patient_id', 'exercise_completions', ['patient_id'])
    op.create_index('ix_exercise_completions_routine_exercise_id', 'exercise_completions', ['routine_exercise_id'])

    op.create_table(
        'nfts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('patient_id', sa.String(length=36), nullable=False),
        sa.Column('exercise_completion_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('token_id', sa.String(length=80), nullable=True),
        sa.Column('contract_address', sa.String(length=64), nullable=True),
        sa.Column('wallet_address', sa.String(length=64), nullable=False),
        sa.Column('transaction_hash', sa.String(length=80), nullable=True),
        sa.Column('block_number', sa.BigInteger(), nullable=True),
        sa.Column('exercise_type', sa.String(length=160), nullable=False),
        sa.Column('completion_score', sa.Float(), nullable=True),
        sa.Column('difficulty_level', sa.String(length=40), nullable=True),
        sa.Column('body_part', sa.String(length=80), nullable=True),
        sa.Column('rarity', sa.String(length=20), nullable=True),
        sa.Column('minted', sa.Boolean(), nullable=False),
        sa.Column('minted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('signer', sa.String(length=20), nullable=True),       # admin_key | user_wallet
        sa.Column('ai_generated', sa.Boolean(), nullable=False),
        sa.Column('image_prompt', sa.Text(), nullable=True),
        sa.Column('generation_model', sa.String(length=120), nullable=True),
        sa.Column('attributes', sa.JSON(), nullable=True),
        sa.Column('metadata_uri', sa.Text(), nullable=True),
        sa.Column('viewed_by_patient', sa.Boolean(), nullable=False),
        sa.Column('viewed_by_doctor', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['exercise_completion_id'], ['exercise_completions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_nfts_patient_id', 'nfts', ['patient_id'])
    op.create_index('ix_nfts_exercise_completion_id', 'nfts', ['exercise_completion_id'])
    op.create_index('ix_nfts_transaction_hash', 'nfts', ['transaction_hash'])


def downgrade():
    op.drop_table('nfts')
    op.drop_table('exercise_completions')
    op.drop_table('routine_exercises')
    op.drop_table('routines')
    op.drop_table('exercises')
    op.drop_table('patients')
    op.drop_table('doctors')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
