"""Initial licensing workflow schema

Revision ID: 3c1f9a7d2b10
Revises:
Create Date: 2026-10-18 09:12:44.318205
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'applicants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('mobile_number', sa.String(length=20), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_applicants_id', 'applicants', ['id'])
    op.create_index('ix_applicants_email', 'applicants', ['email'], unique=True)

    op.create_table(
        'officers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('position_type', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_officers_id', 'officers', ['id'])
    op.create_index('ix_officers_role', 'officers', ['role'])

    op.create_table(
        'position_applications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_number', sa.String(length=20), nullable=True, unique=True),
        sa.Column('applicant_id', sa.Integer(), sa.ForeignKey('applicants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position_type', sa.Integer(), nullable=False),
        sa.Column('status', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('submission_round', sa.Integer(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('middle_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('mother_name', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('mobile_number', sa.String(length=20), nullable=True),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('blood_group', sa.String(length=10), nullable=True),
        sa.Column('height', sa.Numeric(5, 2), nullable=True),
        sa.Column('pan_number', sa.String(length=10), nullable=True),
        sa.Column('aadhar_number', sa.String(length=12), nullable=True),
        sa.Column('coa_number', sa.String(length=50), nullable=True),
        sa.Column('permanent_same_as_local', sa.Boolean(), nullable=False),
        sa.Column('fee_amount', sa.Integer(), nullable=False),
        sa.Column('payment_completed', sa.Boolean(), nullable=False),
        sa.Column('payment_completed_at', sa.DateTime(), nullable=True),
        sa.Column('payment_reference', sa.String(length=100), nullable=True),
        sa.Column('payment_amount', sa.Integer(), nullable=True),
        sa.Column('challan_number', sa.String(length=50), nullable=True),
        sa.Column('rejection_stage', sa.Integer(), nullable=True),
        sa.Column('rejected_by_role', sa.String(length=50), nullable=True),
        sa.Column('rejection_comments', sa.Text(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        sa.Column('certificate_number', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_position_applications_id', 'position_applications', ['id'])
    op.create_index('ix_position_applications_applicant_id', 'position_applications', ['applicant_id'])
    op.create_index('ix_position_applications_position_type', 'position_applications', ['position_type'])
    op.create_index('ix_position_applications_status', 'position_applications', ['status'])

    op.create_table(
        'application_addresses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('address_type', sa.String(length=20), nullable=False),
        sa.Column('address_line1', sa.String(length=500), nullable=False),
        sa.Column('address_line2', sa.String(length=500), nullable=True),
        sa.Column('address_line3', sa.String(length=500), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('state', sa.String(length=100), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False),
        sa.Column('pin_code', sa.String(length=10), nullable=False),
    )
    op.create_index('ix_application_addresses_application_id', 'application_addresses', ['application_id'])

    op.create_table(
        'application_qualifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('institute_name', sa.String(length=200), nullable=False),
        sa.Column('university_name', sa.String(length=200), nullable=False),
        sa.Column('specialization', sa.String(length=50), nullable=True),
        sa.Column('degree_name', sa.String(length=200), nullable=False),
        sa.Column('passing_month', sa.Integer(), nullable=True),
        sa.Column('year_of_passing', sa.Integer(), nullable=False),
    )
    op.create_index('ix_application_qualifications_application_id', 'application_qualifications', ['application_id'])

    op.create_table(
        'application_experiences',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_name', sa.String(length=200), nullable=False),
        sa.Column('position', sa.String(length=200), nullable=False),
        sa.Column('from_date', sa.Date(), nullable=False),
        sa.Column('to_date', sa.Date(), nullable=False),
    )
    op.create_index('ix_application_experiences_application_id', 'application_experiences', ['application_id'])

    op.create_table(
        'application_documents',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('document_type', sa.Integer(), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('content_type', sa.String(length=100), nullable=True),
        sa.Column('storage_handle', sa.String(length=64), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('verified_by', sa.Integer(), nullable=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('is_system_generated', sa.Boolean(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_application_documents_id', 'application_documents', ['id'])
    op.create_index('ix_application_documents_application_id', 'application_documents', ['application_id'])

    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('scheduled_by', sa.Integer(), nullable=False),
        sa.Column('review_date', sa.DateTime(), nullable=False),
        sa.Column('place', sa.String(length=200), nullable=False),
        sa.Column('contact_person', sa.String(length=200), nullable=False),
        sa.Column('room_number', sa.String(length=50), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_appointments_id', 'appointments', ['id'])
    op.create_index('ix_appointments_application_id', 'appointments', ['application_id'])

    op.create_table(
        'appointment_reschedules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('appointment_id', sa.Integer(), sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('previous_review_date', sa.DateTime(), nullable=False),
        sa.Column('new_review_date', sa.DateTime(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('rescheduled_by', sa.Integer(), nullable=False),
        sa.Column('rescheduled_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_appointment_reschedules_appointment_id', 'appointment_reschedules', ['appointment_id'])

    op.create_table(
        'signature_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('signer_role', sa.String(length=50), nullable=False),
        sa.Column('signer_id', sa.Integer(), nullable=False),
        sa.Column('stage_status', sa.Integer(), nullable=False),
        sa.Column('target_document', sa.Integer(), nullable=False),
        sa.Column('otp_hash', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('consumed_at', sa.DateTime(), nullable=True),
        sa.Column('invalidated_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_signature_sessions_application_id', 'signature_sessions', ['application_id'])

    op.create_table(
        'digital_signatures',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('signature_sessions.id'), nullable=False),
        sa.Column('signer_role', sa.String(length=50), nullable=False),
        sa.Column('signer_id', sa.Integer(), nullable=False),
        sa.Column('stage_status', sa.Integer(), nullable=False),
        sa.Column('submission_round', sa.Integer(), nullable=False),
        sa.Column('target_document', sa.Integer(), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('signed_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('application_id', 'stage_status', 'submission_round', name='uq_signature_per_stage_round'),
    )
    op.create_index('ix_digital_signatures_application_id', 'digital_signatures', ['application_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('payment_reference', sa.String(length=100), nullable=False),
        sa.Column('gateway_reference', sa.String(length=100), nullable=True),
        sa.Column('initiated_by', sa.String(length=50), nullable=True),
        sa.Column('payment_metadata', sa.JSON(), nullable=True),
        sa.Column('verification_data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_payments_application_id', 'payments', ['application_id'])
    op.create_index('ix_payments_payment_reference', 'payments', ['payment_reference'], unique=True)
    op.create_index('ix_payments_gateway_reference', 'payments', ['gateway_reference'])

    op.create_table(
        'certificates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('certificate_number', sa.String(length=50), nullable=False, unique=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=True),
        sa.Column('generated_at', sa.DateTime(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('requested_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_certificates_id', 'certificates', ['id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('applicant_id', sa.Integer(), sa.ForeignKey('applicants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=True),
        sa.Column('application_number', sa.String(length=20), nullable=True),
        sa.Column('notification_type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_applicant_id', 'notifications', ['applicant_id'])

    op.create_table(
        'application_status_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('position_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('from_status', sa.Integer(), nullable=True),
        sa.Column('to_status', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('actor_role', sa.String(length=50), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('changed_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_application_status_history_application_id', 'application_status_history', ['application_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('application_status_history')
    op.drop_table('notifications')
    op.drop_table('certificates')
    op.drop_table('payments')
    op.drop_table('digital_signatures')
    op.drop_table('signature_sessions')
    op.drop_table('appointment_reschedules')
    op.drop_table('appointments')
    op.drop_table('application_documents')
    op.drop_table('application_experiences')
    op.drop_table('application_qualifications')
    op.drop_table('application_addresses')
    op.drop_table('position_applications')
    op.drop_table('officers')
    op.drop_table('applicants')
