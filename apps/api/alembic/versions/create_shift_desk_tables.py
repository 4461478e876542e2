"""create shift desk tables

Revision ID: create_shift_desk
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = 'create_shift_desk'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

shift_timing = sa.Enum('evening', 'night', 'early_morning', name='shift_timing')
staff_status = sa.Enum('active', 'unavailable', 'inactive', name='staff_status')
application_status = sa.Enum('applied', 'withdrawn', 'approved', 'rejected', name='shift_application_status')
time_off_status = sa.Enum('pending', 'approved', 'denied', name='time_off_status')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'staff_members',
        sa.Column('staff_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('roles', JSONB(), nullable=False),
        sa.Column('worker_roles', JSONB(), nullable=True),
        sa.Column('staff_status', staff_status, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('staff_id')
    )
    op.create_index(op.f('ix_staff_members_email'), 'staff_members', ['email'], unique=True)
    op.create_index(op.f('ix_staff_members_staff_status'), 'staff_members', ['staff_status'], unique=False)

    op.create_table(
        'shift_templates',
        sa.Column('template_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', shift_timing, nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.PrimaryKeyConstraint('template_id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'shifts',
        sa.Column('shift_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('shift_date', sa.Date(), nullable=False),
        sa.Column('template_id', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['template_id'], ['shift_templates.template_id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('shift_id'),
        sa.UniqueConstraint('shift_date', 'template_id', name='uq_shifts_date_template')
    )
    op.create_index(op.f('ix_shifts_shift_date'), 'shifts', ['shift_date'], unique=False)

    op.create_table(
        'shift_requirements',
        sa.Column('requirement_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('shift_id', sa.Integer(), nullable=False),
        sa.Column('role_name', sa.String(length=100), nullable=False),
        sa.Column('required_count', sa.Integer(), nullable=False),
        sa.Column('filled_count', sa.Integer(), server_default='0', nullable=False),
        sa.CheckConstraint('required_count >= 0', name='ck_shift_requirements_required_count'),
        sa.CheckConstraint('filled_count >= 0', name='ck_shift_requirements_filled_count'),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.shift_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('requirement_id'),
        sa.UniqueConstraint('shift_id', 'role_name', name='uq_shift_requirements_shift_role')
    )
    op.create_index(op.f('ix_shift_requirements_shift_id'), 'shift_requirements', ['shift_id'], unique=False)
    op.create_index(op.f('ix_shift_requirements_role_name'), 'shift_requirements', ['role_name'], unique=False)

    op.create_table(
        'shift_applications',
        sa.Column('application_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('shift_id', sa.Integer(), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.Column('desired_requirement_id', sa.Integer(), nullable=True),
        sa.Column('status', application_status, nullable=False),
        sa.Column('applied_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.shift_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['staff_id'], ['staff_members.staff_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['desired_requirement_id'], ['shift_requirements.requirement_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('application_id')
    )
    op.create_index(op.f('ix_shift_applications_shift_id'), 'shift_applications', ['shift_id'], unique=False)
    op.create_index(op.f('ix_shift_applications_staff_id'), 'shift_applications', ['staff_id'], unique=False)
    op.create_index(op.f('ix_shift_applications_status'), 'shift_applications', ['status'], unique=False)

    op.create_table(
        'shift_assignments',
        sa.Column('assignment_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('shift_id', sa.Integer(), nullable=False),
        sa.Column('requirement_id', sa.Integer(), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.shift_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['requirement_id'], ['shift_requirements.requirement_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['staff_id'], ['staff_members.staff_id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('assignment_id'),
        sa.UniqueConstraint('shift_id', 'staff_id', name='uq_shift_assignments_shift_staff'),
        sa.UniqueConstraint('requirement_id', 'staff_id', name='uq_shift_assignments_requirement_staff')
    )
    op.create_index(op.f('ix_shift_assignments_staff_id'), 'shift_assignments', ['staff_id'], unique=False)
    op.create_index('ix_shift_assignments_shift_requirement', 'shift_assignments', ['shift_id', 'requirement_id'], unique=False)

    op.create_table(
        'time_off_requests',
        sa.Column('time_off_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', time_off_status, nullable=False),
        sa.Column('manager_id', sa.Integer(), nullable=True),
        sa.Column('requested_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['staff_id'], ['staff_members.staff_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['manager_id'], ['staff_members.staff_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('time_off_id')
    )
    op.create_index(op.f('ix_time_off_requests_staff_id'), 'time_off_requests', ['staff_id'], unique=False)
    op.create_index(op.f('ix_time_off_requests_status'), 'time_off_requests', ['status'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_time_off_requests_status'), table_name='time_off_requests')
    op.drop_index(op.f('ix_time_off_requests_staff_id'), table_name='time_off_requests')
    op.drop_table('time_off_requests')
    op.drop_index('ix_shift_assignments_shift_requirement', table_name='shift_assignments')
    op.drop_index(op.f('ix_shift_assignments_staff_id'), table_name='shift_assignments')
    op.drop_table('shift_assignments')
    op.drop_index(op.f('ix_shift_applications_status'), table_name='shift_applications')
    op.drop_index(op.f('ix_shift_applications_staff_id'), table_name='shift_applications')
    op.drop_index(op.f('ix_shift_applications_shift_id'), table_name='shift_applications')
    op.drop_table('shift_applications')
    op.drop_index(op.f('ix_shift_requirements_role_name'), table_name='shift_requirements')
    op.drop_index(op.f('ix_shift_requirements_shift_id'), table_name='shift_requirements')
    op.drop_table('shift_requirements')
    op.drop_index(op.f('ix_shifts_shift_date'), table_name='shifts')
    op.drop_table('shifts')
    op.drop_table('shift_templates')
    op.drop_index(op.f('ix_staff_members_staff_status'), table_name='staff_members')
    op.drop_index(op.f('ix_staff_members_email'), table_name='staff_members')
    op.drop_table('staff_members')

    for enum_type in (time_off_status, application_status, staff_status, shift_timing):
        enum_type.drop(op.get_bind(), checkfirst=True)
