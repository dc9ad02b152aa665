"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-09-01 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column('first_name', sa.String(255), nullable=False),
        sa.Column('last_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(320), nullable=False, unique=True),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(31), nullable=False),
        sa.Column('phone', sa.String(63)),
        sa.Column('address', sa.String(1024)),
        sa.Column('profile_picture', sa.String(2048), nullable=False, server_default=''),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('associated_ids', sa.JSON(), nullable=False),
        sa.CheckConstraint("role IN ('parent', 'teacher', 'admin')", name='ck_user_role'),
    )

    op.create_table(
        'student',
        sa.Column('id', sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column('student_id', sa.String(255), nullable=False, unique=True),
        sa.Column('first_name', sa.String(255), nullable=False),
        sa.Column('last_name', sa.String(255), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('grade', sa.String(63), nullable=False),
        sa.Column('section', sa.String(63)),
        sa.Column('subjects', sa.JSON(), nullable=False),
        sa.Column('profile_picture', sa.String(2048), nullable=False, server_default=''),
        sa.Column('enrollment_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    for name in ('student_parent', 'student_teacher'):
        op.create_table(
            name,
            sa.Column('student_id', sa.String(36), sa.ForeignKey('student.id', ondelete='CASCADE'), primary_key=True),
            sa.Column('user_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE'), primary_key=True),
        )

    op.create_table(
        'assignment',
        sa.Column('id', sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.String(16384)),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('teacher_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('max_grade', sa.Float(), nullable=False),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(31), nullable=False, server_default='published'),
        sa.CheckConstraint("status IN ('draft', 'published', 'closed')", name='ck_assignment_status'),
    )
    op.create_index('assignment_teacher_idx', 'assignment', ['teacher_id'])

    op.create_table(
        'assignment_student',
        sa.Column('assignment_id', sa.String(36), sa.ForeignKey('assignment.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('student_id', sa.String(36), sa.ForeignKey('student.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'grade',
        sa.Column('id', sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column('student_id', sa.String(36), sa.ForeignKey('student.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('teacher_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('assignment_id', sa.String(36), sa.ForeignKey('assignment.id', ondelete='SET NULL', onupdate='RESTRICT')),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('grade', sa.Float(), nullable=False),
        sa.Column('max_grade', sa.Float(), nullable=False),
        sa.Column('grade_type', sa.String(31), nullable=False, server_default='assignment'),
        sa.Column('comments', sa.String(4096)),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('grade >= 0 AND grade <= max_grade', name='ck_grade_bounds'),
        sa.CheckConstraint('max_grade > 0', name='ck_grade_max_grade'),
    )
    op.create_index('grade_student_date_idx', 'grade', ['student_id', 'date'])
    op.create_index('grade_teacher_idx', 'grade', ['teacher_id'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column('student_id', sa.String(36), sa.ForeignKey('student.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('teacher_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False, server_default=''),
        sa.Column('status', sa.String(31), nullable=False),
        sa.Column('notes', sa.String(4096)),
        sa.UniqueConstraint('student_id', 'date', 'subject', name='uq_attendance_student_date_subject'),
        sa.CheckConstraint("status IN ('present', 'absent', 'late', 'excused')", name='ck_attendance_status'),
    )
    op.create_index('attendance_teacher_idx', 'attendance', ['teacher_id'])

    op.create_table(
        'behavior',
        sa.Column('id', sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column('student_id', sa.String(36), sa.ForeignKey('student.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('teacher_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('type', sa.String(31), nullable=False),
        sa.Column('category', sa.String(31), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.String(16384), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('severity', sa.String(31), nullable=False, server_default='medium'),
        sa.Column('subject', sa.String(255)),
        sa.CheckConstraint("type IN ('positive', 'negative', 'neutral')", name='ck_behavior_type'),
        sa.CheckConstraint("severity IN ('low', 'medium', 'high')", name='ck_behavior_severity'),
    )
    op.create_index('behavior_student_date_idx', 'behavior', ['student_id', 'date'])
    op.create_index('behavior_teacher_idx', 'behavior', ['teacher_id'])

    op.create_table(
        'meeting',
        sa.Column('id', sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.String(16384)),
        sa.Column('parent_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('teacher_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('student_id', sa.String(36), sa.ForeignKey('student.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('scheduled_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('status', sa.String(31), nullable=False, server_default='pending'),
        sa.Column('location', sa.String(31), nullable=False, server_default='in-person'),
        sa.Column('meeting_link', sa.String(2048)),
        sa.Column('notes', sa.String(16384)),
        sa.Column('requested_by', sa.String(31), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'confirmed', 'cancelled', 'completed')", name='ck_meeting_status'),
        sa.CheckConstraint("requested_by IN ('parent', 'teacher')", name='ck_meeting_requested_by'),
    )
    op.create_index('meeting_parent_idx', 'meeting', ['parent_id'])
    op.create_index('meeting_teacher_idx', 'meeting', ['teacher_id'])

    op.create_table(
        'message',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sender_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('receiver_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('student_id', sa.String(36), sa.ForeignKey('student.id', ondelete='SET NULL', onupdate='RESTRICT')),
        sa.Column('subject', sa.String(255), nullable=False, server_default=''),
        sa.Column('content', sa.String(16384), nullable=False),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(timezone=True)),
    )
    op.create_index('msg_sender_receiver_created_idx', 'message', ['sender_id', 'receiver_id', 'created_at'])
    op.create_index('msg_receiver_read_idx', 'message', ['receiver_id', 'is_read'])

    op.create_table(
        'announcement',
        sa.Column('id', sa.String(36), primary_key=True),
        *_timestamps(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.String(16384), nullable=False),
        sa.Column('author_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False),
        sa.Column('target_audience', sa.String(31), nullable=False, server_default='all'),
        sa.Column('priority', sa.String(31), nullable=False, server_default='medium'),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('expires_at', sa.DateTime(timezone=True)),
        sa.CheckConstraint("target_audience IN ('all', 'parents', 'teachers', 'specific')", name='ck_announcement_audience'),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high', 'urgent')", name='ck_announcement_priority'),
    )

    op.create_table(
        'announcement_student',
        sa.Column('announcement_id', sa.String(36), sa.ForeignKey('announcement.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('student_id', sa.String(36), sa.ForeignKey('student.id', ondelete='CASCADE'), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table('announcement_student')
    op.drop_table('announcement')
    op.drop_index('msg_receiver_read_idx', table_name='message')
    op.drop_index('msg_sender_receiver_created_idx', table_name='message')
    op.drop_table('message')
    op.drop_index('meeting_teacher_idx', table_name='meeting')
    op.drop_index('meeting_parent_idx', table_name='meeting')
    op.drop_table('meeting')
    op.drop_index('behavior_teacher_idx', table_name='behavior')
    op.drop_index('behavior_student_date_idx', table_name='behavior')
    op.drop_table('behavior')
    op.drop_index('attendance_teacher_idx', table_name='attendance')
    op.drop_table('attendance')
    op.drop_index('grade_teacher_idx', table_name='grade')
    op.drop_index('grade_student_date_idx', table_name='grade')
    op.drop_table('grade')
    op.drop_table('assignment_student')
    op.drop_index('assignment_teacher_idx', table_name='assignment')
    op.drop_table('assignment')
    op.drop_table('student_teacher')
    op.drop_table('student_parent')
    op.drop_table('student')
    op.drop_table('user')
