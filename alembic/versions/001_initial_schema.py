"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Detect database type
    bind = op.get_bind()
    is_sqlite = bind.dialect.name == 'sqlite'

    # Choose appropriate timestamp default
    timestamp_default = sa.text("(datetime('now'))") if is_sqlite else sa.text('now()')
    false_default = '0' if is_sqlite else 'false'

    # Directory: users and their approver assignments
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='UNASSIGNED'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'student_mentors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.String(length=36), nullable=False),
        sa.Column('mentor_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=timestamp_default),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['mentor_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_student_mentors_id', 'student_mentors', ['id'])
    # One approver per student
    op.create_index('ix_student_mentors_student_id', 'student_mentors', ['student_id'], unique=True)
    op.create_index('ix_student_mentors_mentor_id', 'student_mentors', ['mentor_id'])

    # Gate passes
    op.create_table(
        'gate_passes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('student_id', sa.String(length=36), nullable=False),
        sa.Column('mentor_id', sa.String(length=36), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'),
        sa.Column('token', sa.String(length=32), nullable=True),
        sa.Column('token_active', sa.Boolean(), nullable=False, server_default=false_default),
        sa.Column('applied_at', sa.DateTime(timezone=True), nullable=False, server_default=timestamp_default),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('token_issued_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('redeemed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['users.id']),
        sa.ForeignKeyConstraint(['mentor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_gate_passes_student_id', 'gate_passes', ['student_id'])
    op.create_index('ix_gate_passes_mentor_id', 'gate_passes', ['mentor_id'])
    op.create_index('ix_gate_passes_status', 'gate_passes', ['status'])
    op.create_index('ix_gate_passes_applied_at', 'gate_passes', ['applied_at'])
    # Checkpoint lookup path; uniqueness also guarantees no token is ever shared
    op.create_index('ix_gate_passes_token', 'gate_passes', ['token'], unique=True)
    # Composite index for common query: "pending passes for a mentor, newest first"
    op.create_index('ix_gate_passes_mentor_status_time', 'gate_passes', ['mentor_id', 'status', 'applied_at'])


def downgrade() -> None:
    op.drop_index('ix_gate_passes_mentor_status_time', table_name='gate_passes')
    op.drop_index('ix_gate_passes_token', table_name='gate_passes')
    op.drop_index('ix_gate_passes_applied_at', table_name='gate_passes')
    op.drop_index('ix_gate_passes_status', table_name='gate_passes')
    op.drop_index('ix_gate_passes_mentor_id', table_name='gate_passes')
    op.drop_index('ix_gate_passes_student_id', table_name='gate_passes')
    op.drop_table('gate_passes')
    op.drop_index('ix_student_mentors_mentor_id', table_name='student_mentors')
    op.drop_index('ix_student_mentors_student_id', table_name='student_mentors')
    op.drop_index('ix_student_mentors_id', table_name='student_mentors')
    op.drop_table('student_mentors')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
