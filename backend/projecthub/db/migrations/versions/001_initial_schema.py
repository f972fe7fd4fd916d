"""
Initial Schema

Profiles, projects with their members, tasks, files, activity and team
chat.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create every table."""
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('full_name', sa.String(100), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('bio', sa.String(500), nullable=True),
        sa.Column('role', sa.String(16), nullable=False, server_default='user'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("role IN ('user', 'admin')", name='ck_profiles_role'),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    op.create_table(
        'projects',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('project_type', sa.String(32), nullable=False),
        sa.Column('status', sa.String(16), nullable=False, server_default='planning'),
        sa.Column('visibility', sa.String(16), nullable=False, server_default='private'),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('budget', sa.Numeric(12, 2), nullable=True),
        sa.Column('funding_source', sa.String(255), nullable=True),
        sa.Column('cover_image_url', sa.Text(), nullable=True),
        sa.Column('progress_percentage', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.CheckConstraint(
            "project_type IN ('Academic & Research', 'Corporate/Business', "
            "'EU-Funded Project', 'Public Initiative', 'Personal/Other')",
            name='ck_projects_type',
        ),
        sa.CheckConstraint(
            "status IN ('planning', 'active', 'completed', 'paused', 'archived')",
            name='ck_projects_status',
        ),
        sa.CheckConstraint("visibility IN ('public', 'private')", name='ck_projects_visibility'),
        sa.CheckConstraint(
            'progress_percentage >= 0 AND progress_percentage <= 100',
            name='ck_projects_progress',
        ),
    )
    op.create_index('ix_projects_user_id', 'projects', ['user_id'])

    op.create_table(
        'project_members',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('project_id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('role', sa.String(16), nullable=False, server_default='member'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('project_id', 'user_id', name='uq_project_members_project_user'),
        sa.CheckConstraint("role IN ('owner', 'member')", name='ck_project_members_role'),
    )
    op.create_index('ix_project_members_project_id', 'project_members', ['project_id'])
    op.create_index('ix_project_members_user_id', 'project_members', ['user_id'])

    op.create_table(
        'tasks',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('project_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='todo'),
        sa.Column('priority', sa.String(16), nullable=False, server_default='medium'),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('assigned_to', sa.String(64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assigned_to'], ['profiles.id'], ondelete='SET NULL'),
        sa.CheckConstraint("status IN ('todo', 'in_progress', 'done')", name='ck_tasks_status'),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high')", name='ck_tasks_priority'),
    )
    op.create_index('ix_tasks_project_id', 'tasks', ['project_id'])

    op.create_table(
        'project_files',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('project_id', sa.String(64), nullable=False),
        sa.Column('task_id', sa.String(64), nullable=True),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('file_url', sa.Text(), nullable=False),
        sa.Column('file_type', sa.String(127), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=True),
        sa.Column('category', sa.String(16), nullable=False, server_default='other'),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('uploaded_by', sa.String(64), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['uploaded_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "category IN ('image', 'document', 'deliverable', 'report', 'other')",
            name='ck_project_files_category',
        ),
    )
    op.create_index('ix_project_files_project_id', 'project_files', ['project_id'])

    op.create_table(
        'project_updates',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('project_id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=True),
        sa.Column('update_type', sa.String(32), nullable=False, server_default='general'),
        sa.Column('update_text', sa.Text(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "update_type IN ('general', 'milestone', 'task_completed', 'task_created', "
            "'task_assigned', 'file_uploaded', 'status_changed', 'member_added', "
            "'member_removed')",
            name='ck_project_updates_type',
        ),
    )
    op.create_index('ix_project_updates_project_id', 'project_updates', ['project_id'])
    op.create_index('ix_project_updates_created_at', 'project_updates', ['created_at'])

    op.create_table(
        'chat_rooms',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('room_type', sa.String(16), nullable=False),
        sa.Column('project_id', sa.String(64), nullable=True),
        sa.Column('created_by', sa.String(64), nullable=False),
        sa.Column('last_message_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id'], ondelete='CASCADE'),
        sa.CheckConstraint(
            "room_type IN ('project', 'direct', 'group')",
            name='ck_chat_rooms_type',
        ),
    )
    op.create_index('ix_chat_rooms_project_id', 'chat_rooms', ['project_id'])

    op.create_table(
        'chat_participants',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('room_id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_read_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['room_id'], ['chat_rooms.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('room_id', 'user_id', name='uq_chat_participants_room_user'),
    )
    op.create_index('ix_chat_participants_room_id', 'chat_participants', ['room_id'])
    op.create_index('ix_chat_participants_user_id', 'chat_participants', ['user_id'])

    op.create_table(
        'chat_messages',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('room_id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('reply_to_id', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['room_id'], ['chat_rooms.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reply_to_id'], ['chat_messages.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_chat_messages_room_id', 'chat_messages', ['room_id'])
    op.create_index('ix_chat_messages_created_at', 'chat_messages', ['created_at'])


def downgrade() -> None:
    """Drop every table, children first."""
    op.drop_table('chat_messages')
    op.drop_table('chat_participants')
    op.drop_table('chat_rooms')
    op.drop_table('project_updates')
    op.drop_table('project_files')
    op.drop_table('tasks')
    op.drop_table('project_members')
    op.drop_table('projects')
    op.drop_table('profiles')
