"""create newsletter digest tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 09:12:31.204117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'newsletters',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('message_id', sa.String(length=255), nullable=False),
        sa.Column('sender_address', sa.String(length=320), nullable=False),
        sa.Column('sender_name', sa.String(length=255), nullable=True),
        sa.Column('subject', sa.String(length=1000), nullable=False),
        sa.Column('received_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('body_text', sa.Text(), nullable=True),
        sa.Column('body_html', sa.Text(), nullable=True),
        sa.Column('extracted_content', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('topics', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('is_processed', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_newsletters')),
        sa.UniqueConstraint('message_id', name=op.f('uq_newsletters_message_id')),
    )
    op.create_index('idx_newsletters_received_at', 'newsletters', ['received_at'], unique=False)
    op.create_index('idx_newsletters_is_processed', 'newsletters', ['is_processed'], unique=False)

    op.create_table(
        'digest_schedules',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('topics', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('cron_schedule', sa.String(length=100), nullable=False),
        sa.Column('delivery_email', sa.String(length=320), nullable=False),
        sa.Column('summary_length', sa.String(length=20), nullable=False),
        sa.Column('include_links', sa.Boolean(), nullable=False),
        sa.Column('custom_prompt', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_run_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('next_run_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_digest_schedules')),
    )
    op.create_index(
        'idx_digest_schedules_next_run',
        'digest_schedules',
        ['next_run_at', 'is_active'],
        unique=False,
    )

    op.create_table(
        'processing_runs',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('run_type', sa.String(length=30), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('triggered_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('newsletter_count', sa.Integer(), nullable=False),
        sa.Column('newsletter_ids', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('summary_html', sa.Text(), nullable=True),
        sa.Column('summary_text', sa.Text(), nullable=True),
        sa.Column('sent_to_email', sa.String(length=320), nullable=True),
        sa.Column('provider_message_id', sa.String(length=255), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('schedule_id', sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(
            ['schedule_id'],
            ['digest_schedules.id'],
            name=op.f('fk_processing_runs_schedule_id'),
            ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_processing_runs')),
    )
    op.create_index('idx_processing_runs_status', 'processing_runs', ['status'], unique=False)
    op.create_index('idx_processing_runs_triggered_at', 'processing_runs', ['triggered_at'], unique=False)
    op.create_index('idx_processing_runs_schedule_id', 'processing_runs', ['schedule_id'], unique=False)

    op.create_table(
        'preferences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('delivery_email', sa.String(length=320), nullable=False),
        sa.Column('interests', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('format_preference', sa.String(length=20), nullable=False),
        sa.Column('summary_length', sa.String(length=20), nullable=False),
        sa.Column('include_links', sa.Boolean(), nullable=False),
        sa.Column('custom_prompt', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('id = 1', name=op.f('ck_preferences_single_row')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_preferences')),
    )

    op.create_table(
        'api_keys',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('key_hash', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_api_keys')),
        sa.UniqueConstraint('key_hash', name=op.f('uq_api_keys_key_hash')),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('api_keys')
    op.drop_table('preferences')
    op.drop_index('idx_processing_runs_schedule_id', table_name='processing_runs')
    op.drop_index('idx_processing_runs_triggered_at', table_name='processing_runs')
    op.drop_index('idx_processing_runs_status', table_name='processing_runs')
    op.drop_table('processing_runs')
    op.drop_index('idx_digest_schedules_next_run', table_name='digest_schedules')
    op.drop_table('digest_schedules')
    op.drop_index('idx_newsletters_is_processed', table_name='newsletters')
    op.drop_index('idx_newsletters_received_at', table_name='newsletters')
    op.drop_table('newsletters')
