"""Add layout builder tables

Revision ID: 3f1a9c7d2b40
Revises:
Create Date: 2026-10-19 10:12:31.418203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c7d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Create view displays, content entities, field configs and the layout tempstore."""
    op.create_table(
        'entity_view_displays',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('target_entity_type', sa.String(length=64), nullable=False),
        sa.Column('bundle', sa.String(length=64), nullable=False),
        sa.Column('mode', sa.String(length=128), nullable=False),
        sa.Column('status', sa.Boolean(), nullable=False),
        sa.Column('third_party_settings', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('target_entity_type', 'bundle', 'mode', name='uq_entity_view_display_target'),
    )
    op.create_index(
        op.f('ix_entity_view_displays_target_entity_type'),
        'entity_view_displays',
        ['target_entity_type'],
        unique=False,
    )

    op.create_table(
        'content_entities',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('entity_type_id', sa.String(length=64), nullable=False),
        sa.Column('bundle', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('layout_sections', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
    )
    op.create_index(op.f('ix_content_entities_entity_type_id'), 'content_entities', ['entity_type_id'], unique=False)

    op.create_table(
        'field_configs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('entity_type_id', sa.String(length=64), nullable=False),
        sa.Column('bundle', sa.String(length=64), nullable=False),
        sa.Column('field_name', sa.String(length=128), nullable=False),
        sa.Column('field_type', sa.String(length=64), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entity_type_id', 'bundle', 'field_name', name='uq_field_config_bundle_field'),
    )
    op.create_index(op.f('ix_field_configs_entity_type_id'), 'field_configs', ['entity_type_id'], unique=False)

    op.create_table(
        'layout_tempstore',
        sa.Column('storage_type', sa.String(length=64), nullable=False),
        sa.Column('storage_id', sa.String(length=255), nullable=False),
        sa.Column('sections', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('storage_type', 'storage_id'),
    )


def downgrade() -> None:
    """Drop the layout builder tables."""
    op.drop_table('layout_tempstore')
    op.drop_index(op.f('ix_field_configs_entity_type_id'), table_name='field_configs')
    op.drop_table('field_configs')
    op.drop_index(op.f('ix_content_entities_entity_type_id'), table_name='content_entities')
    op.drop_table('content_entities')
    op.drop_index(op.f('ix_entity_view_displays_target_entity_type'), table_name='entity_view_displays')
    op.drop_table('entity_view_displays')
