"""Create images table

Revision ID: 4e1b7c2a9d10
Revises:
Create Date: 2026-10-18 09:00:00.000000+09:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4e1b7c2a9d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENTITY_TYPES = ('listing', 'crafts_listing', 'project_listing', 'user', 'business')


def upgrade() -> None:
    op.create_table(
        'images',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('storage_key', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('size_bytes', sa.Integer(), nullable=False),
        sa.Column('width', sa.Integer(), nullable=False),
        sa.Column('height', sa.Integer(), nullable=False),
        sa.Column('format', sa.String(length=50), nullable=False),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('alt_text', sa.String(length=255), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('uploader_id', sa.Uuid(), nullable=False),
        sa.Column(
            'entity_type',
            sa.Enum(*ENTITY_TYPES, name='entitytype', native_enum=False, length=50),
            nullable=True,
        ),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('storage_key'),
        sa.CheckConstraint(
            '(entity_type IS NULL) = (entity_id IS NULL)',
            name='ck_images_entity_pair',
        ),
    )
    op.create_index('ix_images_uploader_id', 'images', ['uploader_id'])
    op.create_index('idx_images_uploader_created', 'images', ['uploader_id', 'created_at'])
    op.create_index('idx_images_entity', 'images', ['entity_type', 'entity_id'])


def downgrade() -> None:
    op.drop_index('idx_images_entity', table_name='images')
    op.drop_index('idx_images_uploader_created', table_name='images')
    op.drop_index('ix_images_uploader_id', table_name='images')
    op.drop_table('images')
