"""Initial migration

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create media_metadata table
    op.create_table(
        'media_metadata',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('contenthash', sa.String(40), nullable=False, unique=True, index=True),
        sa.Column('duration', sa.Float(), nullable=False, default=0.0),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('videostreams', sa.Integer(), nullable=False, default=0),
        sa.Column('audiostreams', sa.Integer(), nullable=False, default=0),
        sa.Column('size', sa.Integer(), nullable=False, default=0),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create conversions table
    op.create_table(
        'conversions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('pathnamehash', sa.String(40), nullable=False),
        sa.Column('contenthash', sa.String(40), nullable=False, index=True),
        sa.Column('status', sa.Integer(), nullable=False, default=201),
        sa.Column('transcoder_status', sa.Integer(), nullable=False, default=201),
        sa.Column('rekog_face_status', sa.Integer(), nullable=False, default=201),
        sa.Column('rekog_moderation_status', sa.Integer(), nullable=False, default=201),
        sa.Column('rekog_label_status', sa.Integer(), nullable=False, default=201),
        sa.Column('rekog_person_status', sa.Integer(), nullable=False, default=201),
        sa.Column('transcribe_status', sa.Integer(), nullable=False, default=201),
        sa.Column('timecreated', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('timecompleted', sa.DateTime(timezone=True), nullable=True),
    )

    # Create conversion_presets table
    op.create_table(
        'conversion_presets',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('convid', sa.Integer(), sa.ForeignKey('conversions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('preset', sa.String(255), nullable=False),
    )

    # Create files table
    op.create_table(
        'files',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('contenthash', sa.String(40), nullable=False, index=True),
        sa.Column('pathnamehash', sa.String(40), nullable=False),
        sa.Column('component', sa.String(100), nullable=False),
        sa.Column('filearea', sa.String(50), nullable=False),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('mimetype', sa.String(100), nullable=True),
        sa.Column('filesize', sa.Integer(), nullable=False, default=0),
        sa.Column('timecreated', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create report_values table
    op.create_table(
        'report_values',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True, index=True),
        sa.Column('value', sa.Text(), nullable=True),
    )

    # Create report_overview table
    op.create_table(
        'report_overview',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('contenthash', sa.String(40), nullable=False, index=True),
        sa.Column('type', sa.String(10), nullable=False),
        sa.Column('format', sa.String(100), nullable=True),
        sa.Column('resolution', sa.String(50), nullable=False),
        sa.Column('duration', sa.Float(), nullable=False),
        sa.Column('filesize', sa.Integer(), nullable=False),
        sa.Column('cost', sa.Float(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, index=True),
        sa.Column('files', sa.Integer(), nullable=False),
        sa.Column('timecreated', sa.DateTime(timezone=True), nullable=True),
        sa.Column('timecompleted', sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('report_overview')
    op.drop_table('report_values')
    op.drop_table('files')
    op.drop_table('conversion_presets')
    op.drop_table('conversions')
    op.drop_table('media_metadata')
