"""Create matter, document, revision, activity catalog, audit and file_transfer tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

ACTIVITY_TABLES = ('matter_activity', 'document_activity', 'revision_activity', 'matter_document_activity')

# Catalog ids are fixed across environments (first digit = family)
ACTIVITY_SEED = {
    'revision_activity': [
        ('10000000-0000-0000-0000-000000000001', 'CREATED'),
        ('10000000-0000-0000-0000-000000000002', 'DELETED'),
        ('10000000-0000-0000-0000-000000000003', 'RESTORED'),
        ('10000000-0000-0000-0000-000000000004', 'SAVED'),
    ],
    'document_activity': [
        ('20000000-0000-0000-0000-000000000001', 'CHECKED IN'),
        ('20000000-0000-0000-0000-000000000002', 'CHECKED OUT'),
        ('20000000-0000-0000-0000-000000000003', 'CREATED'),
        ('20000000-0000-0000-0000-000000000004', 'DELETED'),
        ('20000000-0000-0000-0000-000000000005', 'RESTORED'),
        ('20000000-0000-0000-0000-000000000006', 'SAVED'),
    ],
    'matter_activity': [
        ('30000000-0000-0000-0000-000000000001', 'ARCHIVED'),
        ('30000000-0000-0000-0000-000000000002', 'CREATED'),
        ('30000000-0000-0000-0000-000000000003', 'DELETED'),
        ('30000000-0000-0000-0000-000000000004', 'RESTORED'),
        ('30000000-0000-0000-0000-000000000005', 'UNARCHIVED'),
        ('30000000-0000-0000-0000-000000000006', 'VIEWED'),
        ('30000000-0000-0000-0000-000000000007', 'SAVED'),
    ],
    'matter_document_activity': [
        ('40000000-0000-0000-0000-000000000001', 'COPIED'),
        ('40000000-0000-0000-0000-000000000002', 'MOVED'),
    ],
}


def _id_column():
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _uuid_column(name):
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=False)


def _timestamp_column(name):
    return sa.Column(name, sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False)


def upgrade():
    # Core entities
    op.create_table(
        'matter',
        _id_column(),
        sa.Column('description', sa.String(128), nullable=False),
        sa.Column('is_archived', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        _timestamp_column('creation_date'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('description', name='uq_matter_description'),
    )
    op.create_index('ix_matter_is_archived_is_deleted', 'matter', ['is_archived', 'is_deleted'])
    op.create_index('ix_matter_creation_date', 'matter', ['creation_date'])

    op.create_table(
        'user',
        _id_column(),
        sa.Column('name', sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_user_name'),
    )

    op.create_table(
        'document',
        _id_column(),
        _uuid_column('matter_id'),
        sa.Column('file_name', sa.String(128), nullable=False),
        sa.Column('extension', sa.String(5), nullable=False),
        sa.Column('is_checked_out', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        _timestamp_column('creation_date'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['matter_id'], ['matter.id'], ondelete='RESTRICT'),
    )
    op.create_index('ix_document_matter_id', 'document', ['matter_id'])
    op.create_index('ix_document_matter_id_is_deleted', 'document', ['matter_id', 'is_deleted'])

    op.create_table(
        'revision',
        _id_column(),
        _uuid_column('document_id'),
        sa.Column('revision_number', sa.Integer(), nullable=False),
        _timestamp_column('creation_date'),
        _timestamp_column('modification_date'),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['document_id'], ['document.id'], ondelete='RESTRICT'),
        sa.CheckConstraint('revision_number >= 1', name='ck_revision_number_positive'),
    )
    op.create_index('ix_revision_document_id_revision_number', 'revision', ['document_id', 'revision_number'])

    # Activity catalog
    for table in ACTIVITY_TABLES:
        op.create_table(
            table,
            sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
            sa.Column('activity', sa.String(50), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('activity', name=f'uq_{table}_activity'),
        )

    # Audit records (append-only)
    for subject in ('matter', 'document', 'revision'):
        table = f'{subject}_activity_user'
        op.create_table(
            table,
            _id_column(),
            _uuid_column(f'{subject}_id'),
            _uuid_column(f'{subject}_activity_id'),
            _uuid_column('user_id'),
            _timestamp_column('created_at'),
            sa.PrimaryKeyConstraint('id'),
            sa.ForeignKeyConstraint([f'{subject}_id'], [f'{subject}.id'], ondelete='RESTRICT'),
            sa.ForeignKeyConstraint([f'{subject}_activity_id'], [f'{subject}_activity.id'], ondelete='RESTRICT'),
            sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='RESTRICT'),
        )
        op.create_index(f'ix_{table}_{subject}_id_created_at', table, [f'{subject}_id', 'created_at'])

    for direction in ('from', 'to'):
        table = f'matter_document_activity_user_{direction}'
        op.create_table(
            table,
            _id_column(),
            _uuid_column('matter_id'),
            _uuid_column('document_id'),
            _uuid_column('matter_document_activity_id'),
            _uuid_column('user_id'),
            _timestamp_column('created_at'),
            sa.PrimaryKeyConstraint('id'),
            sa.ForeignKeyConstraint(['matter_id'], ['matter.id'], ondelete='RESTRICT'),
            sa.ForeignKeyConstraint(['document_id'], ['document.id'], ondelete='RESTRICT'),
            sa.ForeignKeyConstraint(
                ['matter_document_activity_id'], ['matter_document_activity.id'], ondelete='RESTRICT'
            ),
            sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='RESTRICT'),
        )
        op.create_index(f'ix_md_activity_user_{direction}_matter_id', table, ['matter_id'])
        op.create_index(f'ix_md_activity_user_{direction}_document_id', table, ['document_id'])

    # Transfer journal (enum columns store member names)
    op.create_table(
        'file_transfer',
        _id_column(),
        sa.Column('operation', sa.String(16), nullable=False),
        _uuid_column('document_id'),
        _uuid_column('target_document_id'),
        _uuid_column('source_matter_id'),
        _uuid_column('target_matter_id'),
        sa.Column('source_path', sa.String(1024), nullable=False),
        sa.Column('destination_path', sa.String(1024), nullable=False),
        sa.Column('status', sa.String(16), server_default='STAGED', nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('attempts', sa.Integer(), server_default='0', nullable=False),
        _timestamp_column('created_at'),
        _timestamp_column('updated_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['document_id'], ['document.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['target_document_id'], ['document.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['source_matter_id'], ['matter.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['target_matter_id'], ['matter.id'], ondelete='RESTRICT'),
        sa.CheckConstraint("operation IN ('MOVE', 'COPY')", name='ck_file_transfer_operation'),
        sa.CheckConstraint("status IN ('STAGED', 'COMPLETED', 'INCOMPLETE')", name='ck_file_transfer_status'),
    )
    op.create_index('ix_file_transfer_status', 'file_transfer', ['status'])
    op.create_index('ix_file_transfer_document_id', 'file_transfer', ['document_id'])

    # Seed the activity catalog
    for table, rows in ACTIVITY_SEED.items():
        catalog = sa.table(
            table,
            sa.column('id', postgresql.UUID(as_uuid=False)),
            sa.column('activity', sa.String()),
        )
        op.bulk_insert(catalog, [{'id': activity_id, 'activity': name} for activity_id, name in rows])


def downgrade():
    op.drop_table('file_transfer')
    op.drop_table('matter_document_activity_user_to')
    op.drop_table('matter_document_activity_user_from')
    op.drop_table('revision_activity_user')
    op.drop_table('document_activity_user')
    op.drop_table('matter_activity_user')
    for table in reversed(ACTIVITY_TABLES):
        op.drop_table(table)
    op.drop_table('revision')
    op.drop_table('document')
    op.drop_table('user')
    op.drop_table('matter')
