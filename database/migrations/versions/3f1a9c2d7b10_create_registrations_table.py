"""Create registrations table

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1a9c2d7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'registrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('college_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('course_of_study', sa.String(length=255), nullable=False),
        sa.Column('whatsapp_number', sa.String(length=10), nullable=False),
        sa.Column('selected_events', sa.JSON(), nullable=False),
        sa.Column('transaction_id', sa.String(length=255), nullable=False),
        sa.Column('payment_proof_url', sa.String(length=2048), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    # Уникальные индексы - единственная защита от дубликатов при гонке
    op.create_index(op.f('ix_registrations_id'), 'registrations', ['id'], unique=False)
    op.create_index(op.f('ix_registrations_email'), 'registrations', ['email'], unique=True)
    op.create_index(op.f('ix_registrations_transaction_id'), 'registrations', ['transaction_id'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_registrations_transaction_id'), table_name='registrations')
    op.drop_index(op.f('ix_registrations_email'), table_name='registrations')
    op.drop_index(op.f('ix_registrations_id'), table_name='registrations')
    op.drop_table('registrations')
