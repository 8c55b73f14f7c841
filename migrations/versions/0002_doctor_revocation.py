"""doctor revocation: revoked_at and revoke_reason on doctors

Revision ID: 0002_doctor_revocation
Revises: 0001_initial
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0002_doctor_revocation"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table("doctors") as batch_op:
        batch_op.add_column(sa.Column("revoked_at", sa.DateTime(), nullable=True))
        batch_op.add_column(sa.Column("revoke_reason", sa.Text(), nullable=True))


def downgrade():
    with op.batch_alter_table("doctors") as batch_op:
        batch_op.drop_column("revoke_reason")
        batch_op.drop_column("revoked_at")
