"""One successful payment per gateway transaction

Revision ID: 8e2d4b6a1c37
Revises: 3c1f9a7d2b10
Create Date: 2026-10-18 15:40:12.902114
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8e2d4b6a1c37'
down_revision: Union[str, Sequence[str], None] = '3c1f9a7d2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_index(
        'uq_payments_gateway_reference_success',
        'payments',
        ['gateway_reference'],
        unique=True,
        postgresql_where=sa.text("status = 'success'"),
        sqlite_where=sa.text("status = 'success'"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('uq_payments_gateway_reference_success', table_name='payments')
