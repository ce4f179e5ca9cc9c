"""create sightings

Revision ID: 3b1e7c9d2a40
Revises:
Create Date: 2026-10-17

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3b1e7c9d2a40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "sightings_sighting",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("rare", sa.Boolean(), nullable=False),
        sa.Column("common_name", sa.String(length=255), nullable=False),
        sa.Column("scientific_name", sa.String(length=255), nullable=False),
        sa.Column("date_reported", sa.DateTime(timezone=False), nullable=False),
        sa.Column("reported_by", sa.String(length=255), nullable=False),
        sa.Column("location_name", sa.String(length=512), nullable=False),
        sa.Column("lat", sa.Numeric(9, 6), nullable=False),
        sa.Column("lng", sa.Numeric(9, 6), nullable=False),
        sa.Column("map_link", sa.Text(), nullable=False),
        sa.Column("checklist_link", sa.Text(), nullable=False),
        sa.UniqueConstraint(
            "common_name",
            "scientific_name",
            "date_reported",
            "reported_by",
            "location_name",
            name="uq_sighting_natural_key",
        ),
    )
    op.create_index("ix_sightings_sighting_rare", "sightings_sighting", ["rare"])
    op.create_index("ix_sightings_sighting_common_name", "sightings_sighting", ["common_name"])
    op.create_index("ix_sightings_sighting_date_reported", "sightings_sighting", ["date_reported"])


def downgrade() -> None:
    op.drop_index("ix_sightings_sighting_date_reported", table_name="sightings_sighting")
    op.drop_index("ix_sightings_sighting_common_name", table_name="sightings_sighting")
    op.drop_index("ix_sightings_sighting_rare", table_name="sightings_sighting")
    op.drop_table("sightings_sighting")
