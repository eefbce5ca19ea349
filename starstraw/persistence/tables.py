"""SQLAlchemy Core table definitions.

Single source of truth for the database schema. Used by Alembic for
migrations and by PostgresRepository for queries.
"""

import sqlalchemy as sa

metadata = sa.MetaData()

profiles = sa.Table(
    "sr_profiles",
    metadata,
    # SHA-256 hex digest of the account id
    sa.Column("id", sa.String, primary_key=True),
    sa.Column("username", sa.String, unique=True, nullable=False),
    sa.Column("metadata", sa.JSON, nullable=False),
    # Ordered list; order decides the effective title
    sa.Column("skills", sa.JSON, nullable=False),
    sa.Column(
        "joined",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    ),
)
