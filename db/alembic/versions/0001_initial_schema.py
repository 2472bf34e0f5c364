"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        _created_at(),
        sa.Column("provider", sa.String(length=40), nullable=False),
        sa.Column("provider_account_id", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255)),
        sa.Column("name", sa.String(length=160)),
        sa.Column("image", sa.Text),
        sa.UniqueConstraint(
            "provider", "provider_account_id", name="uq_users_provider_account"
        ),
    )

    op.create_table(
        "monsters",
        sa.Column("id", sa.Integer, primary_key=True),
        _created_at(),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("slug", sa.String(length=160), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("armor_class", sa.Integer, nullable=False),
        sa.Column("armor_type", sa.String(length=120)),
        sa.Column("hit_points", sa.Integer, nullable=False),
        sa.Column("attacks", sa.Text, nullable=False),
        sa.Column("movement", sa.String(length=120), nullable=False),
        sa.Column("strength", sa.Integer, nullable=False),
        sa.Column("dexterity", sa.Integer, nullable=False),
        sa.Column("constitution", sa.Integer, nullable=False),
        sa.Column("intelligence", sa.Integer, nullable=False),
        sa.Column("wisdom", sa.Integer, nullable=False),
        sa.Column("charisma", sa.Integer, nullable=False),
        sa.Column("alignment", sa.String(length=1), nullable=False),
        sa.Column("level", sa.Integer, nullable=False),
        sa.Column("traits", postgresql.JSONB, nullable=False),
    )
    op.create_index("ix_monsters_name", "monsters", ["name"])
    op.create_index("ix_monsters_level", "monsters", ["level"])

    op.create_table(
        "spells",
        sa.Column("id", sa.Integer, primary_key=True),
        _created_at(),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("slug", sa.String(length=160), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("classes", postgresql.JSONB, nullable=False),
        sa.Column("duration", sa.String(length=120), nullable=False),
        sa.Column("range", sa.String(length=120), nullable=False),
        sa.Column("tier", sa.String(length=2), nullable=False),
    )
    op.create_index("ix_spells_name", "spells", ["name"])
    op.create_index("ix_spells_tier", "spells", ["tier"])

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer, primary_key=True),
        _created_at(),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=160), nullable=False),
        sa.Column("avatar_url", sa.Text),
        sa.Column("favorite_tables_preferences", postgresql.JSONB),
        sa.Column("theme_preference", sa.String(length=40)),
    )


def downgrade() -> None:
    op.drop_table("user_profiles")
    op.drop_index("ix_spells_tier", table_name="spells")
    op.drop_index("ix_spells_name", table_name="spells")
    op.drop_table("spells")
    op.drop_index("ix_monsters_level", table_name="monsters")
    op.drop_index("ix_monsters_name", table_name="monsters")
    op.drop_table("monsters")
    op.drop_table("users")
