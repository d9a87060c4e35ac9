"""add group_ads and group_matches tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "group_ads",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("host_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column(
            "objective",
            sa.Enum("collection", "pvp", name="groupobjective"),
            nullable=False,
        ),
        sa.Column("roles", sa.JSON(), nullable=False),
        sa.Column("max_members", sa.Integer(), nullable=False, server_default="4"),
        sa.Column(
            "status",
            sa.Enum("open", "in_progress", "closed", name="groupstatus"),
            nullable=False,
        ),
        sa.Column("filters", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["host_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_group_ads_id"), "group_ads", ["id"], unique=False)
    op.create_index(op.f("ix_group_ads_host_id"), "group_ads", ["host_id"], unique=False)
    op.create_index(op.f("ix_group_ads_status"), "group_ads", ["status"], unique=False)

    op.create_table(
        "group_matches",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("invited", "accepted", "declined", name="matchstatus"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["group_id"], ["group_ads.id"]),
        sa.ForeignKeyConstraint(["player_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "player_id", name="uq_group_match_group_player"),
    )
    op.create_index(op.f("ix_group_matches_id"), "group_matches", ["id"], unique=False)
    op.create_index(op.f("ix_group_matches_group_id"), "group_matches", ["group_id"], unique=False)
    op.create_index(op.f("ix_group_matches_player_id"), "group_matches", ["player_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_group_matches_player_id"), table_name="group_matches")
    op.drop_index(op.f("ix_group_matches_group_id"), table_name="group_matches")
    op.drop_index(op.f("ix_group_matches_id"), table_name="group_matches")
    op.drop_table("group_matches")
    op.drop_index(op.f("ix_group_ads_status"), table_name="group_ads")
    op.drop_index(op.f("ix_group_ads_host_id"), table_name="group_ads")
    op.drop_index(op.f("ix_group_ads_id"), table_name="group_ads")
    op.drop_table("group_ads")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS matchstatus")
        op.execute("DROP TYPE IF EXISTS groupstatus")
        op.execute("DROP TYPE IF EXISTS groupobjective")
