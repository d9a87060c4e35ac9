"""add ratings table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "003"
down_revision = "002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("from_player_id", sa.Integer(), nullable=False),
        sa.Column("to_player_id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("stars", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(length=200), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.CheckConstraint("stars >= 1 AND stars <= 5", name="ck_rating_stars_range"),
        sa.CheckConstraint("from_player_id <> to_player_id", name="ck_rating_not_self"),
        sa.ForeignKeyConstraint(["from_player_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["to_player_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["group_id"], ["group_ads.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "from_player_id", "to_player_id", "group_id", name="uq_rating_from_to_group"
        ),
    )
    op.create_index(op.f("ix_ratings_id"), "ratings", ["id"], unique=False)
    op.create_index(op.f("ix_ratings_from_player_id"), "ratings", ["from_player_id"], unique=False)
    op.create_index(op.f("ix_ratings_to_player_id"), "ratings", ["to_player_id"], unique=False)
    op.create_index(op.f("ix_ratings_group_id"), "ratings", ["group_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_ratings_group_id"), table_name="ratings")
    op.drop_index(op.f("ix_ratings_to_player_id"), table_name="ratings")
    op.drop_index(op.f("ix_ratings_from_player_id"), table_name="ratings")
    op.drop_index(op.f("ix_ratings_id"), table_name="ratings")
    op.drop_table("ratings")
