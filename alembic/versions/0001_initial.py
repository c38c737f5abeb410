"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    "user_role": ("visitor", "artist", "admin"),
    "visibility_type": ("private", "public"),
    "media_type": ("image", "gif", "video"),
}


def upgrade() -> None:
    # Create enums only if they don't exist (idempotent across retries)
    for name, values in ENUMS.items():
        labels = ", ".join(f"'{v}'" for v in values)
        op.execute(
            f"""
            DO $$
            BEGIN
                IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = '{name}') THEN
                    CREATE TYPE {name} AS ENUM ({labels});
                END IF;
            END$$;
            """
        )

    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True),
        sa.Column("nickname", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column(
            "role",
            postgresql.ENUM(*ENUMS["user_role"], name="user_role", create_type=False),
            nullable=False,
            server_default="visitor",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("LENGTH(nickname) BETWEEN 2 AND 50", name="users_nickname_len_check"),
    )

    op.create_table(
        "artworks",
        sa.Column("artwork_id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.user_id", name="artworks_user_id_fk", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("glb_url", sa.String(length=2048), nullable=False),
        sa.Column("thumbnail_url", sa.String(length=2048), nullable=True),
        sa.Column(
            "visibility",
            postgresql.ENUM(*ENUMS["visibility_type"], name="visibility_type", create_type=False),
            nullable=False,
            server_default="private",
        ),
        sa.Column("favorite_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("LENGTH(title) BETWEEN 1 AND 255", name="artworks_title_len_check"),
        sa.CheckConstraint("LENGTH(description) <= 1000", name="artworks_description_len_check"),
        sa.CheckConstraint("favorite_count >= 0", name="artworks_favorite_count_check"),
        sa.CheckConstraint("view_count >= 0", name="artworks_view_count_check"),
    )
    op.create_index("ix_artworks_user_id", "artworks", ["user_id"])

    op.create_table(
        "media",
        sa.Column("media_id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.user_id", name="media_user_id_fk", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "artwork_id",
            sa.Integer(),
            sa.ForeignKey("artworks.artwork_id", name="media_artwork_id_fk", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "media_type",
            postgresql.ENUM(*ENUMS["media_type"], name="media_type", create_type=False),
            nullable=False,
        ),
        sa.Column("file_url", sa.String(length=2048), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_media_artwork_id", "media", ["artwork_id"])

    op.create_table(
        "qr_codes",
        sa.Column("qr_id", sa.Integer(), primary_key=True),
        sa.Column(
            "artwork_id",
            sa.Integer(),
            sa.ForeignKey("artworks.artwork_id", name="qr_codes_artwork_id_fk", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("qr_token", sa.Uuid(), nullable=False),
        sa.Column("qr_image_url", sa.String(length=2048), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("qr_token", name="qr_codes_qr_token_uk"),
    )
    op.create_index("ix_qr_codes_artwork_id", "qr_codes", ["artwork_id"])
    # At most one active code per artwork; concurrent reissues fail here.
    op.create_index(
        "qr_codes_active_artwork_uk",
        "qr_codes",
        ["artwork_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "qr_scan_history",
        sa.Column("scan_id", sa.Integer(), primary_key=True),
        sa.Column(
            "qr_id",
            sa.Integer(),
            sa.ForeignKey("qr_codes.qr_id", name="qr_scan_history_qr_id_fk", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.user_id", name="qr_scan_history_user_id_fk", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("scanned_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_qr_scan_history_qr_id", "qr_scan_history", ["qr_id"])


def downgrade() -> None:
    op.drop_index("ix_qr_scan_history_qr_id", table_name="qr_scan_history")
    op.drop_table("qr_scan_history")
    op.drop_index("qr_codes_active_artwork_uk", table_name="qr_codes")
    op.drop_index("ix_qr_codes_artwork_id", table_name="qr_codes")
    op.drop_table("qr_codes")
    op.drop_index("ix_media_artwork_id", table_name="media")
    op.drop_table("media")
    op.drop_index("ix_artworks_user_id", table_name="artworks")
    op.drop_table("artworks")
    op.drop_table("users")

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
