"""manufacturing core: users, raw materials, user inventory, transfers

Revision ID: 0001_manufacturing_core
Revises:
Create Date: 2025-01-06 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_manufacturing_core"
down_revision = None
branch_labels = None
depends_on = None


class GUID(sa.TypeDecorator):
    impl = sa.CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(sa.CHAR(36))


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False, server_default="user"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "raw_materials",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False, server_default="0"),
        sa.Column("unit", sa.String(length=50), nullable=False, server_default="pcs"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("quantity >= 0", name="ck_raw_materials_quantity_non_negative"),
    )

    op.create_table(
        "user_inventories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("raw_material_id", sa.Integer(), sa.ForeignKey("raw_materials.id"), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False, server_default="0"),
        sa.Column("unit", sa.String(length=50), nullable=False, server_default="pcs"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("user_id", "raw_material_id", name="uq_user_inventory_user_material"),
        sa.CheckConstraint("quantity >= 0", name="ck_user_inventories_quantity_non_negative"),
    )
    op.create_index("ix_user_inventories_user_id", "user_inventories", ["user_id"])
    op.create_index("ix_user_inventories_raw_material_id", "user_inventories", ["raw_material_id"])

    op.create_table(
        "raw_material_transfers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("raw_material_id", sa.Integer(), sa.ForeignKey("raw_materials.id"), nullable=False),
        sa.Column("quantity_issued", sa.Float(), nullable=False),
        sa.Column("quantity_approved", sa.Float(), nullable=False, server_default="0"),
        sa.Column("quantity_rejected", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="SENT"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("rejection_images", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_raw_material_transfers_user_id", "raw_material_transfers", ["user_id"])
    op.create_index("ix_raw_material_transfers_raw_material_id", "raw_material_transfers", ["raw_material_id"])
    op.create_index("ix_raw_material_transfers_status", "raw_material_transfers", ["status"])
    op.create_index("ix_transfers_user_status", "raw_material_transfers", ["user_id", "status"])


def downgrade() -> None:
    op.drop_index("ix_transfers_user_status", table_name="raw_material_transfers")
    op.drop_index("ix_raw_material_transfers_status", table_name="raw_material_transfers")
    op.drop_index("ix_raw_material_transfers_raw_material_id", table_name="raw_material_transfers")
    op.drop_index("ix_raw_material_transfers_user_id", table_name="raw_material_transfers")
    op.drop_table("raw_material_transfers")
    op.drop_index("ix_user_inventories_raw_material_id", table_name="user_inventories")
    op.drop_index("ix_user_inventories_user_id", table_name="user_inventories")
    op.drop_table("user_inventories")
    op.drop_table("raw_materials")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
