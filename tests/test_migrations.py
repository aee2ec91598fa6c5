import os
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from app.craftops.db.models import Base


def _run_migrations(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


def test_migrations_create_every_mapped_table(tmp_path: Path):
    database_url = f"sqlite+pysqlite:///{tmp_path / 'migrations.db'}"
    _run_migrations(database_url)

    inspector = inspect(create_engine(database_url, future=True))
    tables = set(inspector.get_table_names())

    assert set(Base.metadata.tables) <= tables

    transfer_columns = {column["name"] for column in inspector.get_columns("raw_material_transfers")}
    assert {"quantity_issued", "quantity_approved", "quantity_rejected", "version"} <= transfer_columns

    unique_names = {constraint["name"] for constraint in inspector.get_unique_constraints("user_inventories")}
    assert "uq_user_inventory_user_material" in unique_names

    index_names = {index["name"] for index in inspector.get_indexes("raw_material_transfers")}
    assert "ix_transfers_user_status" in index_names


def test_migrations_downgrade_to_base(tmp_path: Path):
    database_url = f"sqlite+pysqlite:///{tmp_path / 'downgrade.db'}"
    _run_migrations(database_url)

    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.downgrade(config, "base")

    tables = set(inspect(create_engine(database_url, future=True)).get_table_names())
    assert "raw_material_transfers" not in tables
    assert "vendor_credit_notes" not in tables
