from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from tailor_shop.db.base import Base

ROOT = Path(__file__).resolve().parents[1]


def _alembic_config(database_url: str) -> Config:
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def test_upgrade_head_builds_the_model_schema(tmp_path) -> None:
    database_url = f"sqlite:///{tmp_path / 'migrated.db'}"
    command.upgrade(_alembic_config(database_url), "head")

    inspector = inspect(create_engine(database_url))
    assert set(inspector.get_table_names()) - {"alembic_version"} == set(Base.metadata.tables)
    for table_name, table in Base.metadata.tables.items():
        migrated_columns = {column["name"] for column in inspector.get_columns(table_name)}
        assert migrated_columns == set(table.columns.keys()), table_name

    order_indexes = {index["name"]: index for index in inspector.get_indexes("orders")}
    assert order_indexes["uq_orders_order_number"]["unique"]


def test_downgrade_base_drops_every_table(tmp_path) -> None:
    database_url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = _alembic_config(database_url)
    command.upgrade(config, "head")
    command.downgrade(config, "base")

    assert inspect(create_engine(database_url)).get_table_names() == ["alembic_version"]
