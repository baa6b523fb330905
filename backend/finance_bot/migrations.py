from __future__ import annotations

import logging

from sqlalchemy import BigInteger, Text, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .db import Base

logger = logging.getLogger(__name__)

UPDATED_AT_TABLES = ("financial_transactions", "financial_accounts", "financial_goals")
USER_ID_TABLES = (
    "transcription_logs",
    "financial_transactions",
    "financial_accounts",
    "financial_goals",
    "finance_extraction_logs",
)
METADATA_TABLES = ("transcription_logs", "financial_transactions")

_UPDATED_AT_FUNCTION = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = CURRENT_TIMESTAMP;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql
"""


def _columns(engine: Engine, table: str) -> set[str]:
    return {column["name"] for column in inspect(engine).get_columns(table)}


def _rename_goal_name_column(engine: Engine) -> None:
    """Older deployments stored the goal title in a ``name`` column."""
    columns = _columns(engine, "financial_goals")
    if "name" not in columns or "title" in columns:
        return

    logger.info("Renaming financial_goals.name to financial_goals.title.")
    with engine.begin() as connection:
        connection.execute(text("ALTER TABLE financial_goals RENAME COLUMN name TO title"))


def _ensure_column(engine: Engine, table: str, column: str, ddl: str) -> None:
    if column in _columns(engine, table):
        return

    logger.info("Adding %s column to %s table.", column, table)
    with engine.begin() as connection:
        connection.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))


def _column_types(engine: Engine, table: str) -> dict:
    return {column["name"]: column["type"] for column in inspect(engine).get_columns(table)}


def _widen_user_ids(engine: Engine) -> None:
    """Telegram ids do not fit in a 32-bit INTEGER."""
    if engine.dialect.name != "postgresql":
        return

    for table in USER_ID_TABLES:
        user_id = _column_types(engine, table).get("user_id")
        if user_id is None or isinstance(user_id, BigInteger):
            continue
        logger.info("Widening %s.user_id to BIGINT.", table)
        with engine.begin() as connection:
            connection.execute(text(f"ALTER TABLE {table} ALTER COLUMN user_id TYPE BIGINT"))


def _convert_metadata_to_jsonb(engine: Engine) -> None:
    if engine.dialect.name != "postgresql":
        return

    for table in METADATA_TABLES:
        metadata = _column_types(engine, table).get("metadata")
        if metadata is None or not isinstance(metadata, Text):
            continue
        logger.info("Converting %s.metadata to JSONB.", table)
        with engine.begin() as connection:
            connection.execute(
                text(f"ALTER TABLE {table} ALTER COLUMN metadata TYPE JSONB USING metadata::jsonb")
            )


def _install_updated_at_triggers(engine: Engine) -> None:
    if engine.dialect.name != "postgresql":
        return

    with engine.begin() as connection:
        connection.execute(text(_UPDATED_AT_FUNCTION))
        for table in UPDATED_AT_TABLES:
            trigger = f"update_{table}_updated_at"
            connection.execute(text(f"DROP TRIGGER IF EXISTS {trigger} ON {table}"))
            connection.execute(
                text(
                    f"CREATE TRIGGER {trigger} BEFORE UPDATE ON {table} "
                    "FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()"
                )
            )


def run_migrations(engine: Engine) -> None:
    """Execute lightweight, idempotent migrations on application start."""
    try:
        _rename_goal_name_column(engine)
        _ensure_column(engine, "financial_goals", "status", "VARCHAR(20) NOT NULL DEFAULT 'active'")
        _ensure_column(engine, "financial_accounts", "is_active", "BOOLEAN NOT NULL DEFAULT TRUE")
        _widen_user_ids(engine)
        _convert_metadata_to_jsonb(engine)
        _install_updated_at_triggers(engine)
    except SQLAlchemyError:
        logger.exception("Database migration failed")
        raise


def init_db(engine: Engine) -> None:
    """Create missing tables and bring existing ones up to date."""
    from . import models  # noqa: F401  registers the mapped tables

    Base.metadata.create_all(bind=engine)
    run_migrations(engine)
