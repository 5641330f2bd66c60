from __future__ import annotations

import asyncio

from sqlalchemy import create_engine, inspect, text

from app.database import Database


def _initialise_legacy_schema(database_path: str) -> None:
    """Create a media_items table from before coverage columns existed."""

    engine = create_engine(f"sqlite:///{database_path}")
    try:
        with engine.begin() as connection:
            connection.execute(
                text(
                    """
                    CREATE TABLE media_items (
                        id VARCHAR(64) PRIMARY KEY,
                        parent_id VARCHAR(64),
                        kind VARCHAR(16),
                        name VARCHAR(255),
                        collection_type VARCHAR(32),
                        is_hidden BOOLEAN,
                        sort_index INTEGER,
                        created_at DATETIME,
                        updated_at DATETIME
                    )
                    """
                )
            )
            connection.execute(
                text(
                    "INSERT INTO media_items (id, kind, name, is_hidden, sort_index) "
                    "VALUES ('anime', 'collection', 'Anime', 0, 0)"
                )
            )
    finally:
        engine.dispose()


def test_create_all_adds_coverage_columns(tmp_path) -> None:
    """Schema migrations should add nullable coverage columns."""

    database_path = tmp_path / "legacy.db"
    _initialise_legacy_schema(str(database_path))

    database = Database(f"sqlite+aiosqlite:///{database_path}")
    asyncio.run(database.create_all())
    asyncio.run(database.dispose())

    inspector_engine = create_engine(f"sqlite:///{database_path}")
    try:
        inspector = inspect(inspector_engine)
        columns = {column["name"] for column in inspector.get_columns("media_items")}
        with inspector_engine.connect() as connection:
            row = connection.execute(
                text("SELECT dubbed_status, subbed_status FROM media_items")
            ).one()
    finally:
        inspector_engine.dispose()

    assert {"dubbed_status", "subbed_status"} <= columns
    assert tuple(row) == (None, None)


def test_create_all_is_idempotent(tmp_path) -> None:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}")

    async def _run() -> set[str]:
        try:
            await database.create_all()
            await database.create_all()
            async with database.engine.connect() as connection:
                return await connection.run_sync(
                    lambda sync: set(inspect(sync).get_table_names())
                )
        finally:
            await database.dispose()

    tables = asyncio.run(_run())

    assert {"users", "media_items", "media_streams"} <= tables
