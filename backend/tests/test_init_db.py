"""Tests for the database bootstrap script."""

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine

from scripts import init_db


async def test_creates_tables_and_seeds_admin(tmp_path, monkeypatch):
    url = f"sqlite+aiosqlite:///{tmp_path / 'init.db'}"
    seeded = []

    async def fake_seed():
        seeded.append(True)

    monkeypatch.setattr(init_db, "engine", create_async_engine(url))
    monkeypatch.setattr(init_db, "seed_admin_user", fake_seed)

    await init_db.init()

    assert seeded == [True]
    check = create_async_engine(url)
    async with check.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    await check.dispose()
    assert {"users", "medicines"} <= set(tables)
