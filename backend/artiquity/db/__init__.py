"""Database Package — declarative Base and default seed rows.

Invariants:
    - Tables come from models/ registered on db.base.Base
    - Seeding is idempotent and safe on every startup

Design Decisions:
    - aiosqlite by default, asyncpg when DATABASE_URL points at PostgreSQL
"""
