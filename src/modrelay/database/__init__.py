"""
SQLite persistence for threads, blocks, guild settings and the relay log.

- **db_connection.py**: single long-lived aiosqlite connection, serialised writes
- **db_schema.py**: idempotent table and index creation
- **database.py**: coordinator exposing one coroutine per query
"""
