"""Database schema DDL and initialization.

A single table stands in for browser local storage:
  - kv: one row per storage key, value kept as text exactly as written
"""

from __future__ import annotations
import sqlite3
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

KV_DDL = f"""
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""


def init_db(db_path: Path) -> None:
    """Create the kv table if missing. Safe to call repeatedly."""
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(KV_DDL)
        conn.commit()
    finally:
        conn.close()
