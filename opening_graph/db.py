"""Database layer: serialized opening graphs keyed by owner."""

import json
from contextlib import contextmanager

import psycopg

from opening_graph.config import get_connection_string

SCHEMA = """
CREATE TABLE IF NOT EXISTS opening_graphs (
    owner TEXT PRIMARY KEY,
    data BYTEA NOT NULL,
    stats JSONB,
    last_updated TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""


@contextmanager
def get_connection():
    """Context manager for database connections."""
    conn = psycopg.connect(get_connection_string())
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def ensure_schema(conn: psycopg.Connection) -> None:
    with conn.cursor() as cur:
        cur.execute(SCHEMA)


def get_graph_blob(conn: psycopg.Connection, owner: str) -> bytes | None:
    """Serialized graph for an owner, or None if nothing is stored."""
    with conn.cursor() as cur:
        cur.execute("SELECT data FROM opening_graphs WHERE owner = %s", (owner,))
        row = cur.fetchone()
    if not row:
        return None
    return bytes(row[0])


def put_graph_blob(
    conn: psycopg.Connection,
    owner: str,
    data: bytes,
    stats: dict | None = None,
) -> None:
    """Insert or replace the serialized graph for an owner."""
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO opening_graphs (owner, data, stats)
            VALUES (%s, %s, %s)
            ON CONFLICT (owner) DO UPDATE SET
                data = EXCLUDED.data,
                stats = EXCLUDED.stats,
                last_updated = NOW()
            """,
            (owner, data, json.dumps(stats) if stats is not None else None),
        )


def has_graph(conn: psycopg.Connection, owner: str) -> bool:
    with conn.cursor() as cur:
        cur.execute("SELECT COUNT(*) FROM opening_graphs WHERE owner = %s", (owner,))
        return (cur.fetchone()[0] or 0) > 0


def delete_graph(conn: psycopg.Connection, owner: str) -> bool:
    """Delete an owner's graph. Returns True if a row was removed."""
    with conn.cursor() as cur:
        cur.execute("DELETE FROM opening_graphs WHERE owner = %s", (owner,))
        return cur.rowcount > 0


def clear_graphs(conn: psycopg.Connection) -> int:
    with conn.cursor() as cur:
        cur.execute("DELETE FROM opening_graphs")
        return cur.rowcount


def list_graph_summaries(conn: psycopg.Connection) -> list[dict]:
    """Owner, last update, stored size and stats for every stored graph."""
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT owner, last_updated, octet_length(data), stats
            FROM opening_graphs ORDER BY owner
            """
        )
        rows = cur.fetchall()
    return [
        {
            "owner": r[0],
            "last_updated": r[1].isoformat() if r[1] else None,
            "size_bytes": r[2] or 0,
            "stats": r[3],
        }
        for r in rows
    ]
