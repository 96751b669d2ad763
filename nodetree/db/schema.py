"""Database schema DDL. All statements use IF NOT EXISTS for idempotency."""

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS nodes (
    id INTEGER PRIMARY KEY CHECK (id > 0),
    parent INTEGER REFERENCES nodes(id),
    title TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_nodes_parent ON nodes(parent);
"""
