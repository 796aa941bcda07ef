"""Directory SQL statements.

Templates take ``{schema}`` and ``{table}``; both are validated identifiers.
Liveness is always evaluated against the database clock so that nodes with
skewed local clocks agree on which rows are stale.
"""

DIRECTORY_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS {schema}.{table} (
        node_id TEXT NOT NULL,
        incarnation BIGINT NOT NULL CHECK (incarnation >= 1),
        address TEXT NOT NULL,
        port INTEGER NOT NULL CHECK (port BETWEEN 1 AND 65535),
        last_seen_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        PRIMARY KEY (node_id, incarnation)
    )
"""

DIRECTORY_CREATE_INDEX = """
    CREATE INDEX IF NOT EXISTS {table}_last_seen_at_idx
    ON {schema}.{table} (last_seen_at)
"""

# Highest incarnation ever handed out per node; survives deregistration and pruning
DIRECTORY_CREATE_INCARNATION_TABLE = """
    CREATE TABLE IF NOT EXISTS {schema}.{table}_incarnations (
        node_id TEXT PRIMARY KEY,
        incarnation BIGINT NOT NULL CHECK (incarnation >= 1)
    )
"""

# last_seen_at never moves backwards for a given key
DIRECTORY_UPSERT = """
    INSERT INTO {schema}.{table} AS d (node_id, incarnation, address, port, last_seen_at)
    VALUES ($1, $2, $3, $4, now())
    ON CONFLICT (node_id, incarnation) DO UPDATE SET
        address = EXCLUDED.address,
        port = EXCLUDED.port,
        last_seen_at = GREATEST(d.last_seen_at, EXCLUDED.last_seen_at)
    RETURNING node_id, incarnation, address, port, last_seen_at
"""

DIRECTORY_SCAN_LIVE = """
    SELECT node_id, incarnation, address, port, last_seen_at
    FROM {schema}.{table}
    WHERE last_seen_at > now() - $1::interval
    ORDER BY node_id, incarnation
"""

DIRECTORY_SCAN_ALL = """
    SELECT node_id, incarnation, address, port, last_seen_at
    FROM {schema}.{table}
    ORDER BY node_id, incarnation
"""

DIRECTORY_DELETE_STALE = """
    DELETE FROM {schema}.{table}
    WHERE last_seen_at <= now() - $1::interval
"""

DIRECTORY_DELETE_ENTRY = """
    DELETE FROM {schema}.{table}
    WHERE node_id = $1 AND incarnation = $2
"""

DIRECTORY_DELETE_ENTRY_OLDER_THAN = """
    DELETE FROM {schema}.{table}
    WHERE node_id = $1 AND incarnation = $2
      AND last_seen_at <= now() - $3::interval
"""

# Single statement, so concurrent allocations for one node never collide
DIRECTORY_NEXT_INCARNATION = """
    INSERT INTO {schema}.{table}_incarnations AS h (node_id, incarnation)
    SELECT $1, COALESCE(MAX(incarnation), 0) + 1
    FROM {schema}.{table}
    WHERE node_id = $1
    ON CONFLICT (node_id) DO UPDATE SET
        incarnation = GREATEST(h.incarnation + 1, EXCLUDED.incarnation)
    RETURNING incarnation
"""

DIRECTORY_RESET = """
    DELETE FROM {schema}.{table}
"""


def parse_row_count(status: str) -> int:
    """Extract the row count from a command status such as ``DELETE 3``."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0
