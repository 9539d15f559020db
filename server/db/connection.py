import duckdb
import logging
from pathlib import Path

from config import DESIGNS_DB, FURNITURE_DB

logger = logging.getLogger(__name__)

_designs_conn = None
_furniture_conn = None


def _safe_connect(db_path: Path):
    """Connect to DuckDB, cleaning up corrupted WAL file if needed."""
    try:
        return duckdb.connect(str(db_path))
    except duckdb.InternalException as e:
        if "WAL file" in str(e):
            wal_path = Path(str(db_path) + ".wal")
            if wal_path.exists():
                logger.warning(f"Removing corrupted WAL file: {wal_path}")
                wal_path.unlink()
                return duckdb.connect(str(db_path))
        raise


def init_databases(designs_path: Path = DESIGNS_DB, furniture_path: Path = FURNITURE_DB):
    global _designs_conn, _furniture_conn

    # Room designs database
    _designs_conn = _safe_connect(designs_path)
    _designs_conn.execute("""
        CREATE TABLE IF NOT EXISTS designs (
            id VARCHAR PRIMARY KEY,
            name VARCHAR NOT NULL,
            room JSON NOT NULL,
            furniture JSON,
            is_public BOOLEAN DEFAULT TRUE,
            created_by VARCHAR NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    _designs_conn.execute("CREATE INDEX IF NOT EXISTS idx_designs_created_by ON designs(created_by)")

    # Furniture catalog database
    _furniture_conn = _safe_connect(furniture_path)
    _furniture_conn.execute("""
        CREATE TABLE IF NOT EXISTS furniture (
            id VARCHAR PRIMARY KEY,
            name VARCHAR NOT NULL,
            description VARCHAR DEFAULT '',
            category VARCHAR DEFAULT 'other',
            price DOUBLE DEFAULT 0,
            model_url VARCHAR NOT NULL,
            thumbnail_url VARCHAR,
            tags JSON,
            width DOUBLE DEFAULT 1,
            depth DOUBLE DEFAULT 1,
            height DOUBLE DEFAULT 1,
            is_available BOOLEAN DEFAULT TRUE,
            created_by VARCHAR,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    _furniture_conn.execute("CREATE INDEX IF NOT EXISTS idx_furniture_category ON furniture(category)")
    logger.info(f"Databases ready: {designs_path}, {furniture_path}")


def get_designs_db():
    return _designs_conn


def get_furniture_db():
    return _furniture_conn


def close_databases():
    global _designs_conn, _furniture_conn
    if _designs_conn:
        _designs_conn.close()
    if _furniture_conn:
        _furniture_conn.close()
    _designs_conn = None
    _furniture_conn = None
