import logging
import os
import sqlite3
from typing import Dict, Optional, Protocol

from models import BestRecord

logger = logging.getLogger(__name__)

MOVES = "moves"
TIME = "time"


class BestScoreStore(Protocol):
    """Anything that can read and write string values by key."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


def best_key(pair_count: int, metric: str) -> str:
    """
    Build the store key for a best score.

    Args:
        pair_count: Pair count of the mode the score belongs to
        metric: MOVES or TIME

    Returns:
        Key such as 'best.8.moves'
    """
    if metric not in (MOVES, TIME):
        raise ValueError(f"Unknown best score metric: {metric}")
    return f"best.{pair_count}.{metric}"


def _read_int(store: BestScoreStore, key: str) -> Optional[int]:
    try:
        raw = store.get(key)
    except Exception as e:
        logger.warning("Could not read %s from best score store: %s", key, e)
        return None
    if raw is None:
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        logger.warning("Ignoring unreadable best score %s=%r", key, raw)
        return None
    return value if value >= 0 else None


def load_best_record(store: BestScoreStore, pair_count: int) -> BestRecord:
    """Read the best move count and best time of a mode; missing values stay None."""
    return BestRecord(
        best_moves=_read_int(store, best_key(pair_count, MOVES)),
        best_time_seconds=_read_int(store, best_key(pair_count, TIME)),
    )


class MemoryBestScoreStore:
    """Dictionary-backed store, used in tests and when no database is available."""

    def __init__(self, values: Dict[str, str] = None):
        self.values = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class GameDatabase:
    """
    Class to handle SQLite storage of best scores for the Memory Match game.
    Values are kept as plain strings under their key.
    """

    def __init__(self, db_file="memory_game.db"):
        """
        Initialize the database connection.

        Args:
            db_file: Path to the SQLite database file
        """
        self.db_file = db_file
        self.conn = None
        self.cursor = None
        self.initialize_db()

    def initialize_db(self) -> None:
        """Create the database and table if they don't exist."""
        # Create database directory if it doesn't exist
        db_dir = os.path.dirname(self.db_file)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir)

        # Connect to database (creates it if it doesn't exist)
        self.conn = sqlite3.connect(self.db_file)
        self.cursor = self.conn.cursor()

        self.cursor.execute('''
            CREATE TABLE IF NOT EXISTS best_scores (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        ''')
        self.conn.commit()
        logger.info("Database initialized at %s", self.db_file)

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            self.cursor = None

    def get(self, key: str) -> Optional[str]:
        """
        Read a stored value.

        Args:
            key: Key to look up

        Returns:
            The stored string, or None if the key is absent or the read failed
        """
        try:
            if not self.conn:
                self.initialize_db()

            self.cursor.execute("SELECT value FROM best_scores WHERE key = ?", (key,))
            row = self.cursor.fetchone()
            return row[0] if row else None
        except sqlite3.Error as e:
            logger.error("Error reading %s: %s", key, e)
            return None

    def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Args:
            key: Key to write
            value: String value to store
        """
        if not self.conn:
            self.initialize_db()

        self.cursor.execute('''
            INSERT INTO best_scores (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
        ''', (key, value))
        self.conn.commit()

    def keys(self):
        """Return all stored keys, sorted."""
        if not self.conn:
            self.initialize_db()
        self.cursor.execute("SELECT key FROM best_scores ORDER BY key")
        return [row[0] for row in self.cursor.fetchall()]


_databases: Dict[str, GameDatabase] = {}


def get_database(db_file="memory_game.db") -> GameDatabase:
    """Get the shared database instance for a file, opening it on first use."""
    db = _databases.get(db_file)
    if db is None:
        db = GameDatabase(db_file)
        _databases[db_file] = db
    return db
