"""SQLite storage for collected keywords and long-tail candidates.

Consumes the engine's output records. Keywords are upserted by keyword
text; long-tail candidates are keyed by their text and duplicates are
ignored.
"""

import os
import sqlite3
import logging
from datetime import datetime

from longtail_scout.config import Config

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS keywords (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    keyword TEXT NOT NULL UNIQUE,
    search_volume INTEGER NOT NULL DEFAULT 0,
    competition_level TEXT,
    cpc REAL NOT NULL DEFAULT 0,
    score INTEGER NOT NULL DEFAULT 0,
    platform TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS longtail_keywords (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    parent_keyword TEXT NOT NULL,
    longtail_keyword TEXT NOT NULL UNIQUE,
    source TEXT NOT NULL,
    search_volume INTEGER,
    competition_level TEXT,
    score INTEGER,
    created_at TEXT NOT NULL
);
"""

INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_keywords_platform ON keywords(platform);
CREATE INDEX IF NOT EXISTS idx_keywords_score ON keywords(score);
CREATE INDEX IF NOT EXISTS idx_longtail_parent ON longtail_keywords(parent_keyword);
"""


def get_connection():
    """Get a database connection, creating the database if needed.

    Returns:
        sqlite3.Connection with row factory set to sqlite3.Row.
    """
    db_path = Config.get_db_path()

    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute('PRAGMA journal_mode=WAL')

    return conn


def init_db():
    """Initialize the database schema and indexes."""
    conn = get_connection()
    try:
        conn.executescript(SCHEMA_SQL)
        conn.executescript(INDEX_SQL)
        conn.commit()
        logger.info(f'Database initialized at {Config.get_db_path()}')
    finally:
        conn.close()


class KeywordRepository:
    """Data access for the keywords table."""

    def __init__(self, conn=None):
        self._conn = conn or get_connection()
        self._owns_conn = conn is None

    def close(self):
        if self._owns_conn:
            self._conn.close()

    def find_by_keyword(self, keyword):
        """Find a keyword record by its text.

        Returns:
            sqlite3.Row or None.
        """
        cursor = self._conn.execute(
            'SELECT * FROM keywords WHERE keyword = ?', (keyword,),
        )
        return cursor.fetchone()

    def upsert_keyword(self, keyword):
        """Insert a Keyword record or refresh the stored metrics.

        Args:
            keyword: Keyword record.

        Returns:
            Tuple of (keyword_id, is_new) where is_new is True if inserted.
        """
        now = datetime.now().isoformat()
        existing = self.find_by_keyword(keyword.text)

        if existing:
            self._conn.execute(
                'UPDATE keywords SET search_volume = ?, competition_level = ?, '
                'cpc = ?, score = ?, platform = ?, updated_at = ? WHERE id = ?',
                (
                    keyword.search_volume,
                    keyword.competition_tier.value,
                    keyword.cost_per_click,
                    keyword.score,
                    keyword.source_platform.value,
                    now,
                    existing['id'],
                ),
            )
            self._conn.commit()
            return existing['id'], False

        cursor = self._conn.execute(
            'INSERT INTO keywords (keyword, search_volume, competition_level, cpc, '
            'score, platform, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)',
            (
                keyword.text,
                keyword.search_volume,
                keyword.competition_tier.value,
                keyword.cost_per_click,
                keyword.score,
                keyword.source_platform.value,
                now,
                now,
            ),
        )
        self._conn.commit()
        return cursor.lastrowid, True

    def upsert_keywords(self, keywords):
        """Upsert several Keyword records.

        Returns:
            Number of newly inserted keywords.
        """
        new_count = 0
        for keyword in keywords:
            _, is_new = self.upsert_keyword(keyword)
            if is_new:
                new_count += 1
        return new_count

    def get_top_keywords(self, limit=20, platform=None):
        """Get keywords ordered by score, highest first.

        Args:
            limit: Maximum number of rows.
            platform: Optional platform value to filter on.

        Returns:
            List of sqlite3.Row objects.
        """
        query = 'SELECT * FROM keywords'
        params = []
        if platform:
            query += ' WHERE platform = ?'
            params.append(platform)
        query += ' ORDER BY score DESC, search_volume DESC LIMIT ?'
        params.append(limit)
        return self._conn.execute(query, params).fetchall()

    def get_keyword_count(self):
        """Get the total number of keywords in the database."""
        row = self._conn.execute('SELECT COUNT(*) as cnt FROM keywords').fetchone()
        return row['cnt']


class LongtailRepository:
    """Data access for the longtail_keywords table."""

    def __init__(self, conn=None):
        self._conn = conn or get_connection()
        self._owns_conn = conn is None

    def close(self):
        if self._owns_conn:
            self._conn.close()

    def save_result(self, result):
        """Store the candidates of a CollectionResult.

        Candidates whose text is already stored are left untouched.

        Returns:
            Number of rows inserted.
        """
        now = datetime.now().isoformat()
        inserted = 0
        for candidate in result.candidates:
            cursor = self._conn.execute(
                'INSERT OR IGNORE INTO longtail_keywords (parent_keyword, '
                'longtail_keyword, source, search_volume, competition_level, '
                'score, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)',
                (
                    result.seed_keyword,
                    candidate.text,
                    candidate.origin.value,
                    candidate.search_volume,
                    candidate.competition_tier.value if candidate.competition_tier else None,
                    candidate.score,
                    now,
                ),
            )
            inserted += cursor.rowcount
        self._conn.commit()

        logger.info(
            f'Saved {inserted} of {result.total_count} long-tail keywords '
            f'for "{result.seed_keyword}"'
        )
        return inserted

    def get_longtails(self, parent_keyword):
        """Get stored long-tail keywords for a seed, in insertion order."""
        return self._conn.execute(
            'SELECT * FROM longtail_keywords WHERE parent_keyword = ? ORDER BY id',
            (parent_keyword,),
        ).fetchall()
