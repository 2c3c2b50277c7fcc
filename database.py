"""
Database utilities for keyword recommendations and schedules
"""
import sqlite3
import json
import logging
from contextlib import contextmanager
from typing import Optional, List, Iterator
from datetime import datetime, timedelta

from errors import NotFound, UpstreamUnavailable
from models import (
    Feedback, KeywordMetrics, KeywordType, Recommendation, RecommendedKeyword, ScheduleConfig
)

logger = logging.getLogger(__name__)

class DatabaseManager:
    """Manages SQLite database operations for recommended keywords"""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.setup_database()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success and surface driver errors as UpstreamUnavailable"""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            logger.error(f"Could not open database {self.db_path}: {e}")
            raise UpstreamUnavailable(f"Database unavailable: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database error: {e}")
            raise UpstreamUnavailable(f"Database error: {e}") from e
        finally:
            conn.close()

    def setup_database(self):
        """Initialize SQLite database schema"""
        with self._connection() as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS recommended_keywords (
                    id INTEGER PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    keyword TEXT NOT NULL,
                    search_volume INTEGER,
                    competition_level REAL,
                    keyword_type TEXT,
                    final_score REAL NOT NULL,
                    search_volume_score REAL NOT NULL,
                    competition_score REAL NOT NULL,
                    blog_fit_score REAL NOT NULL,
                    recommendation TEXT NOT NULL,
                    collected_at TEXT,
                    recommended_at TEXT,
                    used BOOLEAN NOT NULL DEFAULT 0,
                    used_at TEXT,
                    feedback TEXT,
                    UNIQUE (user_id, keyword)
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS schedule_configs (
                    id INTEGER PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    blog_id TEXT NOT NULL,
                    enabled BOOLEAN NOT NULL DEFAULT 1,
                    publish_time TEXT NOT NULL,
                    timezone TEXT NOT NULL,
                    keywords TEXT NOT NULL,
                    domain TEXT NOT NULL,
                    auto_generate BOOLEAN NOT NULL DEFAULT 0,
                    next_run TEXT,
                    updated_at TEXT,
                    UNIQUE (user_id, blog_id)
                )
            ''')

        logger.info("Database schema initialized successfully")

    def upsert_recommendations(self, user_id: str, recommendations: List[RecommendedKeyword]) -> List[RecommendedKeyword]:
        """Insert or refresh recommendations keyed by (user_id, keyword).

        Scores and timestamps are refreshed on conflict; used, used_at and
        feedback are left as they are.
        """
        if not recommendations:
            return []

        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.executemany('''
                INSERT INTO recommended_keywords
                (user_id, keyword, search_volume, competition_level, keyword_type, final_score,
                 search_volume_score, competition_score, blog_fit_score, recommendation,
                 collected_at, recommended_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_id, keyword) DO UPDATE SET
                    search_volume = excluded.search_volume,
                    competition_level = excluded.competition_level,
                    keyword_type = excluded.keyword_type,
                    final_score = excluded.final_score,
                    search_volume_score = excluded.search_volume_score,
                    competition_score = excluded.competition_score,
                    blog_fit_score = excluded.blog_fit_score,
                    recommendation = excluded.recommendation,
                    collected_at = excluded.collected_at,
                    recommended_at = excluded.recommended_at
            ''', [
                (
                    user_id,
                    rec.keyword,
                    rec.metrics.search_volume,
                    rec.metrics.competition_level,
                    rec.metrics.keyword_type.value if rec.metrics.keyword_type else None,
                    rec.final_score,
                    rec.search_volume_score,
                    rec.competition_score,
                    rec.blog_fit_score,
                    rec.recommendation.value,
                    rec.collected_at,
                    rec.recommended_at
                ) for rec in recommendations
            ])

            keywords = [rec.keyword for rec in recommendations]
            placeholders = ", ".join("?" for _ in keywords)
            cursor.execute(
                f"SELECT * FROM recommended_keywords WHERE user_id = ? AND keyword IN ({placeholders})",
                (user_id, *keywords)
            )
            saved = {row["keyword"]: self._row_to_recommendation(row) for row in cursor.fetchall()}

        logger.info(f"Saved {len(recommendations)} keyword recommendations for user {user_id}")
        return [saved[keyword] for keyword in keywords if keyword in saved]

    def get_recommendations(self, user_id: str, used: Optional[bool] = None,
                            recommendation: Optional[Recommendation] = None,
                            limit: int = 50) -> List[RecommendedKeyword]:
        """Get a user's recommendations, best score first"""
        query = "SELECT * FROM recommended_keywords WHERE user_id = ?"
        params = [user_id]

        if used is not None:
            query += " AND used = ?"
            params.append(int(used))
        if recommendation is not None:
            query += " AND recommendation = ?"
            params.append(Recommendation(recommendation).value)

        query += " ORDER BY final_score DESC, id ASC LIMIT ?"
        params.append(limit)

        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [self._row_to_recommendation(row) for row in cursor.fetchall()]

    def get_recommendation(self, user_id: str, keyword_id: int) -> RecommendedKeyword:
        """Get one recommendation owned by the user"""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM recommended_keywords WHERE id = ? AND user_id = ?",
                (keyword_id, user_id)
            )
            row = cursor.fetchone()

        if row is None:
            raise NotFound("Recommended keyword", keyword_id)
        return self._row_to_recommendation(row)

    def mark_keyword_used(self, user_id: str, keyword_id: int, used_at: str) -> RecommendedKeyword:
        """Flag a recommendation as used; used_at is only ever set once"""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                UPDATE recommended_keywords
                SET used = 1, used_at = COALESCE(used_at, ?)
                WHERE id = ? AND user_id = ?
            ''', (used_at, keyword_id, user_id))
            updated = cursor.rowcount

        if not updated:
            raise NotFound("Recommended keyword", keyword_id)

        logger.info(f"Marked keyword {keyword_id} as used for user {user_id}")
        return self.get_recommendation(user_id, keyword_id)

    def set_feedback(self, user_id: str, keyword_id: int, feedback: Optional[Feedback]) -> RecommendedKeyword:
        """Record positive/negative feedback, or clear it with None"""
        value = Feedback(feedback).value if feedback is not None else None

        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE recommended_keywords SET feedback = ? WHERE id = ? AND user_id = ?",
                (value, keyword_id, user_id)
            )
            updated = cursor.rowcount

        if not updated:
            raise NotFound("Recommended keyword", keyword_id)
        return self.get_recommendation(user_id, keyword_id)

    def save_schedule_config(self, schedule_config: ScheduleConfig):
        """Save a blog schedule, replacing any previous one for the same blog"""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                INSERT INTO schedule_configs
                (user_id, blog_id, enabled, publish_time, timezone, keywords, domain,
                 auto_generate, next_run, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_id, blog_id) DO UPDATE SET
                    enabled = excluded.enabled,
                    publish_time = excluded.publish_time,
                    timezone = excluded.timezone,
                    keywords = excluded.keywords,
                    domain = excluded.domain,
                    auto_generate = excluded.auto_generate,
                    next_run = excluded.next_run,
                    updated_at = excluded.updated_at
            ''', (
                schedule_config.user_id,
                schedule_config.blog_id,
                schedule_config.enabled,
                schedule_config.publish_time,
                schedule_config.timezone,
                json.dumps(schedule_config.keywords, ensure_ascii=False),
                schedule_config.domain,
                schedule_config.auto_generate,
                schedule_config.next_run,
                datetime.now().isoformat()
            ))
        logger.info(f"Saved schedule for blog {schedule_config.blog_id}")

    def get_schedule_config(self, user_id: str, blog_id: str) -> Optional[ScheduleConfig]:
        """Get the schedule for one blog, if any"""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM schedule_configs WHERE user_id = ? AND blog_id = ?",
                (user_id, blog_id)
            )
            row = cursor.fetchone()
        return self._row_to_schedule(row) if row else None

    def list_schedule_configs(self, enabled_only: bool = True) -> List[ScheduleConfig]:
        """List stored schedules"""
        query = "SELECT * FROM schedule_configs"
        if enabled_only:
            query += " WHERE enabled = 1"

        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query + " ORDER BY id")
            return [self._row_to_schedule(row) for row in cursor.fetchall()]

    def cleanup_old_data(self, days_to_keep: int = 30) -> int:
        """Remove unused recommendations older than the retention window"""
        cutoff_date = (datetime.now() - timedelta(days=days_to_keep)).isoformat()

        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM recommended_keywords WHERE used = 0 AND recommended_at < ?",
                (cutoff_date,)
            )
            removed = cursor.rowcount

        logger.info(f"Cleaned up {removed} recommendations older than {days_to_keep} days")
        return removed

    @staticmethod
    def _row_to_recommendation(row: sqlite3.Row) -> RecommendedKeyword:
        keyword_type = KeywordType(row["keyword_type"]) if row["keyword_type"] else None
        return RecommendedKeyword(
            keyword=row["keyword"],
            metrics=KeywordMetrics(
                keyword=row["keyword"],
                search_volume=row["search_volume"],
                competition_level=row["competition_level"],
                keyword_type=keyword_type
            ),
            final_score=row["final_score"],
            search_volume_score=row["search_volume_score"],
            competition_score=row["competition_score"],
            blog_fit_score=row["blog_fit_score"],
            recommendation=Recommendation(row["recommendation"]),
            id=row["id"],
            user_id=row["user_id"],
            collected_at=row["collected_at"],
            recommended_at=row["recommended_at"],
            used=bool(row["used"]),
            used_at=row["used_at"],
            feedback=Feedback(row["feedback"]) if row["feedback"] else None
        )

    @staticmethod
    def _row_to_schedule(row: sqlite3.Row) -> ScheduleConfig:
        return ScheduleConfig(
            user_id=row["user_id"],
            blog_id=row["blog_id"],
            publish_time=row["publish_time"],
            keywords=json.loads(row["keywords"]),
            enabled=bool(row["enabled"]),
            timezone=row["timezone"],
            domain=row["domain"],
            auto_generate=bool(row["auto_generate"]),
            next_run=row["next_run"]
        )
