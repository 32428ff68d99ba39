"""Repository layer for scraped market availability snapshots."""

from __future__ import annotations

import random
import sqlite3
from datetime import datetime, time, timedelta, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from demand_pacing.domain.errors import UpstreamDataUnavailable
from demand_pacing.domain.models import AvailabilityObservation
from demand_pacing.utils.config import Settings, get_settings
from demand_pacing.utils.logger import get_logger
from demand_pacing.utils.parsing import slugify_city


logger = get_logger(__name__)


class SnapshotRepository:
    """Encapsulates SQLite access so scoring code stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def initialize_database(self) -> None:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS market_availability_snapshots (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        city_slug TEXT NOT NULL,
                        checkin_date TEXT NOT NULL,
                        scraped_at TEXT NOT NULL,
                        total_results TEXT,
                        weighted_avg_price TEXT,
                        hotel_count INTEGER
                    );
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_snapshots_city_checkin
                    ON market_availability_snapshots(city_slug, checkin_date, scraped_at);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise UpstreamDataUnavailable(f"Database initialization failed: {exc}") from exc

    def insert_observations(self, city: str, records: Iterable[Mapping[str, Any]]) -> int:
        """Store raw records as received; parsing happens on read."""
        city_slug = slugify_city(city)
        rows = [
            (
                city_slug,
                str(record["checkin_date"]),
                str(record["scraped_at"]),
                None if record.get("total_results") is None else str(record["total_results"]),
                None
                if record.get("weighted_avg_price") is None
                else str(record["weighted_avg_price"]),
                record.get("hotel_count"),
            )
            for record in records
        ]
        try:
            with self._connect() as conn:
                conn.executemany(
                    """
                    INSERT INTO market_availability_snapshots
                        (city_slug, checkin_date, scraped_at, total_results,
                         weighted_avg_price, hotel_count)
                    VALUES (?, ?, ?, ?, ?, ?);
                    """,
                    rows,
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise UpstreamDataUnavailable(f"Snapshot insert failed: {exc}") from exc
        return len(rows)

    def fetch_city_observations(self, city_slug: str) -> list[AvailabilityObservation]:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    SELECT city_slug, checkin_date, scraped_at, total_results,
                           weighted_avg_price, hotel_count
                    FROM market_availability_snapshots
                    WHERE LOWER(city_slug) = LOWER(?)
                    ORDER BY checkin_date ASC, scraped_at DESC;
                    """,
                    (city_slug,),
                )
                rows = cursor.fetchall()
        except sqlite3.Error as exc:
            raise UpstreamDataUnavailable(
                f"Snapshot query failed for {city_slug}: {exc}"
            ) from exc

        observations = []
        for row in rows:
            observation = AvailabilityObservation.from_record(dict(row))
            if observation is not None:
                observations.append(observation)
        return observations

    def count_observations(self, city: str) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS count FROM market_availability_snapshots WHERE city_slug = ?;",
                (slugify_city(city),),
            ).fetchone()
        return int(row["count"])

    def seed_synthetic_data(self) -> None:
        """Seed deterministic daily scrapes for the demo city when it is empty."""
        city = self._settings.synthetic_city
        if self.count_observations(city) > 0:
            logger.info("Synthetic snapshots already present; skipping seed")
            return

        rng = random.Random(self._settings.synthetic_random_seed)
        today = datetime.now(timezone.utc).date()
        first_scrape = today - timedelta(days=self._settings.synthetic_seed_days - 1)
        horizon = self._settings.pace_horizon_days

        records = []
        for day_offset in range(self._settings.synthetic_seed_days):
            scrape_day = first_scrape + timedelta(days=day_offset)
            scraped_at = datetime.combine(scrape_day, time(6, 0), tzinfo=timezone.utc)
            for lead in range(horizon + 1):
                checkin = scrape_day + timedelta(days=lead)
                weekend = checkin.weekday() >= 4
                supply = 900 - day_offset * 2 + lead * 3 - (120 if weekend else 0)
                supply += rng.randint(-25, 25)
                price = 140.0 + (35.0 if weekend else 0.0) - lead * 0.2 + rng.uniform(-6.0, 6.0)
                records.append(
                    {
                        "checkin_date": checkin.isoformat(),
                        "scraped_at": scraped_at.isoformat(),
                        "total_results": max(supply, 50),
                        "weighted_avg_price": f"{price:.2f}",
                        "hotel_count": max(supply, 50) // 3,
                    }
                )
        inserted = self.insert_observations(city, records)
        logger.info("Synthetic seed completed with %s records", inserted)
