"""Delivery history of content packages, kept in SQLite."""

from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict, dataclass
from pathlib import Path

_SCHEMA = """
CREATE TABLE IF NOT EXISTS deliveries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    package_uuid TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    version TEXT NOT NULL DEFAULT '',
    destination TEXT NOT NULL DEFAULT '',
    delivery_method TEXT NOT NULL DEFAULT '',
    timestamp TEXT NOT NULL DEFAULT '',
    verified INTEGER NOT NULL DEFAULT 0
)
"""

_COLUMNS = (
    "package_uuid",
    "title",
    "version",
    "destination",
    "delivery_method",
    "timestamp",
    "verified",
)


@dataclass
class DeliveryRecord:
    """One delivery of a package version to a destination."""

    package_uuid: str = ""
    title: str = ""
    version: str = ""
    destination: str = ""
    delivery_method: str = ""
    timestamp: str = ""
    verified: bool = False


@dataclass
class VersionQuery:
    """Filters for a history query; fields left as None are not applied."""

    package_uuid: str | None = None
    title: str | None = None
    destination: str | None = None
    after: str | None = None
    before: str | None = None


class VersionTracker:
    """Content versioning and delivery history tracker."""

    def __init__(self) -> None:
        self.db_path: Path | None = None
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> VersionTracker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def open(self, db_path: Path) -> None:
        """Open or create the tracker database at ``db_path``."""
        self.close()
        conn = sqlite3.connect(str(db_path))
        try:
            conn.execute(_SCHEMA)
            conn.commit()
        except sqlite3.Error:
            conn.close()
            raise
        self._conn = conn
        self.db_path = Path(db_path)

    def close(self) -> None:
        """Close the database if it is open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Version tracker database is not open")
        return self._conn

    def record(self, record: DeliveryRecord) -> None:
        """Store a delivery."""
        conn = self._connection()
        with conn:
            conn.execute(
                f"INSERT INTO deliveries ({', '.join(_COLUMNS)}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    record.package_uuid,
                    record.title,
                    record.version,
                    record.destination,
                    record.delivery_method,
                    record.timestamp,
                    int(record.verified),
                ),
            )

    def query(self, query: VersionQuery | None = None) -> list[DeliveryRecord]:
        """Return matching deliveries, newest timestamp first."""
        conn = self._connection()
        query = query or VersionQuery()
        filters = [
            ("package_uuid = ?", query.package_uuid),
            ("title LIKE ?", None if query.title is None else f"%{query.title}%"),
            ("destination = ?", query.destination),
            ("timestamp >= ?", query.after),
            ("timestamp <= ?", query.before),
        ]
        active = [(clause, value) for clause, value in filters if value is not None]
        sql = f"SELECT {', '.join(_COLUMNS)} FROM deliveries WHERE 1=1"
        sql += "".join(f" AND {clause}" for clause, _ in active)
        sql += " ORDER BY timestamp DESC"

        rows = conn.execute(sql, [value for _, value in active]).fetchall()
        return [
            DeliveryRecord(
                package_uuid=row[0],
                title=row[1],
                version=row[2],
                destination=row[3],
                delivery_method=row[4],
                timestamp=row[5],
                verified=row[6] != 0,
            )
            for row in rows
        ]

    def versions_of(self, package_uuid: str) -> list[DeliveryRecord]:
        """Return every delivery of one package."""
        return self.query(VersionQuery(package_uuid=package_uuid))

    def deliveries_to(self, destination: str) -> list[DeliveryRecord]:
        """Return every delivery to one destination."""
        return self.query(VersionQuery(destination=destination))

    def export_json(self, output: Path) -> None:
        """Write the whole delivery history to ``output`` as JSON."""
        records = [asdict(r) for r in self.query()]
        Path(output).write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")

    def export_csv(self, output: Path) -> None:
        """Write the whole delivery history to ``output`` as CSV."""
        lines = [",".join(_COLUMNS)]
        for r in self.query():
            lines.append(
                ",".join(
                    (
                        r.package_uuid,
                        r.title,
                        r.version,
                        r.destination,
                        r.delivery_method,
                        r.timestamp,
                        "true" if r.verified else "false",
                    )
                )
            )
        Path(output).write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")