"""
Storage backends for day records: local JSON files, SQL/Turso, and in-memory.

Every backend maps a date string to one JSON document. Absence is signalled
with ``None`` from ``load``; only I/O and decode failures raise.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import urlencode, urlsplit

from sqlalchemy import Column, String, Text, create_engine, delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


class DayStore(Protocol):
    """Operations the record service needs from a persistence backend."""

    def initialize(self) -> None:
        ...

    def load(self, date: str) -> Optional[dict]:
        ...

    def save(self, date: str, record: dict) -> None:
        ...

    def list_days(self) -> list[tuple[str, str]]:
        """Return ``(date, raw JSON text)`` pairs, newest date first."""
        ...

    def delete(self, date: str) -> None:
        ...


def encode_record(record: dict, *, pretty: bool = False) -> str:
    return json.dumps(record, indent=2 if pretty else None, ensure_ascii=False)


def decode_record_or_none(raw: str, source: str) -> Optional[dict]:
    """
    Lenient decode used on the file read path.

    Corrupt content is logged and reported as absent, so the caller falls back
    to a default record instead of surfacing the corruption.
    """
    try:
        return json.loads(raw)
    except ValueError as exc:
        logger.warning("Unreadable day record %s, treating as missing: %s", source, exc)
        return None


@dataclass
class InMemoryDayStore:
    """Test double for persistence; keeps serialized documents in a dict."""

    records: dict[str, str] = field(default_factory=dict)

    def initialize(self) -> None:
        pass

    def load(self, date: str) -> Optional[dict]:
        raw = self.records.get(date)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, date: str, record: dict) -> None:
        # Store JSON text to mimic real persistence
        self.records[date] = encode_record(record)

    def list_days(self) -> list[tuple[str, str]]:
        return sorted(self.records.items(), key=lambda item: item[0], reverse=True)

    def delete(self, date: str) -> None:
        self.records.pop(date, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.records.clear()


@dataclass
class FileDayStore:
    """
    One pretty-printed JSON file per date, named ``<date>.json``.

    Writes overwrite the file in place; there is no temp-file-and-rename step.
    """

    data_dir: str

    @property
    def root(self) -> Path:
        return Path(self.data_dir)

    def _path(self, date: str) -> Path:
        return self.root / f"{date}{RECORD_SUFFIX}"

    def initialize(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def load(self, date: str) -> Optional[dict]:
        path = self._path(date)
        if not path.exists():
            return None
        return decode_record_or_none(path.read_text(encoding="utf-8"), str(path))

    def save(self, date: str, record: dict) -> None:
        self._path(date).write_text(encode_record(record, pretty=True), encoding="utf-8")

    def list_days(self) -> list[tuple[str, str]]:
        paths = sorted(
            (p for p in self.root.iterdir() if p.name.endswith(RECORD_SUFFIX)),
            key=lambda p: p.stem,
            reverse=True,
        )
        days: list[tuple[str, str]] = []
        for path in paths:
            try:
                raw = path.read_text(encoding="utf-8")
            except OSError:
                logger.exception("Failed to read %s", path)
                raw = ""
            days.append((path.stem, raw))
        return days

    def delete(self, date: str) -> None:
        self._path(date).unlink(missing_ok=True)


def turso_sqlalchemy_url(database_url: str, auth_token: str) -> str:
    """
    Convert a Turso URL (``libsql://db-org.turso.io``) to the SQLAlchemy
    libSQL dialect URL understood by ``sqlalchemy-libsql``.
    """
    parts = urlsplit(database_url)
    secure = parts.scheme in ("libsql", "https", "wss")
    query = urlencode({"authToken": auth_token, "secure": "true" if secure else "false"})
    return f"sqlite+libsql://{parts.netloc}/?{query}"


class DatabaseDayStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (Turso via
    ``sqlite+libsql``, Postgres, or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("A database URL is required for DatabaseDayStore")
        self.engine = create_engine(
            database_url,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False
        )

    def initialize(self) -> None:
        Base.metadata.create_all(self.engine)

    def load(self, date: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DayRow, date)
            if not row:
                return None
            return json.loads(row.data)

    def save(self, date: str, record: dict) -> None:
        values = {
            "date": date,
            "data": encode_record(record),
            # Denormalized copy; reads always use the document's own field.
            "last_modified": record.get("lastModified"),
        }
        with self.Session() as session:
            dialect = self.engine.dialect.name
            if dialect in ("sqlite", "postgresql"):
                insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
                stmt = insert(DayRow).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[DayRow.date],
                    set_={
                        "data": stmt.excluded.data,
                        "last_modified": stmt.excluded.last_modified,
                    },
                )
                session.execute(stmt)
            else:
                session.merge(DayRow(**values))
            session.commit()

    def list_days(self) -> list[tuple[str, str]]:
        with self.Session() as session:
            rows = session.execute(
                select(DayRow.date, DayRow.data).order_by(DayRow.date.desc())
            ).all()
            return [(row.date, row.data) for row in rows]

    def delete(self, date: str) -> None:
        with self.Session() as session:
            session.execute(delete(DayRow).where(DayRow.date == date))
            session.commit()


Base = declarative_base()


class DayRow(Base):
    __tablename__ = "days"

    date = Column(String, primary_key=True)
    data = Column(Text, nullable=False)
    last_modified = Column(String, nullable=True)
