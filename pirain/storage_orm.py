# storage_orm.py
"""
DuckDB event log using SQLAlchemy 2.0 ORM.
Every batch appended to the gauge becomes one row, so the convergence of
the approximation can be replayed after the fact.
Requires: sqlalchemy>=2, duckdb, duckdb-engine
"""

from __future__ import annotations
from typing import Optional, List, Dict, Any
import os
import datetime
import logging
import math

from sqlalchemy import create_engine, String, Integer, Double, DateTime, select, Sequence, asc, desc, and_, distinct, func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

ACTIONS = ("drop", "rain")


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass

event_id_seq = Sequence('rain_event_id_seq')

class RainEvent(Base):
    __tablename__ = "rain_events"
    id: Mapped[int] = mapped_column(Integer, event_id_seq, primary_key=True, server_default=event_id_seq.next_value())
    ts: Mapped[datetime.datetime] = mapped_column(DateTime, default=_utcnow, index=True, nullable=False)
    # "drop" for manual batches, "rain" for scheduler ticks
    action: Mapped[str] = mapped_column(String, index=True, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False)
    total: Mapped[int] = mapped_column(Integer, nullable=False)
    inside: Mapped[int] = mapped_column(Integer, nullable=False)
    # NULL while the gauge is empty
    approximation: Mapped[Optional[float]] = mapped_column(Double, nullable=True)

class Storage:
    def __init__(self, db_path: str, *, echo: bool = False):
        # Ensure parent directory exists so DuckDB can create the file
        db_dir = os.path.dirname(os.path.abspath(db_path))
        if db_dir and not os.path.isdir(db_dir):
            os.makedirs(db_dir, exist_ok=True)

        self.db_path = db_path
        self.engine = create_engine(f"duckdb:///{db_path}", echo=echo, future=True)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)
        self.init_db()

    def init_db(self) -> None:
        """Create tables if missing.
        The database opens with its WAL so committed but un-checkpointed
        events are replayed. Only when DuckDB refuses to deserialize is the
        WAL moved aside; if the file itself still fails, it is backed up and
        replaced by a fresh one.
        """
        try:
            Base.metadata.create_all(self.engine)
            return
        except OperationalError as e:
            if not self._is_deserialize_error(e):
                raise
        db_path = os.path.abspath(self.db_path)
        wal_path = f"{db_path}.wal"
        if os.path.isfile(wal_path):
            self.engine.dispose()
            bak_path = f"{wal_path}.bak"
            if os.path.exists(bak_path):
                ts = datetime.datetime.now().strftime('%Y%m%d%H%M%S')
                bak_path = f"{wal_path}.bak.{ts}"
            os.replace(wal_path, bak_path)
            logging.warning("DuckDB could not replay WAL at '%s'. Renamed to '%s' and retrying.", wal_path, bak_path)
            try:
                Base.metadata.create_all(self.engine)
                return
            except OperationalError as e:
                if not self._is_deserialize_error(e):
                    raise
        self.engine.dispose()
        if os.path.isfile(db_path):
            ts = datetime.datetime.now().strftime('%Y%m%d%H%M%S')
            bak = f"{db_path}.corrupt.{ts}"
            os.replace(db_path, bak)
            logging.warning("DuckDB could not open DB (deserialize). Backed up to '%s' and reinitializing a fresh DB.", bak)
        self.engine = create_engine(f"duckdb:///{db_path}", future=True)
        self.SessionLocal.configure(bind=self.engine)
        Base.metadata.create_all(self.engine)

    @staticmethod
    def _is_deserialize_error(e: Exception) -> bool:
        msg = str(e)
        return "Failed to deserialize" in msg or "field id mismatch" in msg

    def close(self) -> None:
        self.engine.dispose()

    def log_event(self, *, action: str, count: int, total: int, inside: int, approximation: Optional[float]) -> None:
        if action not in ACTIONS:
            raise ValueError(f"Unknown action '{action}'")
        if approximation is not None and math.isnan(approximation):
            approximation = None
        with self.SessionLocal() as s:
            s.add(RainEvent(action=action, count=count, total=total, inside=inside, approximation=approximation))
            try:
                s.commit()
            except Exception:
                s.rollback()
                raise

    def fetch_events(
        self,
        *,
        action: Optional[str] = None,
        n: int = 100,
        order: str = "latest",
        start_time: Optional[datetime.datetime] = None,
        end_time: Optional[datetime.datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch events with optional filtering, ordering, and limit."""
        with self.SessionLocal() as s:
            stmt = select(RainEvent)

            conditions = []
            if action:
                conditions.append(RainEvent.action == action)
            if start_time:
                conditions.append(RainEvent.ts >= start_time)
            if end_time:
                conditions.append(RainEvent.ts <= end_time)
            if conditions:
                stmt = stmt.where(and_(*conditions))

            # id breaks ties between events logged within the same clock tick
            if order == "earliest":
                stmt = stmt.order_by(asc(RainEvent.ts), asc(RainEvent.id))
            else:
                stmt = stmt.order_by(desc(RainEvent.ts), desc(RainEvent.id))
            stmt = stmt.limit(int(max(1, min(n, 10_000))))

            rows = s.execute(stmt).scalars().all()

            def _iso_ts(dt: datetime.datetime) -> str:
                # Stored naive in UTC
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=datetime.timezone.utc)
                return dt.isoformat()

            return [
                {
                    "id": r.id,
                    "ts": _iso_ts(r.ts),
                    "action": r.action,
                    "count": r.count,
                    "total": r.total,
                    "inside": r.inside,
                    "approximation": r.approximation,
                }
                for r in rows
            ]

    def count_events(self) -> int:
        with self.SessionLocal() as s:
            return int(s.execute(select(func.count(RainEvent.id))).scalar_one())

    def distinct_actions(self) -> List[str]:
        """Return the actions that have at least one event, sorted."""
        with self.SessionLocal() as s:
            rows = s.execute(select(distinct(RainEvent.action)).order_by(asc(RainEvent.action))).all()
            return [r[0] for r in rows if r and r[0]]
