# db.py  — единый модуль работы с БД (журнал убоя и изъятий)
# ----------------------------------
from __future__ import annotations

import asyncio, os, logging, sqlite3, aiosqlite
from typing import Dict, List, Optional

from config import DB_PATH, FALLBACK_DB_PATH
from models import MonthQueryResult, SeizureRecord, SlaughterRecord

logger = logging.getLogger(__name__)

KIND_SLAUGHTER = "abattage"
KIND_SEIZURES = "seizures"


class StorageError(Exception):
    """Хранилище недоступно (I/O, блокировка, нет соединения)."""


def resolve_db_path(db_path: str, fallback: str = FALLBACK_DB_PATH) -> str:
    """Создаёт каталог под БД; если нельзя — уходим на запасной путь."""
    directory = os.path.dirname(db_path)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        return db_path
    except OSError as e:
        fallback_dir = os.path.dirname(fallback)
        if fallback_dir:
            os.makedirs(fallback_dir, exist_ok=True)
        logger.warning("⚠️ Impossible de créer %s (%s), utilisation de %s", directory, e, fallback)
        return fallback


def month_like(year_month: str) -> str:
    return f"{year_month}-%"


class Database:
    def __init__(self) -> None:
        self.conn: aiosqlite.Connection | None = None
        self.path: str | None = None
        self._write_lock = asyncio.Lock()

    # ---------- подключение и схема ----------
    async def connect(self, db_path: str | None = None, fallback: str = FALLBACK_DB_PATH):
        try:
            path = resolve_db_path(db_path or DB_PATH, fallback)
        except OSError as e:
            raise StorageError(f"no writable location for the database: {e}") from e
        try:
            self.conn = await aiosqlite.connect(path, timeout=30)
            self.conn.row_factory = aiosqlite.Row
            await self.conn.execute("PRAGMA journal_mode = WAL")
            await self._create_schema()
            await self.conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"cannot open database {path}: {e}") from e
        self.path = path
        logger.info("✅ Соединение с БД открыто: %s", path)

    async def _create_schema(self):
        # УБОЙ (сутки × вид) -------------------------------------------
        await self.conn.execute("""
            CREATE TABLE IF NOT EXISTS daily_abattage (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                date         TEXT NOT NULL,            -- YYYY-MM-DD
                species      TEXT NOT NULL,
                total_number INTEGER NOT NULL DEFAULT 0,
                total_weight REAL    NOT NULL DEFAULT 0,
                UNIQUE(date, species)
            );
        """)
        await self.conn.execute("CREATE INDEX IF NOT EXISTS idx_daily_abattage_date ON daily_abattage(date);")

        # ИЗЪЯТИЯ (сутки × вид × орган × причина) ------------------------
        await self.conn.execute("""
            CREATE TABLE IF NOT EXISTS seizures (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                date         TEXT NOT NULL,
                species      TEXT NOT NULL,
                organ        TEXT NOT NULL,
                cause        TEXT NOT NULL,
                total_number INTEGER NOT NULL DEFAULT 0,
                UNIQUE(date, species, organ, cause)
            );
        """)
        await self.conn.execute("CREATE INDEX IF NOT EXISTS idx_seizures_date ON seizures(date);")

    def _require_conn(self) -> aiosqlite.Connection:
        if self.conn is None:
            raise StorageError("database is not connected")
        return self.conn

    async def _write(self, sql: str, params: tuple) -> None:
        conn = self._require_conn()
        # одно соединение на всех: execute+commit/rollback не должны перемежаться
        async with self._write_lock:
            try:
                await conn.execute(sql, params)
                await conn.commit()
            except (sqlite3.Error, OverflowError) as e:
                try:
                    await conn.rollback()
                except sqlite3.Error:
                    logger.warning("rollback failed after: %s", e)
                raise StorageError(str(e)) from e

    async def _fetch(self, sql: str, params: tuple = ()) -> List[aiosqlite.Row]:
        conn = self._require_conn()
        try:
            cur = await conn.execute(sql, params)
            rows = await cur.fetchall()
            await cur.close()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        return list(rows)

    # ---------- UPSERT (сложение с существующей строкой) ----------
    async def upsert_slaughter(self, date: str, species: str, number: int, weight: float) -> None:
        await self._write(
            """
            INSERT INTO daily_abattage (date, species, total_number, total_weight)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(date, species) DO UPDATE SET
                total_number = daily_abattage.total_number + excluded.total_number,
                total_weight = daily_abattage.total_weight + excluded.total_weight
            """,
            (date, species, int(number), float(weight)),
        )
        logger.debug("abattage %s %s +%s / +%s kg", date, species, number, weight)

    async def upsert_seizure(self, date: str, species: str, organ: str, cause: str, number: int) -> None:
        await self._write(
            """
            INSERT INTO seizures (date, species, organ, cause, total_number)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(date, species, organ, cause) DO UPDATE SET
                total_number = seizures.total_number + excluded.total_number
            """,
            (date, species, organ, cause, int(number)),
        )
        logger.debug("saisie %s %s %s/%s +%s", date, species, organ, cause, number)

    async def add_slaughter(self, record: SlaughterRecord) -> None:
        await self.upsert_slaughter(record.date, record.species, record.total_number, record.total_weight)

    async def add_seizure(self, record: SeizureRecord) -> None:
        await self.upsert_seizure(record.date, record.species, record.organ, record.cause, record.total_number)

    # ---------- выборки за месяц ----------
    async def query_month(self, year_month: str) -> MonthQueryResult:
        like = month_like(year_month)
        abattage = await self._fetch(
            "SELECT * FROM daily_abattage WHERE date LIKE ? ORDER BY date DESC, id ASC",
            (like,),
        )
        seizures = await self._fetch(
            "SELECT * FROM seizures WHERE date LIKE ? ORDER BY date DESC, id ASC",
            (like,),
        )
        return MonthQueryResult(
            slaughter=[SlaughterRecord.from_row(r) for r in abattage],
            seizures=[SeizureRecord.from_row(r) for r in seizures],
        )

    async def query_aggregate_by_month(self, year_month: str, kind: str) -> List[Dict]:
        like = month_like(year_month)
        if kind == KIND_SLAUGHTER:
            rows = await self._fetch(
                """
                SELECT species,
                       SUM(total_number) AS total_number,
                       SUM(total_weight) AS total_weight
                  FROM daily_abattage
                 WHERE date LIKE ?
                 GROUP BY species
                 ORDER BY species
                """,
                (like,),
            )
        elif kind == KIND_SEIZURES:
            rows = await self._fetch(
                """
                SELECT species, organ, cause,
                       SUM(total_number) AS total_number
                  FROM seizures
                 WHERE date LIKE ?
                 GROUP BY species, organ, cause
                 ORDER BY species, organ, cause
                """,
                (like,),
            )
        else:
            raise ValueError(f"unknown aggregate kind: {kind!r}")
        return [dict(r) for r in rows]

    async def close(self):
        if self.conn:
            await self.conn.close()
            self.conn = None
            logger.info("🔌 БД соединение закрыто")


# ---------- глобальный экземпляр ----------
db = Database()


async def init_db(db_path: Optional[str] = None):
    await db.connect(db_path)
