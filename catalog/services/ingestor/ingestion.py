"""Load downloaded symbol-master files into the instruments table."""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Union

import sqlalchemy as sa
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config.settings import Settings
from catalog.db.database import Database
from catalog.db.upsert import upsert
from catalog.models import Instrument
from catalog.models.base import utcnow
from catalog.services.ingestor.models import (
    IngestionError,
    IngestionResult,
    IngestionStatus,
    InvalidRecordError,
    NormalizedInstrument,
)
from catalog.services.ingestor.normalizers import normalize_record

logger = logging.getLogger(__name__)

# Key for pg_try_advisory_xact_lock; one ingestion at a time per database.
INGESTION_LOCK_KEY = 748_392_001

REQUIRED_FIELDS = (
    "sym_ticker",
    "fy_token",
    "ex_token",
    "ex_symbol",
    "ex_sym_name",
    "exchange_id",
    "exchange_name",
    "segment_id",
    "ex_inst_type",
    "currency_code",
)


@dataclass
class SourceBatch:
    """Raw records gathered from every readable file in the data directory."""
    records: List[Any] = field(default_factory=list)
    files_read: int = 0
    files_skipped: int = 0


def read_instrument_files(data_dir: Union[str, Path]) -> SourceBatch:
    """Parse every *.json file; a file that cannot be parsed is skipped."""
    batch = SourceBatch()
    directory = Path(data_dir)

    if not directory.is_dir():
        logger.warning(f"Data directory {directory} does not exist")
        return batch

    files = sorted(directory.glob("*.json"))
    if not files:
        logger.warning(f"No instrument files found in {directory}")
        return batch

    for path in files:
        try:
            with path.open(encoding="utf-8") as fh:
                content = json.load(fh)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Skipping {path.name}: {e}")
            batch.files_skipped += 1
            continue

        if isinstance(content, dict):
            records = list(content.values())
        elif isinstance(content, list):
            records = content
        else:
            logger.error(f"Skipping {path.name}: expected a JSON object of records")
            batch.files_skipped += 1
            continue

        logger.info(f"Read {len(records)} records from {path.name}")
        batch.records.extend(records)
        batch.files_read += 1

    return batch


def check_required(instrument: NormalizedInstrument) -> None:
    missing = [name for name in REQUIRED_FIELDS if getattr(instrument, name) is None]
    if missing:
        raise InvalidRecordError(f"missing {', '.join(missing)}")


class InstrumentIngestor:
    """Upserts instrument records in one transaction with a savepoint per record."""

    def __init__(self, database: Database, data_dir: Union[str, Path], prune: bool = False):
        self.database = database
        self.data_dir = Path(data_dir)
        self.prune = prune

    async def run(self) -> IngestionResult:
        logger.info(f"Reading instrument files from {self.data_dir}")
        batch = read_instrument_files(self.data_dir)
        result = IngestionResult(
            status=IngestionStatus.COMPLETED,
            files_read=batch.files_read,
            files_skipped=batch.files_skipped,
            records_parsed=len(batch.records),
        )

        if not batch.records:
            logger.warning("No instrument records to ingest")
            result.status = IngestionStatus.NO_DATA
            return result

        run_started_at = utcnow()
        logger.info(f"Ingesting {len(batch.records)} records from {batch.files_read} files")

        try:
            async with self.database.session() as session:
                if not await self._acquire_lock(session):
                    logger.warning("Another ingestion run holds the lock; skipping")
                    result.status = IngestionStatus.LOCKED
                    return result

                segments = Counter()
                for raw in batch.records:
                    try:
                        segment_id = await self._upsert_record(session, raw, run_started_at)
                    except (InvalidRecordError, IntegrityError, DataError) as e:
                        result.failed += 1
                        logger.warning(f"Skipping record {_ticker_of(raw)}: {_short_error(e)}")
                        continue
                    result.upserted += 1
                    segments[segment_id] += 1

                if self.prune and result.upserted:
                    result.pruned = await self._prune_stale(session, run_started_at)

                result.segment_counts = dict(sorted(segments.items()))
        except SQLAlchemyError as e:
            logger.error(f"Ingestion failed, all changes rolled back: {e}")
            raise IngestionError(str(e)) from e

        self._log_summary(result)
        return result

    async def _acquire_lock(self, session: AsyncSession) -> bool:
        if session.get_bind().dialect.name != "postgresql":
            return True
        acquired = await session.scalar(
            sa.text("SELECT pg_try_advisory_xact_lock(:key)"), {"key": INGESTION_LOCK_KEY}
        )
        return bool(acquired)

    async def _upsert_record(self, session: AsyncSession, raw: Any, run_started_at: datetime) -> int:
        if not isinstance(raw, dict):
            raise InvalidRecordError("record is not a JSON object")

        instrument = normalize_record(raw)
        check_required(instrument)

        values = instrument.to_dict()
        values["updated_at"] = run_started_at

        stmt = upsert(session.get_bind().dialect.name, Instrument.__table__, values, ["sym_ticker"])
        async with session.begin_nested():
            await session.execute(stmt)
        return instrument.segment_id

    async def _prune_stale(self, session: AsyncSession, run_started_at: datetime) -> int:
        """Delete instruments this run did not touch."""
        result = await session.execute(
            sa.delete(Instrument).where(Instrument.updated_at < run_started_at)
        )
        logger.info(f"Pruned {result.rowcount} instruments absent from this run")
        return result.rowcount

    def _log_summary(self, result: IngestionResult) -> None:
        logger.info(
            f"Ingestion complete: {result.upserted} upserted, {result.failed} failed, "
            f"{result.pruned} pruned, {result.files_skipped} files skipped"
        )
        for segment_id, count in result.segment_counts.items():
            logger.info(f"Segment {segment_id}: {count} instruments")


async def ingest_instruments(
    settings: Settings,
    data_dir: Optional[Union[str, Path]] = None,
    prune: Optional[bool] = None,
) -> IngestionResult:
    """Run one ingestion against the configured database."""
    database = Database(settings)
    await database.init()
    try:
        ingestor = InstrumentIngestor(
            database,
            data_dir or settings.DATA_DIR,
            prune=settings.INGEST_PRUNE_STALE if prune is None else prune,
        )
        return await ingestor.run()
    finally:
        await database.close()


def _ticker_of(raw: Any) -> str:
    if isinstance(raw, dict):
        return str(raw.get("symTicker") or "<no ticker>")
    return "<malformed>"


def _short_error(error: Exception) -> str:
    # Driver errors carry the full statement; the first line is enough.
    if isinstance(error, SQLAlchemyError) and getattr(error, "orig", None) is not None:
        return str(error.orig).splitlines()[0]
    return str(error)


