"""Record stores.

`RecordStore` is the contract the HTTP handlers depend on. `SQLRecordStore`
implements it on top of an `AsyncSession`, with an optional Redis read-through
cache for lookups by short.

Every failure leaves a store as one of the `shortener.exceptions` kinds;
driver errors are wrapped into `DataStoreError`.
"""
import functools
import logging
import re
import uuid
from typing import List, Optional, Protocol, Tuple

from fastapi import Depends
from pydantic import HttpUrl, TypeAdapter, ValidationError
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_db
from .exceptions import (
    DataStoreError,
    FullNotFoundError,
    IDNotFoundError,
    InvalidRecordError,
    ShortNotFoundError,
    UnavailableShortError,
)
from .models import Record
from .observability import CACHE_HITS, CACHE_MISSES
from .redis import RedisClient, redis_client
from .schemas import RecordIn, RecordResponse, PageCfg, DEFAULT_SORT, FALLBACK_PAGIN

logger = logging.getLogger(__name__)

SHORT_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")
MAX_PAGIN = 1000
# OFFSET is a signed 64-bit integer in both Postgres and SQLite.
MAX_OFFSET = 2**63 - 1

SORT_COLUMNS = {
    "id": Record.id,
    "short": Record.short,
    "full": Record.full,
    "created_at": Record.created_at,
    "updated_at": Record.updated_at,
}

_http_url = TypeAdapter(HttpUrl)


class RecordStore(Protocol):
    async def add_record(self, record: RecordIn) -> RecordResponse: ...

    async def update_record(self, record_id: str, record: RecordIn) -> RecordResponse: ...

    async def delete_record(self, record_id: str) -> str: ...

    async def get_record_by_id(self, record_id: str) -> RecordResponse: ...

    async def get_record_by_short(self, short: str) -> RecordResponse: ...

    async def get_record_by_full(self, full: str) -> RecordResponse: ...

    async def get_records_len(self) -> int: ...

    async def get_all_records(self, cfg: PageCfg) -> Tuple[List[RecordResponse], PageCfg]: ...


def validate_record(record: RecordIn) -> None:
    if not record.short or not record.full:
        raise InvalidRecordError("invalid record: short and full are required")
    if not SHORT_PATTERN.match(record.short):
        raise InvalidRecordError(
            "invalid record: short must be 1-64 letters, digits, '_' or '-'"
        )
    try:
        _http_url.validate_python(record.full)
    except ValidationError as e:
        raise InvalidRecordError("invalid record: full must be a valid http(s) URL") from e


def normalize_page_cfg(cfg: PageCfg) -> PageCfg:
    """Return the page config the store will actually serve."""
    page = cfg.page if cfg.page >= 1 else 1
    pagin = cfg.pagin if cfg.pagin >= 1 else FALLBACK_PAGIN
    pagin = min(pagin, MAX_PAGIN)
    page = min(page, MAX_OFFSET // pagin + 1)

    sort = cfg.sort
    if sort.removeprefix("-") not in SORT_COLUMNS:
        sort = DEFAULT_SORT

    return PageCfg(page=page, pagin=pagin, sort=sort)


def _order_by(sort: str):
    column = SORT_COLUMNS[sort.removeprefix("-")]
    if sort.startswith("-"):
        return column.desc(), Record.id.desc()
    return column.asc(), Record.id.asc()


def _short_cache_key(short: str) -> str:
    return f"record:short:{short}"


def _wrap_db_errors(method):
    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception(f"Datastore failure in {method.__name__}")
            await self.db.rollback()
            raise DataStoreError() from e
    return wrapper


class SQLRecordStore:
    def __init__(
        self,
        db: AsyncSession,
        cache: Optional[RedisClient] = None,
        cache_ttl: int = settings.CACHE_TTL_SECONDS,
    ):
        self.db = db
        self.cache = cache
        self.cache_ttl = cache_ttl

    @property
    def cache_enabled(self) -> bool:
        return self.cache is not None and self.cache.client is not None

    async def _find_by_id(self, record_id: str) -> Optional[Record]:
        try:
            key = uuid.UUID(record_id)
        except ValueError:
            return None
        return await self.db.get(Record, key)

    async def _find_by_short(self, short: str) -> Optional[Record]:
        result = await self.db.execute(select(Record).where(Record.short == short))
        return result.scalar_one_or_none()

    async def _commit(self):
        try:
            await self.db.commit()
        except IntegrityError as e:
            # Unique index on short lost a race with a concurrent writer.
            await self.db.rollback()
            raise UnavailableShortError() from e

    async def _invalidate(self, *shorts: str):
        if self.cache_enabled:
            await self.cache.delete(*{_short_cache_key(s) for s in shorts})

    @_wrap_db_errors
    async def add_record(self, record: RecordIn) -> RecordResponse:
        validate_record(record)
        if await self._find_by_short(record.short):
            raise UnavailableShortError()

        new_record = Record(short=record.short, full=record.full)
        self.db.add(new_record)
        await self._commit()
        await self.db.refresh(new_record)

        logger.info(f"Added record {new_record.short}", extra={"record_id": str(new_record.id)})
        return RecordResponse.model_validate(new_record)

    @_wrap_db_errors
    async def update_record(self, record_id: str, record: RecordIn) -> RecordResponse:
        validate_record(record)
        existing = await self._find_by_id(record_id)
        if existing is None:
            raise IDNotFoundError()

        holder = await self._find_by_short(record.short)
        if holder is not None and holder.id != existing.id:
            raise UnavailableShortError()

        old_short = existing.short
        existing.short = record.short
        existing.full = record.full
        await self._commit()
        await self.db.refresh(existing)
        await self._invalidate(old_short, existing.short)

        logger.info(f"Updated record {old_short} -> {existing.short}", extra={"record_id": str(existing.id)})
        return RecordResponse.model_validate(existing)

    @_wrap_db_errors
    async def delete_record(self, record_id: str) -> str:
        existing = await self._find_by_id(record_id)
        if existing is None:
            raise IDNotFoundError()

        deleted_id = str(existing.id)
        short = existing.short
        await self.db.delete(existing)
        await self.db.commit()
        await self._invalidate(short)

        logger.info(f"Deleted record {short}", extra={"record_id": deleted_id})
        return deleted_id

    @_wrap_db_errors
    async def get_record_by_id(self, record_id: str) -> RecordResponse:
        record = await self._find_by_id(record_id)
        if record is None:
            raise IDNotFoundError()
        return RecordResponse.model_validate(record)

    @_wrap_db_errors
    async def get_record_by_short(self, short: str) -> RecordResponse:
        key = _short_cache_key(short)
        if self.cache_enabled:
            cached = await self.cache.get(key)
            if cached:
                CACHE_HITS.inc()
                return RecordResponse.model_validate_json(cached)
            CACHE_MISSES.inc()

        record = await self._find_by_short(short)
        if record is None:
            raise ShortNotFoundError()

        response = RecordResponse.model_validate(record)
        if self.cache_enabled:
            await self.cache.set(key, response.model_dump_json(), ex=self.cache_ttl)
        return response

    @_wrap_db_errors
    async def get_record_by_full(self, full: str) -> RecordResponse:
        # Several records may share a destination; the oldest one wins.
        result = await self.db.execute(
            select(Record)
            .where(Record.full == full)
            .order_by(Record.created_at.asc(), Record.id.asc())
            .limit(1)
        )
        record = result.scalars().first()
        if record is None:
            raise FullNotFoundError()
        return RecordResponse.model_validate(record)

    @_wrap_db_errors
    async def get_records_len(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Record))
        return result.scalar_one()

    @_wrap_db_errors
    async def get_all_records(self, cfg: PageCfg) -> Tuple[List[RecordResponse], PageCfg]:
        cfg = normalize_page_cfg(cfg)
        result = await self.db.execute(
            select(Record)
            .order_by(*_order_by(cfg.sort))
            .offset((cfg.page - 1) * cfg.pagin)
            .limit(cfg.pagin)
        )
        records = [RecordResponse.model_validate(r) for r in result.scalars().all()]
        return records, cfg


def get_record_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return SQLRecordStore(db, cache=redis_client)
