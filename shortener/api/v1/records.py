import re

from fastapi import APIRouter, Depends, Query

from ...schemas import (
    RecordIn,
    RecordResponse,
    PageCfg,
    PageResponse,
    RecordsLenResponse,
    DeleteResponse,
    ErrorResponse,
    DEFAULT_PAGE,
    DEFAULT_PAGIN,
    DEFAULT_SORT,
    FALLBACK_PAGIN,
)
from ...store import RecordStore, get_record_store
from ...exceptions import (
    RecordStoreError,
    InvalidRecordError,
    UnavailableShortError,
    IDNotFoundError,
    ShortNotFoundError,
    FullNotFoundError,
)
from ..errors import to_http_error

router = APIRouter(responses={500: {"model": ErrorResponse}})


INTEGER = re.compile(r"[+-]?[0-9]+")


def _parse_int(value: str, fallback: int) -> int:
    # ASCII digits with an optional sign, nothing else.
    if not INTEGER.fullmatch(value):
        return fallback
    return int(value)


@router.post(
    "/records",
    response_model=RecordResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def add_record(
    record_in: RecordIn,
    store: RecordStore = Depends(get_record_store)
):
    try:
        return await store.add_record(record_in)
    except RecordStoreError as e:
        raise to_http_error(e, InvalidRecordError, UnavailableShortError)


@router.put(
    "/records/{record_id}",
    response_model=RecordResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_record(
    record_id: str,
    record_in: RecordIn,
    store: RecordStore = Depends(get_record_store)
):
    try:
        return await store.update_record(record_id, record_in)
    except RecordStoreError as e:
        raise to_http_error(e, InvalidRecordError, UnavailableShortError, IDNotFoundError)


@router.delete("/records/{record_id}", response_model=DeleteResponse, responses={404: {"model": ErrorResponse}})
async def delete_record(
    record_id: str,
    store: RecordStore = Depends(get_record_store)
):
    try:
        deleted_id = await store.delete_record(record_id)
    except RecordStoreError as e:
        raise to_http_error(e, IDNotFoundError)
    return DeleteResponse(id=deleted_id)


@router.get("/records/len", response_model=RecordsLenResponse)
async def get_records_len(store: RecordStore = Depends(get_record_store)):
    try:
        length = await store.get_records_len()
    except RecordStoreError as e:
        raise to_http_error(e)
    return RecordsLenResponse(len=length)


@router.get("/records/id/{record_id}", response_model=RecordResponse, responses={404: {"model": ErrorResponse}})
async def get_record_by_id(
    record_id: str,
    store: RecordStore = Depends(get_record_store)
):
    try:
        return await store.get_record_by_id(record_id)
    except RecordStoreError as e:
        raise to_http_error(e, IDNotFoundError)


@router.get("/records/short/{record_short}", response_model=RecordResponse, responses={404: {"model": ErrorResponse}})
async def get_record_by_short(
    record_short: str,
    store: RecordStore = Depends(get_record_store)
):
    try:
        return await store.get_record_by_short(record_short)
    except RecordStoreError as e:
        raise to_http_error(e, ShortNotFoundError)


# Full URLs contain slashes, so the parameter takes the rest of the path.
@router.get("/records/full/{record_full:path}", response_model=RecordResponse, responses={404: {"model": ErrorResponse}})
async def get_record_by_full(
    record_full: str,
    store: RecordStore = Depends(get_record_store)
):
    try:
        return await store.get_record_by_full(record_full)
    except RecordStoreError as e:
        raise to_http_error(e, FullNotFoundError)


@router.get("/records", response_model=PageResponse)
async def get_all_records(
    page: str = Query(str(DEFAULT_PAGE)),
    pagin: str = Query(str(DEFAULT_PAGIN)),
    sort: str = Query(DEFAULT_SORT),
    store: RecordStore = Depends(get_record_store)
):
    # Unparseable numbers fall back to defaults instead of failing the request.
    cfg = PageCfg(
        page=_parse_int(page, DEFAULT_PAGE),
        pagin=_parse_int(pagin, FALLBACK_PAGIN),
        sort=sort,
    )
    try:
        records, served_cfg = await store.get_all_records(cfg)
    except RecordStoreError as e:
        raise to_http_error(e)
    return PageResponse(page_config=served_cfg, result=records)
