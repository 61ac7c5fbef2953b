from pydantic import BaseModel, ConfigDict
from typing import List
from datetime import datetime
import uuid

DEFAULT_PAGE = 1
DEFAULT_PAGIN = 100
FALLBACK_PAGIN = 30
DEFAULT_SORT = "created_at"

class RecordIn(BaseModel):
    # Validation belongs to the store so that bad values surface as InvalidRecordError.
    short: str = ""
    full: str = ""

class RecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    short: str
    full: str
    created_at: datetime
    updated_at: datetime

class PageCfg(BaseModel):
    page: int = DEFAULT_PAGE
    pagin: int = DEFAULT_PAGIN
    sort: str = DEFAULT_SORT

class PageResponse(BaseModel):
    page_config: PageCfg
    result: List[RecordResponse]

class RecordsLenResponse(BaseModel):
    len: int

class DeleteResponse(BaseModel):
    id: str

class ErrorResponse(BaseModel):
    error: str
