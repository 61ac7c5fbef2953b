from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import settings

class Base(DeclarativeBase):
    pass

def build_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    if echo is None:
        echo = settings.ENVIRONMENT == "development"
    return create_async_engine(url or settings.DATABASE_URL, echo=echo, pool_pre_ping=True)

def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Records are serialized after commit, so attributes must survive it.
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)

engine = build_engine()
RecordSession = build_session_factory(engine)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with RecordSession() as session:
        yield session

async def init_db(bind: AsyncEngine = engine):
    # Tables only; no migrations are shipped.
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
