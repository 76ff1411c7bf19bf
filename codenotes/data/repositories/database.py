from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from codenotes.config import Config

async_engine = create_async_engine(url=Config.DATABASE_URL)

async_session_factory = async_sessionmaker(bind=async_engine, expire_on_commit=False)


async def init_db() -> None:
    """
    Creates the problems, topics, topic_entries, users and memberships tables
    if they do not exist. Migrations are not handled.
    """
    # Table models register themselves on SQLModel.metadata at import
    import codenotes.data.schemas  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request. Repositories commit after every write.
    """
    async with async_session_factory() as session:
        yield session
