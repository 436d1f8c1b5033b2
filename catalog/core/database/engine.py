"""
Async engine, session dependency and schema setup.

Any async SQLAlchemy URL works; SQLite connections get foreign key
enforcement switched on so that ``ondelete`` rules and dangling references
behave as on a server database.
"""
from collections.abc import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from catalog.core import config

_is_sqlite = config.SQLALCHEMY_DATABASE_URL.startswith("sqlite")

engine = create_async_engine(
    config.SQLALCHEMY_DATABASE_URL,
    poolclass=NullPool if _is_sqlite else None,
    echo=False,
)

if _is_sqlite:
    @event.listens_for(engine.sync_engine, "connect")
    def enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: committed when the handler returns, rolled back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def _import_models() -> None:
    from catalog.features.proposals.models import Proposal  # noqa: F401
    from catalog.features.datasets.models import Dataset  # noqa: F401
    from catalog.features.datablocks.models import Datablock  # noqa: F401
    from catalog.features.attachments.models import Attachment  # noqa: F401


async def init_db():
    """Create the catalog tables; run at application startup."""
    from catalog.core.database.base import Base

    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db():
    """Drop every catalog table. Used to reset test databases."""
    from catalog.core.database.base import Base

    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
