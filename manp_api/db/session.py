from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from manp_api.core.config import settings


def build_database_url(url: str, auth_token: str = None):
    """
    Hosted databases hand out an auth token instead of a password.
    Inject it as the URL password unless the URL already carries one.
    """
    db_url = make_url(url)
    if auth_token and not db_url.password:
        db_url = db_url.set(password=auth_token)
    return db_url


engine = create_async_engine(
    build_database_url(settings.DATABASE_URL, settings.DATABASE_AUTH_TOKEN),
    echo=False,
    future=True,
    poolclass=NullPool,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

async def get_db() -> AsyncSession:
    """
    Dependency for getting an async database session.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
