from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from .config import get_settings

settings = get_settings()

# SQLite rejects pool sizing arguments, so they are only passed for server databases
engine_kwargs = {}
if not settings.database_url.startswith("sqlite"):
    engine_kwargs = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": 10,
        "max_overflow": 10,
    }

engine = create_async_engine(settings.database_url, echo=settings.debug, **engine_kwargs)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def init_db(bind=None):
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
