"""
Connexion a la base de donnees / Database connection.
Supporte SQLite (dev) et PostgreSQL/MySQL (prod) via SQLAlchemy 2.0 async.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from countries_api.config import settings

engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """Dependance FastAPI pour obtenir une session DB / FastAPI dependency for DB session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Fabrique de sessions pour le rafraichissement / Session factory used by the refresh."""
    return async_session


async def init_db(bind=None):
    """Creer les tables au demarrage / Create tables on startup."""
    # Enregistrer les modeles sur Base.metadata / Register models on Base.metadata
    import countries_api.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
