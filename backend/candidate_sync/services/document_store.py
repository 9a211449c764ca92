"""
Local document store - keeps the edited ProfileDocument per slug so an editing
session survives restarts without a remote fetch.
"""
import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models import CachedProfileDocument
from ..schemas.profile import ProfileDocument

logger = logging.getLogger(__name__)


class DocumentStore:
    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    async def get(self, slug: str) -> Optional[ProfileDocument]:
        async with self.session_maker() as db:
            result = await db.execute(
                select(CachedProfileDocument).where(CachedProfileDocument.slug == slug)
            )
            row = result.scalar_one_or_none()

        if row is None:
            return None
        try:
            return ProfileDocument.model_validate(row.data)
        except ValidationError as e:
            # A stale cache entry is not worth failing the session over
            logger.warning(f"[Document Store] Discarding unreadable cache for {slug}: {e}")
            await self.delete(slug)
            return None

    async def put(self, document: ProfileDocument) -> None:
        if not document.slug:
            raise ValueError("Cannot cache a document without a slug")

        async with self.session_maker() as db:
            await self._upsert(db, document)
            await db.commit()

    async def _upsert(self, db: AsyncSession, document: ProfileDocument) -> None:
        row = await db.get(CachedProfileDocument, document.slug)
        data = document.model_dump(mode="json")
        if row is None:
            db.add(CachedProfileDocument(slug=document.slug, data=data))
        else:
            row.data = data

    async def delete(self, slug: str) -> None:
        async with self.session_maker() as db:
            await db.execute(delete(CachedProfileDocument).where(CachedProfileDocument.slug == slug))
            await db.commit()
        logger.info(f"[Document Store] Cleared cached document for {slug}")
