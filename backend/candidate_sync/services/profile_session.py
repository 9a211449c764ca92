"""
Profile editing session - one candidate's document, its parse state and the
API client acting on the candidate's behalf.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional

from ..schemas.parsing import ParseSession
from ..schemas.profile import ProfileDocument
from .api_client import CandidateApiClient
from .document_store import DocumentStore
from .profile_merger import merge
from .remote_profile import document_from_full_profile

logger = logging.getLogger(__name__)


class InitState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class ProfileEditingSession:
    """
    Hydrates once: from the local store when a cached copy exists, otherwise
    from a full remote fetch. Callers arriving while a load is running wait
    on that same load; a failed load drops back to uninitialized.
    """

    def __init__(self, slug: str, api, store: Optional[DocumentStore] = None):
        self.slug = slug
        self.api = api
        self.store = store
        self.state = InitState.UNINITIALIZED
        self.document: Optional[ProfileDocument] = None
        self.parse_session = ParseSession(slug=slug)
        self.saving = False
        self.active = True
        self._load_task: Optional[asyncio.Task] = None

    def is_active(self) -> bool:
        return self.active

    async def ensure_loaded(self) -> ProfileDocument:
        if self.state == InitState.READY and self.document is not None:
            return self.document

        if self._load_task is None:
            self.state = InitState.LOADING
            self._load_task = asyncio.ensure_future(self._load())
        await self._load_task
        return self.document

    async def _load(self):
        try:
            document = await self.store.get(self.slug) if self.store else None
            if document is None:
                logger.info(f"[Session] Hydrating {self.slug} from remote profile")
                full_profile = await self.api.fetch_full_profile(self.slug)
                document = document_from_full_profile(full_profile, self.slug)
                if self.store:
                    await self.store.put(document)
            else:
                logger.info(f"[Session] Hydrating {self.slug} from local cache")
            self.document = document
            self.state = InitState.READY
        except Exception:
            self.state = InitState.UNINITIALIZED
            raise
        finally:
            self._load_task = None

    async def replace_document(self, document: ProfileDocument) -> ProfileDocument:
        document.slug = self.slug
        self.document = document
        self.state = InitState.READY
        if self.store:
            await self.store.put(document)
        return document

    async def apply_patch(self, patch: Dict[str, Any]) -> ProfileDocument:
        current = await self.ensure_loaded()
        return await self.replace_document(merge(current, patch, skip_invalid=False))

    async def reset(self):
        """Forget everything local, e.g. after the remote session expired."""
        logger.warning(f"[Session] Resetting editing session for {self.slug}")
        self.document = None
        self.state = InitState.UNINITIALIZED
        self.parse_session = ParseSession(slug=self.slug)
        if self.store:
            await self.store.delete(self.slug)

    async def close(self):
        self.active = False
        await self.api.close()


class SessionRegistry:
    """Live editing sessions keyed by profile slug."""

    def __init__(self, store: Optional[DocumentStore] = None, api_factory=CandidateApiClient):
        self.store = store
        self.api_factory = api_factory
        self.sessions: Dict[str, ProfileEditingSession] = {}
        self._tokens: Dict[str, Optional[str]] = {}

    async def get(self, slug: str, token: Optional[str] = None) -> ProfileEditingSession:
        session = self.sessions.get(slug)
        if session is None:
            session = ProfileEditingSession(slug, self.api_factory(token=token), self.store)
            self.sessions[slug] = session
            self._tokens[slug] = token
        elif token and token != self._tokens.get(slug):
            # Caller signed in again; keep the document, swap the credential
            await session.api.close()
            session.api = self.api_factory(token=token)
            self._tokens[slug] = token
        return session

    async def discard(self, slug: str):
        session = self.sessions.pop(slug, None)
        self._tokens.pop(slug, None)
        if session is not None:
            await session.close()

    async def close_all(self):
        for slug in list(self.sessions):
            await self.discard(slug)
