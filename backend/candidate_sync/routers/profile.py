"""
Profile Sync Router - document editing, save and resume parsing for one candidate
"""
from typing import Optional
from fastapi import APIRouter, Depends, Header, Request

from ..schemas.parsing import ParseFailureReason, ParseResponse
from ..schemas.profile import DocumentPatch
from ..schemas.sync import SaveResponse, SyncPlan
from ..services.diff_planner import summarize
from ..services.profile_session import ProfileEditingSession, SessionRegistry
from ..services.profile_sync import ProfileSyncService

router = APIRouter(prefix="/api/profile-sync", tags=["Profile Sync"])


# ============================================================================
# Dependencies
# ============================================================================

def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_sync_service(request: Request) -> ProfileSyncService:
    return request.app.state.sync_service


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Forwarded as-is to the candidate API."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return authorization.strip()


async def get_editing_session(
    slug: str,
    registry: SessionRegistry = Depends(get_registry),
    token: Optional[str] = Depends(get_bearer_token),
) -> ProfileEditingSession:
    return await registry.get(slug, token)


# ============================================================================
# Document Endpoints
# ============================================================================

@router.get("/{slug}/document")
async def get_document(session: ProfileEditingSession = Depends(get_editing_session)):
    """Current local document, hydrated on first access."""
    document = await session.ensure_loaded()
    return {
        "slug": session.slug,
        "state": session.state.value,
        "document": document.model_dump(mode="json"),
    }


@router.patch("/{slug}/document")
async def patch_document(
    data: DocumentPatch,
    session: ProfileEditingSession = Depends(get_editing_session),
):
    """Merge a section patch into the local document. Nothing is sent upstream."""
    document = await session.apply_patch(data.patch)
    return {"slug": session.slug, "document": document.model_dump(mode="json")}


@router.delete("/{slug}/document")
async def discard_document(
    slug: str,
    session: ProfileEditingSession = Depends(get_editing_session),
    registry: SessionRegistry = Depends(get_registry),
):
    """Drop local edits; the next read hydrates from the remote profile again."""
    await session.reset()
    await registry.discard(slug)
    return {"message": "Local document discarded"}


# ============================================================================
# Save Endpoints
# ============================================================================

@router.post("/{slug}/plan")
async def plan_changes(
    session: ProfileEditingSession = Depends(get_editing_session),
    service: ProfileSyncService = Depends(get_sync_service),
):
    """Operations a save would apply, without applying them."""
    operations = await service.plan(session)
    return {
        "plan": SyncPlan(operations=operations).model_dump(mode="json"),
        "summary": summarize(operations),
    }


@router.post("/{slug}/save", response_model=SaveResponse)
async def save_profile(
    session: ProfileEditingSession = Depends(get_editing_session),
    service: ProfileSyncService = Depends(get_sync_service),
):
    return await service.save(session)


# ============================================================================
# Resume Parsing Endpoints
# ============================================================================

@router.post("/{slug}/parse", response_model=ParseResponse)
async def parse_resume(
    session: ProfileEditingSession = Depends(get_editing_session),
    service: ProfileSyncService = Depends(get_sync_service),
):
    """Trigger resume parsing and wait for the result (about 30 seconds at most)."""
    return await service.parse_resume(session)


@router.post("/{slug}/parse/retry", response_model=ParseResponse)
async def retry_parse_resume(
    session: ProfileEditingSession = Depends(get_editing_session),
    service: ProfileSyncService = Depends(get_sync_service),
):
    return await service.parse_resume(session, retry=True)


@router.get("/{slug}/parse")
async def get_parse_status(session: ProfileEditingSession = Depends(get_editing_session)):
    parse_session = session.parse_session
    return {
        "session": parse_session.model_dump(mode="json"),
        "can_retry": parse_session.failure_reason == ParseFailureReason.TIMEOUT,
    }
