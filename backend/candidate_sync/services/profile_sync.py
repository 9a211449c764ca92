"""
Profile sync service - save and resume-parse flows for an editing session.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..exceptions import (
    ApiError,
    ProfileValidationError,
    RemoteUnavailableError,
    SaveInProgressError,
    SessionExpiredError,
)
from ..schemas.parsing import ParseResponse
from ..schemas.profile import ProfileDocument
from ..schemas.sync import DiffOperation, SaveResponse
from .diff_planner import plan_document
from .normalization import normalize_string, normalize_string_set
from .parse_poller import ParseStatusPoller
from .profile_merger import merge
from .profile_session import InitState, ProfileEditingSession
from .remote_profile import document_from_full_profile, extract_remote_collections
from .sync_executor import SyncExecutor
from .validation import validate_required_fields

logger = logging.getLogger(__name__)

PROFILE_SAVED_MESSAGE = "Profile saved successfully."
PROFILE_PARTIAL_MESSAGE = "Some changes could not be saved. Please review and try again."


# ============================================================================
# Helper Functions
# ============================================================================

def _comparable(values: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: normalize_string_set(value) if isinstance(value, list) else normalize_string(value)
        for key, value in values.items()
    }


def profile_fields_payload(local: ProfileDocument, remote: ProfileDocument) -> Optional[Dict[str, Any]]:
    """
    Body for PATCH /profiles/{slug}/ when basic info or preferences changed,
    else None. Blank values are left out so they never clear server data.
    """
    local_values = {**local.basic_info.model_dump(), **local.preferences.model_dump()}
    remote_values = {**remote.basic_info.model_dump(), **remote.preferences.model_dump()}
    if _comparable(local_values) == _comparable(remote_values):
        return None

    payload = {}
    for key, value in local_values.items():
        if isinstance(value, list):
            payload[key] = list(value)
        elif normalize_string(value):
            payload[key] = normalize_string(value)
    return payload


class ProfileSyncService:
    def __init__(
        self,
        sleep=asyncio.sleep,
        poll_delay: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        self.sleep = sleep
        self.poll_delay = poll_delay
        self.max_attempts = max_attempts

    # ========================================================================
    # Save
    # ========================================================================

    async def plan(self, session: ProfileEditingSession) -> List[DiffOperation]:
        """Dry run: the operations a save would apply right now."""
        document = await session.ensure_loaded()
        try:
            full_profile = await session.api.fetch_full_profile(session.slug)
        except SessionExpiredError:
            await session.reset()
            raise
        return plan_document(document, extract_remote_collections(full_profile))

    async def save(self, session: ProfileEditingSession) -> SaveResponse:
        if session.saving:
            raise SaveInProgressError("A save is already in progress for this profile")

        session.saving = True
        try:
            return await self._save(session)
        except SessionExpiredError:
            await session.reset()
            raise
        finally:
            session.saving = False

    async def _save(self, session: ProfileEditingSession) -> SaveResponse:
        slug = session.slug
        document = await session.ensure_loaded()

        validation = validate_required_fields(document)
        if validation.has_errors:
            logger.info(f"[Save] {slug}: {len(validation.errors)} required fields missing")
            raise ProfileValidationError(validation)

        full_profile = await session.api.fetch_full_profile(slug)
        remote_document = document_from_full_profile(full_profile, slug)

        profile_error = None
        payload = profile_fields_payload(document, remote_document)
        if payload:
            try:
                await session.api.update_profile(slug, payload)
            except SessionExpiredError:
                raise
            except (ApiError, RemoteUnavailableError) as e:
                logger.warning(f"[Save] {slug}: profile details update failed: {e}")
                profile_error = str(e)

        operations = plan_document(document, extract_remote_collections(full_profile))
        logger.info(f"[Save] {slug}: applying {len(operations)} operations")
        result = await SyncExecutor(session.api).execute(operations)

        success = result.ok and profile_error is None
        if success:
            refreshed = await session.api.fetch_full_profile(slug)
            document = await session.replace_document(document_from_full_profile(refreshed, slug))
        else:
            # Keep the local edits so the user can fix and retry
            logger.warning(f"[Save] {slug}: {len(result.errors)} operations failed")

        return SaveResponse(
            success=success,
            result=result,
            document=document.model_dump(mode="json"),
            message=PROFILE_SAVED_MESSAGE if success else (profile_error or PROFILE_PARTIAL_MESSAGE),
        )

    # ========================================================================
    # Resume Parsing
    # ========================================================================

    def _poller(self, session: ProfileEditingSession) -> ParseStatusPoller:
        return ParseStatusPoller(
            session.api,
            session.parse_session,
            delay=self.poll_delay,
            max_attempts=self.max_attempts,
            sleep=self.sleep,
        )

    async def parse_resume(self, session: ProfileEditingSession, retry: bool = False) -> ParseResponse:
        """Trigger parsing, wait for it, and merge what comes back into the document."""
        await session.ensure_loaded()
        poller = self._poller(session)
        try:
            if retry:
                result = await poller.retry(is_active=session.is_active)
            else:
                result = await poller.run(is_active=session.is_active)
        except SessionExpiredError:
            await session.reset()
            raise

        document = session.document
        if result.success and result.data and session.is_active():
            if session.state == InitState.READY and document is not None:
                # Merge into whatever the document is now, not what it was at trigger time
                document = await session.replace_document(merge(document, result.data))
            else:
                logger.warning(f"[Parse] Session for {session.slug} was reset while parsing, result not merged")

        return ParseResponse(
            session=session.parse_session,
            result=result,
            can_retry=result.can_retry,
            document=document.model_dump(mode="json") if document is not None else None,
        )
