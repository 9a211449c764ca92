"""
Sync executor - applies planned operations against the remote API.
"""
import logging
from typing import Dict, List

from ..exceptions import ApiError, RemoteUnavailableError, SessionExpiredError
from ..schemas.sync import DiffOperation, OperationError, SyncResult
from .collections import get_collection

logger = logging.getLogger(__name__)

KIND_ORDER = ("create", "update", "delete")


def order_operations(operations: List[DiffOperation]) -> List[DiffOperation]:
    """Group by collection (first-seen order), then creates, updates, deletes."""
    grouped: Dict[str, Dict[str, List[DiffOperation]]] = {}
    for operation in operations:
        by_kind = grouped.setdefault(operation.collection, {kind: [] for kind in KIND_ORDER})
        by_kind[operation.kind].append(operation)

    ordered = []
    for by_kind in grouped.values():
        for kind in KIND_ORDER:
            ordered.extend(by_kind[kind])
    return ordered


class SyncExecutor:
    """
    Runs operations one at a time. A failed operation is recorded and the
    pass continues; an expired session stops the pass where it is.
    """

    def __init__(self, api):
        self.api = api

    async def execute(self, operations: List[DiffOperation]) -> SyncResult:
        result = SyncResult()

        for operation in order_operations(operations):
            spec = get_collection(operation.collection)
            try:
                if operation.kind == "create":
                    created = await self.api.create(spec.path, operation.payload)
                    if isinstance(created, dict):
                        result.created.append(created)
                elif operation.kind == "update":
                    await self.api.update(spec.path, operation.id, operation.payload)
                else:
                    await self.api.delete(spec.path, operation.id)
            except SessionExpiredError as e:
                logger.error(
                    f"[Sync] Session expired after {len(result.applied)} operations, aborting pass"
                )
                e.partial_result = result
                raise
            except (ApiError, RemoteUnavailableError) as e:
                status_code = getattr(e, "status_code", None) or None
                logger.warning(f"[Sync] {operation.kind} {operation.collection} failed: {e}")
                result.errors.append(
                    OperationError(operation=operation, message=str(e), status_code=status_code)
                )
                continue

            result.applied.append(operation)

        logger.info(f"[Sync] Applied {len(result.applied)} operations, {len(result.errors)} failed")
        return result
