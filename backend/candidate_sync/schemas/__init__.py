from .profile import ProfileDocument, DocumentPatch
from .sync import (
    RemoteRecord, DiffOperation, CreateOperation, UpdateOperation, DeleteOperation,
    OperationError, SyncResult, SyncPlan, SaveResponse
)
from .parsing import ParseStatus, ParseFailureReason, ParseSession, PollResult, ParseResponse

__all__ = [
    "ProfileDocument", "DocumentPatch",
    "RemoteRecord", "DiffOperation", "CreateOperation", "UpdateOperation", "DeleteOperation",
    "OperationError", "SyncResult", "SyncPlan", "SaveResponse",
    "ParseStatus", "ParseFailureReason", "ParseSession", "PollResult", "ParseResponse",
]
