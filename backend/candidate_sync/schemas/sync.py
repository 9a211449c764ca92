"""
Sync schemas - remote records, diff operations and sync results
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class RemoteRecord(BaseModel):
    """One record of a remote collection as the server returns it."""
    id: Union[int, str]
    data: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Diff Operations
# ============================================================================

class CreateOperation(BaseModel):
    kind: Literal["create"] = "create"
    collection: str
    payload: Dict[str, Any]


class UpdateOperation(BaseModel):
    kind: Literal["update"] = "update"
    collection: str
    id: Union[int, str]
    payload: Dict[str, Any]


class DeleteOperation(BaseModel):
    kind: Literal["delete"] = "delete"
    collection: str
    id: Union[int, str]


DiffOperation = Annotated[
    Union[CreateOperation, UpdateOperation, DeleteOperation],
    Field(discriminator="kind"),
]


# ============================================================================
# Results
# ============================================================================

class OperationError(BaseModel):
    operation: DiffOperation
    message: str
    status_code: Optional[int] = None


class SyncResult(BaseModel):
    applied: List[DiffOperation] = Field(default_factory=list)
    errors: List[OperationError] = Field(default_factory=list)
    # Server responses for successful creates, in creation order
    created: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class SyncPlan(BaseModel):
    operations: List[DiffOperation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.operations


class SaveResponse(BaseModel):
    """Outcome of a save: what was applied, what failed, the refreshed document."""
    success: bool
    result: SyncResult
    document: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
