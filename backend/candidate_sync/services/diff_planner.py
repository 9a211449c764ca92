"""
Diff planner - minimal create/update/delete operations for one collection.

The planner is pure: the same local entries and remote records always give
the same operations, and it never emits an update whose normalized payload
equals the remote record's.
"""
import logging
from typing import Any, Dict, List, Optional, Set

from ..schemas.profile import ProfileDocument
from ..schemas.sync import CreateOperation, DeleteOperation, DiffOperation, RemoteRecord, UpdateOperation
from .collections import COLLECTIONS, CollectionSpec, get_collection
from .matching import RemoteIndex, identity_of

logger = logging.getLogger(__name__)


def plan(
    collection: str,
    local_entries: List[Any],
    remote_records: List[RemoteRecord],
    section_none_flag: bool = False,
    spec: Optional[CollectionSpec] = None,
) -> List[DiffOperation]:
    """
    Plan the operations that make `remote_records` reflect `local_entries`.

    With `section_none_flag` set (the user declared "none" for the section)
    every remote record is deleted and local entries are ignored. Otherwise
    local entries are walked in list order: the first entry to claim a
    content key or identity wins, later duplicates are skipped.
    """
    spec = spec or get_collection(collection)
    operations: List[DiffOperation] = []

    if section_none_flag:
        seen = set()
        for record in remote_records:
            record_id = identity_of(record.id)
            if record_id is None or record_id in seen:
                continue
            seen.add(record_id)
            operations.append(DeleteOperation(collection=spec.name, id=record.id))
        return operations

    index = RemoteIndex(remote_records, spec)
    claimed_ids: Set[str] = set()
    claimed_keys: Set[str] = set()

    for entry in local_entries:
        normalized = spec.normalize(entry)
        key = spec.content_key(normalized)
        if not key:
            continue
        if key in claimed_keys:
            continue

        local_id = identity_of(getattr(entry, "id", None) if not isinstance(entry, dict) else entry.get("id"))
        if local_id is not None and local_id in claimed_ids:
            continue

        claimed_keys.add(key)
        remote = index.find(local_id, key, claimed_ids)

        if remote is None:
            if local_id is not None:
                claimed_ids.add(local_id)
            operations.append(CreateOperation(collection=spec.name, payload=spec.to_payload(entry)))
            continue

        remote_id = identity_of(remote.id)
        claimed_ids.add(remote_id)
        if normalized != index.normalized[remote_id]:
            operations.append(
                UpdateOperation(collection=spec.name, id=remote.id, payload=spec.to_payload(entry))
            )

    for record_id, record in index.by_id.items():
        if record_id in claimed_ids:
            continue
        if spec.soft_retain is not None and spec.soft_retain(record):
            continue
        operations.append(DeleteOperation(collection=spec.name, id=record.id))

    return operations


def section_none_flags(document: ProfileDocument) -> Dict[str, bool]:
    return {
        "work_experience": document.work_experience.experience_type == "fresher",
        "projects": document.projects.no_projects,
        "certifications": document.certifications.no_certification,
    }


def plan_document(
    document: ProfileDocument,
    remote_collections: Dict[str, List[RemoteRecord]],
) -> List[DiffOperation]:
    """Plan every collection of `document`, in collection order."""
    flags = section_none_flags(document)
    operations: List[DiffOperation] = []

    for spec in COLLECTIONS:
        section = getattr(document, spec.name)
        collection_ops = plan(
            spec.name,
            section.entries,
            remote_collections.get(spec.name, []),
            section_none_flag=flags.get(spec.name, False),
            spec=spec,
        )
        if collection_ops:
            logger.info(f"[DiffPlanner] {spec.name}: {summarize(collection_ops)}")
        operations.extend(collection_ops)

    return operations


def summarize(operations: List[DiffOperation]) -> Dict[str, int]:
    counts = {"create": 0, "update": 0, "delete": 0}
    for operation in operations:
        counts[operation.kind] += 1
    return counts
