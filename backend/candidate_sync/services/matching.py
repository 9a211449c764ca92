"""
Entity matching - pair a local entry with the remote record it represents.
"""
from typing import Any, Dict, List, Optional, Set

from ..schemas.sync import RemoteRecord
from .collections import CollectionSpec


def identity_of(value: Any) -> Optional[str]:
    """Ids compare as strings so 7 and "7" are the same record."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


class RemoteIndex:
    """Id and content-key lookups over one collection's remote records."""

    def __init__(self, records: List[RemoteRecord], spec: CollectionSpec):
        self.spec = spec
        self.records = list(records)
        self.by_id: Dict[str, RemoteRecord] = {}
        self.by_key: Dict[str, List[RemoteRecord]] = {}
        self.normalized: Dict[str, Dict[str, Any]] = {}

        for record in self.records:
            record_id = identity_of(record.id)
            if record_id is None or record_id in self.by_id:
                continue
            self.by_id[record_id] = record
            normalized = spec.normalize(record.data)
            self.normalized[record_id] = normalized
            key = spec.content_key(normalized)
            if key:
                self.by_key.setdefault(key, []).append(record)

    def find(self, local_id: Any, key: str, claimed: Optional[Set[str]] = None) -> Optional[RemoteRecord]:
        """
        Identity first, then the first unclaimed remote record with the same
        content key. Blank keys never match by content.
        """
        claimed = claimed or set()

        record_id = identity_of(local_id)
        if record_id is not None and record_id in self.by_id and record_id not in claimed:
            return self.by_id[record_id]

        if not key:
            return None
        for record in self.by_key.get(key, []):
            if identity_of(record.id) not in claimed:
                return record
        return None


def match(local_entry: Any, remote_records: List[RemoteRecord], spec: CollectionSpec) -> Optional[RemoteRecord]:
    """Return the remote record `local_entry` corresponds to, or None."""
    normalized = spec.normalize(local_entry)
    key = spec.content_key(normalized)
    local_id = getattr(local_entry, "id", None)
    if local_id is None and isinstance(local_entry, dict):
        local_id = local_entry.get("id")
    return RemoteIndex(remote_records, spec).find(local_id, key)
