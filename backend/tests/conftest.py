import itertools
from typing import Any, Dict, List, Optional

import pytest

from candidate_sync.exceptions import ApiError
from candidate_sync.schemas.profile import ProfileDocument
from candidate_sync.services.collections import COLLECTIONS
from candidate_sync.services.remote_profile import COLLECTION_KEYS

PATH_TO_COLLECTION = {spec.path: spec.name for spec in COLLECTIONS}


class FakeCandidateApi:
    """
    In-memory stand-in for the remote candidate API. Stores whatever payload
    it is sent, hands out integer ids, and records every call in order.
    """

    def __init__(self, slug: str = "jane-doe"):
        self.slug = slug
        self.collections: Dict[str, Dict[Any, Dict[str, Any]]] = {spec.name: {} for spec in COLLECTIONS}
        self.profile: Dict[str, Any] = {}
        self.calls: List[tuple] = []
        self.failures: Dict[tuple, Exception] = {}
        self.status_responses: List[Any] = []
        self.trigger_error: Optional[Exception] = None
        self.closed = False
        self._ids = itertools.count(100)

    # Test helpers

    def seed(self, collection: str, record_id: Any, **data):
        self.collections[collection][record_id] = {"id": record_id, **data}

    def fail(self, kind: str, collection: str, exc: Exception = None, record_id: Any = None):
        self.failures[(kind, collection, record_id)] = exc or ApiError("boom", status_code=500)

    def _maybe_fail(self, kind: str, collection: str, record_id: Any = None):
        exc = self.failures.get((kind, collection, record_id)) or self.failures.get((kind, collection, None))
        if exc is not None:
            raise exc

    def mutating_calls(self):
        return [call for call in self.calls if call[0] in ("create", "update", "delete")]

    # API surface

    async def create(self, collection_path, payload):
        collection = PATH_TO_COLLECTION[collection_path]
        self.calls.append(("create", collection, None))
        self._maybe_fail("create", collection)
        record_id = next(self._ids)
        self.collections[collection][record_id] = {"id": record_id, **payload}
        return dict(self.collections[collection][record_id])

    async def update(self, collection_path, record_id, payload):
        collection = PATH_TO_COLLECTION[collection_path]
        self.calls.append(("update", collection, record_id))
        self._maybe_fail("update", collection, record_id)
        self.collections[collection][record_id].update(payload)
        return dict(self.collections[collection][record_id])

    async def delete(self, collection_path, record_id):
        collection = PATH_TO_COLLECTION[collection_path]
        self.calls.append(("delete", collection, record_id))
        self._maybe_fail("delete", collection, record_id)
        self.collections[collection].pop(record_id, None)
        return None

    async def fetch_full_profile(self, slug):
        self.calls.append(("fetch_full_profile", slug, None))
        self._maybe_fail("fetch", "profile")
        verified = {
            COLLECTION_KEYS[name][0]: [dict(record) for record in records.values()]
            for name, records in self.collections.items()
        }
        verified.update(self.profile)
        return {"slug": slug, "verified_profile": verified}

    async def update_profile(self, slug, payload):
        self.calls.append(("update_profile", slug, None))
        self._maybe_fail("update_profile", "profile")
        self.profile.update(payload)
        return dict(self.profile)

    async def trigger_parse(self, slug):
        self.calls.append(("trigger_parse", slug, None))
        if self.trigger_error is not None:
            raise self.trigger_error
        return {"status": "queued"}

    async def get_parsing_status(self, slug):
        self.calls.append(("get_parsing_status", slug, None))
        if not self.status_responses:
            return {"parsing_status": "parsing"}
        response = self.status_responses.pop(0) if len(self.status_responses) > 1 else self.status_responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True


class SleepRecorder:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def fake_api():
    return FakeCandidateApi()


@pytest.fixture
def sleeper():
    return SleepRecorder()


def complete_document(**overrides) -> ProfileDocument:
    """A document that passes every required-field check."""
    data = {
        "slug": "jane-doe",
        "basic_info": {
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@example.com",
            "phone": "+1 555 0100",
            "location": "Toronto",
            "citizenship_status": "Citizen",
            "gender": "Female",
            "ethnicity": "Prefer not to say",
            "current_status": "Looking for backend roles",
        },
        "preferences": {"availability": "Immediately", "desired_salary": "100k-120k"},
        "education": {"entries": [
            {"course_name": "BSc", "major": "Computer Science", "institution": "University of Toronto",
             "start_date": "2016-09", "end_date": "2020-06"},
        ]},
        "work_experience": {"experience_type": "experienced", "entries": [
            {"company": "Acme", "role": "Engineer", "start_date": "2020-07", "is_current": True},
        ]},
        "skills": {"entries": [{"name": "Python"}, {"name": "SQL"}]},
        "projects": {"entries": [{"project_name": "Resume Builder", "description": "Side project"}]},
        "achievements": {"entries": [{"title": "Hackathon Winner", "issue_date": "2019-03"}]},
        "certifications": {"entries": [{"name": "AWS SAA", "issuing_organization": "Amazon"}]},
        "languages": {"entries": [
            {"language": "English", "speaking": "Fluent", "reading": "Fluent", "writing": "Fluent"},
        ]},
    }
    data.update(overrides)
    return ProfileDocument.model_validate(data)


@pytest.fixture
def document():
    return complete_document()


@pytest.fixture
def make_document():
    return complete_document
