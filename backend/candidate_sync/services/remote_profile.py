"""
Remote profile reader - pulls collections and a ProfileDocument out of the
payload returned by GET /profiles/{slug}/full/.

The endpoint nests collections under `verified_profile` on newer servers and
at the root on older ones, under a few different key spellings, sometimes as
a bare list and sometimes as `{"entries": [...]}`.
"""
import logging
from typing import Any, Dict, List, Optional

from ..schemas.profile import ProfileDocument
from ..schemas.sync import RemoteRecord
from .collections import COLLECTIONS, CollectionSpec
from .normalization import FieldKind, normalize_tristate, pick

logger = logging.getLogger(__name__)

COLLECTION_KEYS = {
    "education": ("education", "educations"),
    "work_experience": ("work_experience", "work_experiences", "workExperience"),
    "skills": ("skills",),
    "projects": ("projects", "project"),
    "achievements": ("achievements", "achievement", "awards"),
    "certifications": ("certifications", "certification", "certificates"),
    "languages": ("languages",),
}

BASIC_INFO_KEYS = (
    "first_name", "last_name", "email", "phone", "location", "citizenship_status",
    "gender", "ethnicity", "current_status", "linkedin_url", "github_url", "portfolio_url", "bio",
)

PREFERENCE_KEYS = (
    "company_size", "job_type", "job_search", "career_stage", "availability", "desired_salary",
)
PREFERENCE_LIST_KEYS = ("company_size", "job_type", "job_search")


# ============================================================================
# Helper Functions
# ============================================================================

def _sources(full_profile: Any) -> List[dict]:
    if not isinstance(full_profile, dict):
        return []
    sources = []
    if isinstance(full_profile.get("verified_profile"), dict):
        sources.append(full_profile["verified_profile"])
    sources.append(full_profile)
    return sources


def _find_list(sources: List[dict], keys) -> List[Any]:
    """Bare lists take precedence over {"entries": [...]} containers."""
    for source in sources:
        for key in keys:
            if isinstance(source.get(key), list):
                return source[key]
    for source in sources:
        for key in keys:
            container = source.get(key)
            if isinstance(container, dict) and isinstance(container.get("entries"), list):
                return container["entries"]
    return []


def _find_value(sources: List[dict], *keys) -> Any:
    for source in sources:
        value = pick(source, *keys)
        if value is not None:
            return value
    return None


def _record_id(item: dict, spec: CollectionSpec) -> Optional[Any]:
    value = pick(item, *spec.id_aliases)
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        return value
    return None


# ============================================================================
# Remote Collections
# ============================================================================

def extract_remote_collections(full_profile: Any) -> Dict[str, List[RemoteRecord]]:
    """RemoteRecords per collection; records without an identity are dropped."""
    sources = _sources(full_profile)
    collections: Dict[str, List[RemoteRecord]] = {}

    for spec in COLLECTIONS:
        records = []
        for item in _find_list(sources, COLLECTION_KEYS[spec.name]):
            if not isinstance(item, dict):
                continue
            record_id = _record_id(item, spec)
            if record_id is None:
                logger.debug(f"[Remote Profile] Skipping {spec.name} record without id: {item}")
                continue
            records.append(RemoteRecord(id=record_id, data=item))
        collections[spec.name] = records

    return collections


# ============================================================================
# Document Hydration
# ============================================================================

def _entry_values(record: RemoteRecord, spec: CollectionSpec) -> Dict[str, Any]:
    values: Dict[str, Any] = {"id": record.id}
    for field_spec in spec.fields:
        value = field_spec.read(record.data)
        if value is None:
            continue
        if field_spec.kind == FieldKind.TRISTATE:
            values[field_spec.name] = normalize_tristate(value)
        else:
            values[field_spec.name] = str(value).strip()
    return values


def _basic_info(full_profile: dict, sources: List[dict]) -> Dict[str, Any]:
    user = full_profile.get("user") if isinstance(full_profile.get("user"), dict) else {}
    user_profile = user.get("profile") if isinstance(user.get("profile"), dict) else {}
    lookup = [user, user_profile] + sources

    values = {}
    for key in BASIC_INFO_KEYS:
        value = _find_value(lookup, key)
        if value is not None:
            values[key] = str(value).strip()
    if "bio" not in values:
        about = _find_value(sources, "about", "summary")
        if about is not None:
            values["bio"] = str(about).strip()
    return values


def _preferences(sources: List[dict]) -> Dict[str, Any]:
    nested = [source["preferences"] for source in sources if isinstance(source.get("preferences"), dict)]
    values = {}
    for key in PREFERENCE_KEYS:
        value = _find_value(nested + sources, key)
        if value is None:
            continue
        if key in PREFERENCE_LIST_KEYS:
            values[key] = [str(item) for item in value] if isinstance(value, list) else [str(value)]
        else:
            values[key] = str(value).strip()
    return values


def document_from_full_profile(full_profile: Any, slug: Optional[str] = None) -> ProfileDocument:
    """Rebuild the local document from the server's view of the profile."""
    if not isinstance(full_profile, dict):
        return ProfileDocument(slug=slug)

    sources = _sources(full_profile)
    collections = extract_remote_collections(full_profile)
    data: Dict[str, Any] = {
        "slug": slug or full_profile.get("slug"),
        "basic_info": _basic_info(full_profile, sources),
        "preferences": _preferences(sources),
    }

    for spec in COLLECTIONS:
        data[spec.name] = {
            "entries": [_entry_values(record, spec) for record in collections[spec.name]],
        }

    experience_type = _find_value(sources, "experience_type", "experienceType")
    if experience_type in ("experienced", "fresher"):
        data["work_experience"]["experience_type"] = experience_type
    elif normalize_tristate(_find_value(sources, "is_fresher")):
        data["work_experience"]["experience_type"] = "fresher"

    data["projects"]["no_projects"] = bool(normalize_tristate(_find_value(sources, "no_projects")))
    data["certifications"]["no_certification"] = bool(
        normalize_tristate(_find_value(sources, "no_certification"))
    )

    return ProfileDocument.model_validate(data)
