"""
Collection definitions - how each profile section maps onto a remote collection.

A CollectionSpec carries the three functions the diff planner needs:
`normalize` (entry -> comparable dict), `content_key` (normalized dict -> key)
and `to_payload` (local entry -> request body).
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel

from .normalization import FieldKind, normalize, normalize_key, normalize_string, pick


KEY_SEPARATOR = "::"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind = FieldKind.STRING
    # Other spellings the server or an older client may use for this field
    aliases: Tuple[str, ...] = ()
    # Stands in for a missing value on both sides of a comparison
    default: Any = None

    @property
    def lookup(self) -> Tuple[str, ...]:
        return (self.name,) + self.aliases

    def read(self, data: Dict[str, Any]) -> Any:
        return pick(data, *self.lookup, default=self.default)


@dataclass(frozen=True)
class CollectionSpec:
    name: str
    path: str
    normalize: Callable[[Any], Dict[str, Any]]
    content_key: Callable[[Dict[str, Any]], str]
    to_payload: Callable[[Any], Dict[str, Any]]
    # Remote records this predicate accepts are never deleted
    soft_retain: Optional[Callable[[Any], bool]] = None
    id_aliases: Tuple[str, ...] = field(default=("id", "pk"))
    fields: Tuple[FieldSpec, ...] = ()


# ============================================================================
# Helper Functions
# ============================================================================

def as_mapping(entry: Any) -> Dict[str, Any]:
    """Local entries are pydantic models, remote ones plain dicts."""
    if isinstance(entry, BaseModel):
        return entry.model_dump()
    if isinstance(entry, dict):
        return entry
    return {}


def join_key_parts(*parts: Any) -> str:
    """
    Join normalized key parts with '::'.

    Trailing blank parts are dropped so "Python" and "Python::" collide;
    when every part is blank the key is "" and the entry takes no part in
    matching.
    """
    normalized = [normalize_key(part) for part in parts]
    while normalized and not normalized[-1]:
        normalized.pop()
    return KEY_SEPARATOR.join(normalized)


def _payload_value(kind: FieldKind, value: Any) -> Any:
    if kind == FieldKind.KEY:
        # Keys compare case-insensitively but are sent as typed
        return normalize_string(value) or None
    normalized = normalize(kind, value)
    if kind == FieldKind.TRISTATE:
        return normalized
    if kind == FieldKind.STRING_SET:
        return list(normalized)
    return normalized or None


def build_collection(
    name: str,
    path: str,
    fields: Tuple[FieldSpec, ...],
    key_fields: Tuple[str, ...],
    soft_retain: Optional[Callable[[Any], bool]] = None,
    id_aliases: Tuple[str, ...] = ("id", "pk"),
) -> CollectionSpec:
    """Derive the three collection functions from a field list."""

    def normalize_entry(entry: Any) -> Dict[str, Any]:
        data = as_mapping(entry)
        return {f.name: normalize(f.kind, f.read(data)) for f in fields}

    def content_key(normalized: Dict[str, Any]) -> str:
        return join_key_parts(*(normalized.get(key_field) for key_field in key_fields))

    def to_payload(entry: Any) -> Dict[str, Any]:
        data = as_mapping(entry)
        return {f.name: _payload_value(f.kind, f.read(data)) for f in fields}

    return CollectionSpec(
        name=name,
        path=path,
        normalize=normalize_entry,
        content_key=content_key,
        to_payload=to_payload,
        soft_retain=soft_retain,
        id_aliases=id_aliases,
        fields=fields,
    )


# ============================================================================
# Collections
# ============================================================================

EDUCATION = build_collection(
    "education",
    "education",
    (
        FieldSpec("course_name", aliases=("courseName", "degree", "course")),
        FieldSpec("major", aliases=("field_of_study", "fieldOfStudy")),
        FieldSpec("institution", aliases=("school", "university")),
        FieldSpec("grade", aliases=("gpa",)),
        FieldSpec("start_date", FieldKind.DATE, ("startDate", "from")),
        FieldSpec("end_date", FieldKind.DATE, ("endDate", "to", "graduation_date")),
    ),
    key_fields=("course_name", "institution"),
    id_aliases=("id", "pk", "education_id", "educationId"),
)

WORK_EXPERIENCE = build_collection(
    "work_experience",
    "work-experience",
    (
        FieldSpec("company", aliases=("company_name", "companyName")),
        FieldSpec("role", aliases=("position", "title")),
        FieldSpec("start_date", FieldKind.DATE, ("startDate", "from")),
        FieldSpec("end_date", FieldKind.DATE, ("endDate", "to")),
        FieldSpec("is_current", FieldKind.TRISTATE, ("isCurrent", "current"), default=False),
        FieldSpec("description", aliases=("responsibilities",)),
    ),
    key_fields=("company", "role"),
    id_aliases=("id", "pk", "work_experience_id", "workExperienceId"),
)

SKILLS = build_collection(
    "skills",
    "skills",
    # Case and spacing differences are not edits
    (FieldSpec("name", FieldKind.KEY, ("skill", "skill_name", "label")),),
    key_fields=("name",),
    id_aliases=("id", "pk", "skill_id", "skillId"),
)

PROJECTS = build_collection(
    "projects",
    "projects",
    (
        FieldSpec("project_name", aliases=("projectName", "name", "title")),
        FieldSpec("description", aliases=("project_description", "projectDescription")),
        FieldSpec("is_current", FieldKind.TRISTATE, ("isCurrent", "current"), default=False),
        FieldSpec("start_date", FieldKind.DATE, ("startDate", "from")),
        FieldSpec("end_date", FieldKind.DATE, ("endDate", "to")),
    ),
    key_fields=("project_name",),
    id_aliases=("id", "pk", "project_id", "projectId"),
)

ACHIEVEMENTS = build_collection(
    "achievements",
    "achievements",
    (
        FieldSpec("title", aliases=("name",)),
        FieldSpec("issue_date", FieldKind.DATE, ("issueDate", "date")),
        FieldSpec("description"),
    ),
    key_fields=("title", "issue_date"),
    id_aliases=("id", "pk", "achievement_id", "achievementId"),
)

CERTIFICATIONS = build_collection(
    "certifications",
    "certifications",
    (
        FieldSpec("name", aliases=("title", "certification_name", "certificationName")),
        FieldSpec("issuing_organization", aliases=("organization", "issuer", "issued_by")),
        FieldSpec("issue_date", FieldKind.DATE, ("issueDate", "date")),
        FieldSpec("credential_url", aliases=("credentialUrl", "credentialIdUrl", "url")),
    ),
    key_fields=("name", "issuing_organization"),
    id_aliases=("id", "pk", "certification_id", "certificationId"),
)

LANGUAGES = build_collection(
    "languages",
    "languages",
    (
        FieldSpec("language", aliases=("name",)),
        FieldSpec("speaking", FieldKind.KEY),
        FieldSpec("reading", FieldKind.KEY),
        FieldSpec("writing", FieldKind.KEY),
    ),
    key_fields=("language",),
    id_aliases=("id", "pk", "language_id", "languageId"),
)

# Plan/execute order
COLLECTIONS = (
    EDUCATION,
    WORK_EXPERIENCE,
    SKILLS,
    PROJECTS,
    ACHIEVEMENTS,
    CERTIFICATIONS,
    LANGUAGES,
)

COLLECTIONS_BY_NAME = {spec.name: spec for spec in COLLECTIONS}


def get_collection(name: str) -> CollectionSpec:
    try:
        return COLLECTIONS_BY_NAME[name]
    except KeyError:
        raise ValueError(f"Unknown collection: {name}")
