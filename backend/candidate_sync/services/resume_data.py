"""
Resume data extraction - turns a parsing-status payload into a section patch.

The status endpoint may return data already shaped like profile sections, or
the raw parser output (flat name/email/skills fields with loosely named
nested lists). Both end up as a patch keyed by section name, ready for the
profile merger.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from ..schemas.profile import SECTION_NAMES
from .normalization import normalize_date, normalize_key, normalize_tristate, pick

logger = logging.getLogger(__name__)

CANDIDATE_KEYS = ("resume", "data", "parsed_data", "parsedData", "resume_data", "resumeData", "userData")
RAW_DATA_KEYS = ("resume", "resume_data", "resumeData")
OTHER_DETAILS_KEYS = ("otherDetails", "other_details")

_SKILL_SEPARATORS = re.compile(r"[,;\n]+")


# ============================================================================
# Helper Functions
# ============================================================================

def _text(value: Any) -> str:
    """String value trimmed; a list contributes its first string."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list) and value and isinstance(value[0], str):
        return value[0].strip()
    return ""


def _field(record: dict, *aliases: str) -> str:
    return _text(pick(record, *aliases))


def _date(record: dict, *aliases: str) -> str:
    return normalize_date(_field(record, *aliases))


def _records(value: Any) -> List[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def split_full_name(full_name: str):
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def split_skills(value: Any) -> List[str]:
    """Skill names from a list or a delimited string, first spelling wins."""
    if isinstance(value, list):
        items = [item.get("name") if isinstance(item, dict) else item for item in value]
        items = [item.strip() for item in items if isinstance(item, str)]
    elif isinstance(value, str):
        items = [item.strip() for item in _SKILL_SEPARATORS.split(value)]
    else:
        return []

    seen = set()
    skills = []
    for item in items:
        key = normalize_key(item)
        if key and key not in seen:
            seen.add(key)
            skills.append(item)
    return skills


# ============================================================================
# Raw Resume Transformers
# ============================================================================

def transform_basic_info(data: dict) -> Dict[str, Any]:
    first_name, last_name = split_full_name(_field(data, "name", "full_name", "fullName"))
    values = {
        "first_name": first_name,
        "last_name": last_name,
        "email": _field(data, "email"),
        "phone": _field(data, "phone", "phone_number", "phoneNumber"),
        "location": _field(data, "location", "address"),
        "linkedin_url": _field(data, "linkedin", "linkedin_url", "linkedinUrl"),
        "github_url": _field(data, "github", "github_url", "githubUrl"),
        "portfolio_url": _field(data, "portfolio", "portfolio_url", "portfolioUrl"),
        "bio": _field(data, "summary", "about", "bio", "objective"),
    }
    return {key: value for key, value in values.items() if value}


def transform_education(data: dict) -> Dict[str, Any]:
    entries = []
    for edu in _records(data.get("education")):
        entry = {
            "course_name": _field(edu, "degree", "course", "courseName", "course_name"),
            "major": _field(edu, "major", "field_of_study", "fieldOfStudy"),
            "institution": _field(edu, "institution", "school", "university"),
            "grade": _field(edu, "grade", "gpa"),
            "start_date": _date(edu, "start_date", "startDate", "from"),
            "end_date": _date(edu, "end_date", "endDate", "to", "graduation_date", "graduationDate"),
        }
        if entry["institution"] or entry["course_name"]:
            entries.append({key: value for key, value in entry.items() if value})
    return {"entries": entries} if entries else {}


def transform_work_experience(data: dict) -> Dict[str, Any]:
    experience = pick(data, "experience", "work_experience", "workExperience")

    # Unstructured text: the candidate has experience but entries are typed by hand
    if isinstance(experience, str):
        return {"experience_type": "experienced", "entries": []} if experience.strip() else {}

    entries = []
    for exp in _records(experience):
        company = _field(exp, "company", "company_name", "companyName")
        role = _field(exp, "role", "position", "title")
        if not company or not role:
            continue
        current = bool(normalize_tristate(pick(exp, "current", "is_current", "isCurrent")))
        entries.append({
            "company": company,
            "role": role,
            "start_date": _date(exp, "start_date", "startDate", "from"),
            "end_date": "" if current else _date(exp, "end_date", "endDate", "to"),
            "is_current": current,
            "description": _field(exp, "description", "responsibilities"),
        })
    return {"experience_type": "experienced", "entries": entries} if entries else {}


def transform_skills(data: dict) -> Dict[str, Any]:
    skills = split_skills(pick(data, "skills", "technical_skills", "technicalSkills"))
    return {"entries": [{"name": name} for name in skills]} if skills else {}


def transform_projects(data: dict) -> Dict[str, Any]:
    entries = []
    for project in _records(data.get("projects")):
        name = _field(project, "name", "title", "project_name", "projectName")
        if not name:
            continue
        current = bool(normalize_tristate(pick(project, "current", "is_current", "isCurrent")))
        entries.append({
            "project_name": name,
            "description": _field(project, "description", "project_description", "projectDescription"),
            "is_current": current,
            "start_date": _date(project, "start_date", "startDate", "from"),
            "end_date": "" if current else _date(project, "end_date", "endDate", "to"),
        })
    return {"no_projects": False, "entries": entries} if entries else {}


def transform_certifications(data: dict) -> Dict[str, Any]:
    entries = []
    for cert in _records(pick(data, "certifications", "certificates")):
        name = _field(cert, "name", "title", "certification_name", "certificationName")
        if not name:
            continue
        entries.append({
            "name": name,
            "issuing_organization": _field(cert, "organization", "issuer", "issued_by", "issuedBy"),
            "issue_date": _date(cert, "issue_date", "issueDate", "date"),
            "credential_url": _field(
                cert, "credential_url", "credentialUrl", "url", "credential_id", "credentialId"
            ),
        })
    return {"no_certification": False, "entries": entries} if entries else {}


def transform_achievements(data: dict) -> Dict[str, Any]:
    entries = []
    for achievement in _records(pick(data, "achievements", "awards")):
        title = _field(achievement, "title", "name")
        if not title:
            continue
        entries.append({
            "title": title,
            "issue_date": _date(achievement, "date", "issue_date", "issueDate"),
            "description": _field(achievement, "description"),
        })
    return {"entries": entries} if entries else {}


def transform_languages(data: dict) -> Dict[str, Any]:
    entries = []
    for item in data.get("languages") or []:
        if isinstance(item, str):
            item = {"language": item}
        if not isinstance(item, dict):
            continue
        language = _field(item, "language", "name")
        if not language:
            continue
        level = _field(item, "proficiency", "level")
        entries.append({
            "language": language,
            "speaking": _field(item, "speaking") or level,
            "reading": _field(item, "reading") or level,
            "writing": _field(item, "writing") or level,
        })
    return {"entries": entries} if entries else {}


TRANSFORMERS = (
    ("basic_info", transform_basic_info),
    ("education", transform_education),
    ("work_experience", transform_work_experience),
    ("skills", transform_skills),
    ("projects", transform_projects),
    ("achievements", transform_achievements),
    ("certifications", transform_certifications),
    ("languages", transform_languages),
)


def transform_resume_data(data: dict) -> Dict[str, Any]:
    """Raw parser output -> section patch. Sections with nothing usable are left out."""
    result = {}
    for section, transformer in TRANSFORMERS:
        value = transformer(data)
        if value:
            result[section] = value
    return result


# ============================================================================
# Extraction
# ============================================================================

def _first_dict(record: dict, keys) -> Optional[dict]:
    for key in keys:
        if isinstance(record.get(key), dict):
            return record[key]
    return None


def _looks_like_raw_resume(candidate: dict) -> bool:
    if "basicInfo" in candidate or "basic_info" in candidate:
        return False
    return (
        isinstance(candidate.get("name"), str)
        or isinstance(candidate.get("email"), str)
        or isinstance(candidate.get("skills"), (list, str))
    )


def _sectioned_patch(candidate: dict) -> Dict[str, Any]:
    patch: Dict[str, Any] = {}
    for key, value in candidate.items():
        section = SECTION_NAMES.get(key)
        if section and isinstance(value, dict) and section not in patch:
            patch[section] = value

    other = _first_dict(candidate, OTHER_DETAILS_KEYS)
    if other:
        languages = other.get("languages")
        preferences = {key: value for key, value in other.items() if key != "languages"}
        if isinstance(languages, list) and "languages" not in patch:
            patch["languages"] = {"entries": languages}
        if preferences:
            patch["preferences"] = {**preferences, **patch.get("preferences", {})}
    return patch


def extract_user_data_patch(payload: Any) -> Dict[str, Any]:
    """
    Section patch recovered from a parsing-status payload; {} when nothing
    usable is present.
    """
    if not isinstance(payload, dict):
        return {}

    candidate = _first_dict(payload, CANDIDATE_KEYS) or payload
    patch = _sectioned_patch(candidate)

    raw = (
        _first_dict(payload, RAW_DATA_KEYS)
        or _first_dict(candidate, ("resume_data", "resumeData"))
        or (candidate if _looks_like_raw_resume(candidate) else None)
    )
    if raw:
        for section, value in transform_resume_data(raw).items():
            # Sectioned data wins over what we derive from raw fields
            if not patch.get(section):
                patch[section] = value

    logger.debug(f"[Resume Data] Extracted sections: {sorted(patch)}")
    return patch
