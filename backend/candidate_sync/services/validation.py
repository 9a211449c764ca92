"""
Pre-flight validation of a ProfileDocument before it is saved.
"""
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..schemas.profile import ProfileDocument

VALIDATION_MESSAGE = "Please complete required fields before saving."

REQUIRED_BASIC_FIELDS: List[Tuple[str, str]] = [
    ("first_name", "Please enter First Name"),
    ("last_name", "Please enter Last Name"),
    ("email", "Please enter Email Address"),
    ("phone", "Please enter Phone number"),
    ("location", "Please enter Location"),
    ("citizenship_status", "Please select Citizenship status"),
    ("gender", "Please select Gender"),
    ("ethnicity", "Please select Ethnicity"),
    ("current_status", "Please enter your current status and goal"),
]

REQUIRED_EDUCATION_FIELDS = [
    ("course_name", "Please enter the Course Name"),
    ("major", "Please enter Major"),
    ("institution", "Please enter Institution"),
]

REQUIRED_WORK_FIELDS = [
    ("company", "Please enter Company Name"),
    ("role", "Please enter Role"),
    ("start_date", "Please enter start date"),
]

REQUIRED_PROJECT_FIELDS = [
    ("project_name", "Please enter Project name"),
]

REQUIRED_CERTIFICATION_FIELDS = [
    ("name", "Please enter Name of certification"),
]

REQUIRED_LANGUAGE_FIELDS = [
    ("language", "Please select Language"),
    ("speaking", "Please select Speaking level"),
    ("reading", "Please select Reading level"),
    ("writing", "Please select Writing level"),
]

REQUIRED_PREFERENCE_FIELDS = [
    ("availability", "Please enter your earliest availability for full-time opportunities"),
    ("desired_salary", "Please select desired salary"),
]


class ValidationResult(BaseModel):
    # Error id -> message, in the order the fields appear on the form
    errors: Dict[str, str] = Field(default_factory=dict)
    first_error_id: Optional[str] = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def first_message(self) -> Optional[str]:
        if self.first_error_id is None:
            return None
        return self.errors.get(self.first_error_id)

    def add(self, error_id: str, message: str):
        if error_id in self.errors:
            return
        self.errors[error_id] = message
        if self.first_error_id is None:
            self.first_error_id = error_id


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_entries(result: ValidationResult, section: str, entries, required):
    if not entries:
        for field_name, message in required:
            result.add(f"{section}.0.{field_name}", message)
        return
    for idx, entry in enumerate(entries):
        for field_name, message in required:
            if _is_blank(getattr(entry, field_name, None)):
                result.add(f"{section}.{idx}.{field_name}", message)


def validate_required_fields(document: ProfileDocument) -> ValidationResult:
    """Collect every missing required field; nothing here touches the network."""
    result = ValidationResult()

    for field_name, message in REQUIRED_BASIC_FIELDS:
        if _is_blank(getattr(document.basic_info, field_name)):
            result.add(f"basic_info.{field_name}", message)

    _check_entries(result, "education", document.education.entries, REQUIRED_EDUCATION_FIELDS)

    if document.work_experience.experience_type != "fresher":
        _check_entries(
            result, "work_experience", document.work_experience.entries, REQUIRED_WORK_FIELDS
        )

    if not any(not _is_blank(skill.name) for skill in document.skills.entries):
        result.add("skills.entries", "Please add at least one skill")

    if not document.projects.no_projects:
        _check_entries(result, "projects", document.projects.entries, REQUIRED_PROJECT_FIELDS)

    if not document.certifications.no_certification:
        _check_entries(
            result, "certifications", document.certifications.entries, REQUIRED_CERTIFICATION_FIELDS
        )

    _check_entries(result, "languages", document.languages.entries, REQUIRED_LANGUAGE_FIELDS)

    for field_name, message in REQUIRED_PREFERENCE_FIELDS:
        if _is_blank(getattr(document.preferences, field_name)):
            result.add(f"preferences.{field_name}", message)

    return result
