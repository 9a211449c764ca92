"""
Profile document schemas - the locally edited, denormalized candidate profile
"""
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import AliasChoices, BaseModel, Field


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class DocumentModel(BaseModel):
    """Base for every document model: accepts snake_case or camelCase input."""

    class Config:
        populate_by_name = True
        # Parsed resumes send grades, salaries and years as numbers
        coerce_numbers_to_str = True

    @classmethod
    def canonical_keys(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Rename alias keys in `data` to field names; unknown keys are dropped."""
        lookup = {}
        for field_name, info in cls.model_fields.items():
            lookup[field_name] = field_name
            alias = info.validation_alias
            if isinstance(alias, AliasChoices):
                for choice in alias.choices:
                    if isinstance(choice, str):
                        lookup[choice] = field_name
            elif isinstance(alias, str):
                lookup[alias] = field_name

        result = {}
        for key, value in data.items():
            field_name = lookup.get(key)
            if field_name is not None:
                result[field_name] = value
        return result


class EntryModel(DocumentModel):
    # Present once the record exists remotely
    id: Optional[Union[int, str]] = None


# ============================================================================
# Singleton Sections
# ============================================================================

class BasicInfo(DocumentModel):
    first_name: Optional[str] = Field(None, validation_alias=_alias("first_name", "firstName"))
    last_name: Optional[str] = Field(None, validation_alias=_alias("last_name", "lastName"))
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    citizenship_status: Optional[str] = Field(
        None, validation_alias=_alias("citizenship_status", "citizenshipStatus", "citizenship")
    )
    gender: Optional[str] = None
    ethnicity: Optional[str] = None
    current_status: Optional[str] = Field(None, validation_alias=_alias("current_status", "currentStatus"))
    linkedin_url: Optional[str] = Field(None, validation_alias=_alias("linkedin_url", "linkedinUrl"))
    github_url: Optional[str] = Field(None, validation_alias=_alias("github_url", "githubUrl"))
    portfolio_url: Optional[str] = Field(None, validation_alias=_alias("portfolio_url", "portfolioUrl"))
    bio: Optional[str] = Field(None, validation_alias=_alias("bio", "about", "summary"))


class Preferences(DocumentModel):
    company_size: List[str] = Field(default_factory=list, validation_alias=_alias("company_size", "companySize"))
    job_type: List[str] = Field(default_factory=list, validation_alias=_alias("job_type", "jobType"))
    job_search: List[str] = Field(default_factory=list, validation_alias=_alias("job_search", "jobSearch"))
    career_stage: Optional[str] = Field(None, validation_alias=_alias("career_stage", "careerStage"))
    availability: Optional[str] = None
    desired_salary: Optional[str] = Field(None, validation_alias=_alias("desired_salary", "desiredSalary"))


# ============================================================================
# Collection Entries
# ============================================================================

class EducationEntry(EntryModel):
    course_name: Optional[str] = Field(None, validation_alias=_alias("course_name", "courseName"))
    major: Optional[str] = None
    institution: Optional[str] = None
    grade: Optional[str] = None
    start_date: Optional[str] = Field(None, validation_alias=_alias("start_date", "startDate", "from"))
    end_date: Optional[str] = Field(None, validation_alias=_alias("end_date", "endDate", "to"))


class WorkExperienceEntry(EntryModel):
    company: Optional[str] = None
    role: Optional[str] = None
    start_date: Optional[str] = Field(None, validation_alias=_alias("start_date", "startDate", "from"))
    end_date: Optional[str] = Field(None, validation_alias=_alias("end_date", "endDate", "to"))
    is_current: Optional[bool] = Field(None, validation_alias=_alias("is_current", "isCurrent", "current"))
    description: Optional[str] = None


class SkillEntry(EntryModel):
    name: Optional[str] = None


class ProjectEntry(EntryModel):
    project_name: Optional[str] = Field(None, validation_alias=_alias("project_name", "projectName"))
    description: Optional[str] = Field(
        None, validation_alias=_alias("description", "project_description", "projectDescription")
    )
    is_current: Optional[bool] = Field(None, validation_alias=_alias("is_current", "isCurrent", "current"))
    start_date: Optional[str] = Field(None, validation_alias=_alias("start_date", "startDate", "from"))
    end_date: Optional[str] = Field(None, validation_alias=_alias("end_date", "endDate", "to"))


class AchievementEntry(EntryModel):
    title: Optional[str] = None
    issue_date: Optional[str] = Field(None, validation_alias=_alias("issue_date", "issueDate"))
    description: Optional[str] = None


class CertificationEntry(EntryModel):
    name: Optional[str] = None
    issuing_organization: Optional[str] = Field(
        None, validation_alias=_alias("issuing_organization", "issuingOrganization", "organization")
    )
    issue_date: Optional[str] = Field(None, validation_alias=_alias("issue_date", "issueDate"))
    credential_url: Optional[str] = Field(
        None, validation_alias=_alias("credential_url", "credentialUrl", "credentialIdUrl")
    )


class LanguageEntry(EntryModel):
    language: Optional[str] = None
    speaking: Optional[str] = None
    reading: Optional[str] = None
    writing: Optional[str] = None


# ============================================================================
# List Sections
# ============================================================================

class EducationSection(DocumentModel):
    entries: List[EducationEntry] = Field(default_factory=list)


class WorkExperienceSection(DocumentModel):
    experience_type: Literal["experienced", "fresher"] = Field(
        "experienced", validation_alias=_alias("experience_type", "experienceType")
    )
    entries: List[WorkExperienceEntry] = Field(default_factory=list)


class SkillsSection(DocumentModel):
    entries: List[SkillEntry] = Field(default_factory=list)


class ProjectsSection(DocumentModel):
    no_projects: bool = Field(False, validation_alias=_alias("no_projects", "noProjects"))
    entries: List[ProjectEntry] = Field(default_factory=list)


class AchievementsSection(DocumentModel):
    entries: List[AchievementEntry] = Field(default_factory=list)


class CertificationsSection(DocumentModel):
    no_certification: bool = Field(False, validation_alias=_alias("no_certification", "noCertification"))
    entries: List[CertificationEntry] = Field(default_factory=list)


class LanguagesSection(DocumentModel):
    entries: List[LanguageEntry] = Field(default_factory=list)


# ============================================================================
# Document
# ============================================================================

class ProfileDocument(DocumentModel):
    """Everything the profile editor holds for one candidate."""
    slug: Optional[str] = None
    basic_info: BasicInfo = Field(default_factory=BasicInfo, validation_alias=_alias("basic_info", "basicInfo"))
    preferences: Preferences = Field(
        default_factory=Preferences, validation_alias=_alias("preferences", "preference")
    )
    education: EducationSection = Field(default_factory=EducationSection)
    work_experience: WorkExperienceSection = Field(
        default_factory=WorkExperienceSection, validation_alias=_alias("work_experience", "workExperience")
    )
    skills: SkillsSection = Field(default_factory=SkillsSection)
    projects: ProjectsSection = Field(default_factory=ProjectsSection)
    achievements: AchievementsSection = Field(default_factory=AchievementsSection)
    certifications: CertificationsSection = Field(
        default_factory=CertificationsSection, validation_alias=_alias("certifications", "certification")
    )
    languages: LanguagesSection = Field(default_factory=LanguagesSection)


# Sections a patch may target, keyed by every accepted spelling
SECTION_NAMES = {
    "basic_info": "basic_info",
    "basicInfo": "basic_info",
    "preferences": "preferences",
    "preference": "preferences",
    "education": "education",
    "work_experience": "work_experience",
    "workExperience": "work_experience",
    "skills": "skills",
    "projects": "projects",
    "achievements": "achievements",
    "certifications": "certifications",
    "certification": "certifications",
    "languages": "languages",
}

# Sections that hold a list of entries (the rest are singletons)
LIST_SECTIONS = (
    "education", "work_experience", "skills", "projects",
    "achievements", "certifications", "languages",
)


class DocumentPatch(BaseModel):
    """Request body for merging a partial update into a document."""
    patch: Dict[str, Any] = Field(default_factory=dict)
